"""
Feed paging rules that do not touch the database.

Ordering key is always (created_at, id). `latest` walks it descending,
`oldest` ascending. A page is fetched with one lookahead row (limit + 1):
if the lookahead row exists it is dropped and the page has a successor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from core import settings

from . import cursors

FILTER_ALL = "all"
FILTER_FRIENDS = "friends"
FILTERS = (FILTER_ALL, FILTER_FRIENDS)

SORT_LATEST = "latest"
SORT_OLDEST = "oldest"
SORTS = (SORT_LATEST, SORT_OLDEST)

DEFAULT_LIMIT = 5
DEFAULT_MAX_LIMIT = 50


def default_limit() -> int:
    value = settings.env_int("FEED_DEFAULT_LIMIT", DEFAULT_LIMIT)
    return value if value > 0 else DEFAULT_LIMIT


def max_limit() -> int:
    value = settings.env_int("FEED_MAX_LIMIT", DEFAULT_MAX_LIMIT)
    return max(value, default_limit())


def parse_limit(raw: Any) -> int:
    """
    Missing, unparseable and non-positive limits fall back to the default.
    Oversized limits are clamped.
    """
    if isinstance(raw, bool):
        return default_limit()
    try:
        value = int(str(raw).strip()) if raw is not None else 0
    except ValueError:
        return default_limit()
    if value <= 0:
        return default_limit()
    return min(value, max_limit())


def normalize_filter(raw: str | None) -> str:
    value = (raw or "").strip().lower()
    return value if value in FILTERS else FILTER_ALL


def normalize_sort(raw: str | None) -> str:
    value = (raw or "").strip().lower()
    return value if value in SORTS else SORT_LATEST


@dataclass(frozen=True)
class FeedQuery:
    viewer_id: int
    limit: int = DEFAULT_LIMIT
    filter: str = FILTER_ALL
    sort: str = SORT_LATEST
    author_id: int | None = None

    @property
    def descending(self) -> bool:
        return self.sort == SORT_LATEST

    @property
    def context(self) -> str:
        return cursors.context_signature(
            {"filter": self.filter, "sort": self.sort, "author_id": self.author_id}
        )


def ordering_key(row: dict[str, Any]) -> tuple:
    return (row["created_at"], int(row["id"]))


@dataclass(frozen=True)
class Page:
    rows: list[dict[str, Any]] = field(default_factory=list)
    # Id of the last kept row when another page follows, else None.
    next_after_id: int | None = None

    @property
    def has_more(self) -> bool:
        return self.next_after_id is not None


def trim_lookahead(rows: list[dict[str, Any]], limit: int) -> Page:
    if limit <= 0:
        raise ValueError("limit must be positive.")
    if len(rows) > limit:
        kept = list(rows[:limit])
        return Page(rows=kept, next_after_id=int(kept[-1]["id"]))
    return Page(rows=list(rows))
