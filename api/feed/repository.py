"""
Feed SQL (raw): keyset pagination over posts.

The keyset predicate compares the row value (created_at, id) against the
cursor row's key, so ties on created_at are broken by id and no row is
skipped or repeated at a page boundary. Backed by the
`posts_created_at_id_idx` composite index.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from core import db
from posts.repository import POST_SELECT

from . import pager

# sort -> (keyset comparison, ORDER BY direction)
_DIRECTIONS = {
    pager.SORT_LATEST: ("<", "DESC"),
    pager.SORT_OLDEST: (">", "ASC"),
}


async def get_post_key(post_id: int) -> dict[str, Any] | None:
    """
    Ordering key of a post, or None when the post does not exist.
    """
    return await db.fetch_one(
        "SELECT id, created_at FROM posts WHERE id = $1",
        post_id,
    )


async def fetch_page_rows(
    *,
    viewer_id: int,
    sort: str,
    limit: int,
    author_ids: list[int] | None = None,
    after: tuple[datetime, int] | None = None,
) -> list[dict[str, Any]]:
    """
    Fetch up to `limit` posts strictly after `after` in `sort` order.

    `author_ids=None` means every author; callers must short-circuit an
    empty author set themselves.
    """
    comparison, direction = _DIRECTIONS[sort]
    after_created_at, after_id = after if after is not None else (None, None)
    return await db.fetch_all(
        POST_SELECT
        + f"""
        WHERE ($2::bigint[] IS NULL OR p.author_id = ANY($2::bigint[]))
          AND (
            $3::timestamptz IS NULL
            OR (p.created_at, p.id) {comparison} ($3::timestamptz, $4::bigint)
          )
        ORDER BY p.created_at {direction}, p.id {direction}
        LIMIT $5
        """,
        viewer_id,
        author_ids,
        after_created_at,
        after_id,
        limit,
    )
