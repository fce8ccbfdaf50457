"""
Feed orchestration.

Flow for one page:
1) Decode the cursor, check its context, resolve the cursor row's key
2) Resolve the author scope (friends filter, single-author profile listing)
3) Fetch limit + 1 rows strictly after that key (one SELECT)
4) Trim the lookahead row and mint the next cursor
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from friends import repository as friends_repository
from posts import service as post_service

from . import cursors, pager, repository

logger = logging.getLogger(__name__)


def build_query(
    *,
    viewer_id: int,
    limit: Any = None,
    filter: str | None = None,
    sort: str | None = None,
    author_id: int | None = None,
) -> pager.FeedQuery:
    return pager.FeedQuery(
        viewer_id=viewer_id,
        limit=pager.parse_limit(limit),
        filter=pager.normalize_filter(filter),
        sort=pager.normalize_sort(sort),
        author_id=author_id,
    )


def _empty_page() -> dict[str, Any]:
    return {"posts": [], "pagination": {"hasMore": False}}


async def _author_scope(query: pager.FeedQuery) -> list[int] | None:
    """
    None means "every author". An empty list means nothing can match.
    """
    scope = [query.author_id] if query.author_id is not None else None
    if query.filter != pager.FILTER_FRIENDS:
        return scope

    friend_ids = set(await friends_repository.list_friend_ids(query.viewer_id))
    if scope is None:
        return sorted(friend_ids)
    return [author_id for author_id in scope if author_id in friend_ids]


async def _resolve_after(query: pager.FeedQuery, cursor: str | None) -> tuple | None:
    if cursor is None or not cursor.strip():
        return None

    decoded = cursors.decode_cursor(cursor)
    cursors.ensure_context(decoded, query.context)
    key_row = await repository.get_post_key(decoded.post_id)
    if key_row is None:
        raise cursors.CursorNotFound("Cursor not found.")
    return pager.ordering_key(key_row)


async def page(query: pager.FeedQuery, *, cursor: str | None = None) -> dict[str, Any]:
    """
    One page of the feed as the wire shape:
    {"posts": [...], "pagination": {"hasMore": bool, "nextCursor"?: str}}
    """
    try:
        after = await _resolve_after(query, cursor)
    except cursors.CursorError as exc:
        logger.info("feed_cursor_rejected viewer_id=%s reason=%s", query.viewer_id, exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    author_ids = await _author_scope(query)
    if author_ids is not None and not author_ids:
        return _empty_page()

    rows = await repository.fetch_page_rows(
        viewer_id=query.viewer_id,
        sort=query.sort,
        limit=query.limit + 1,
        author_ids=author_ids,
        after=after,
    )
    result = pager.trim_lookahead(rows, query.limit)

    pagination: dict[str, Any] = {"hasMore": result.has_more}
    if result.next_after_id is not None:
        pagination["nextCursor"] = cursors.encode_cursor(result.next_after_id, context=query.context)

    logger.debug(
        "feed_page viewer_id=%s filter=%s sort=%s limit=%s returned=%s has_more=%s",
        query.viewer_id,
        query.filter,
        query.sort,
        query.limit,
        len(result.rows),
        result.has_more,
    )
    return {
        "posts": [post_service.to_post_response(row) for row in result.rows],
        "pagination": pagination,
    }
