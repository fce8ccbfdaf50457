"""
Feed API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies

from . import service

router = APIRouter()


@router.get("/posts")
@router.get("/feed")
async def get_feed(
    # Taken as text so a bad limit falls back to the default instead of a 422.
    limit: str | None = Query(default=None),
    cursor: str | None = Query(default=None, max_length=512),
    filter: str | None = Query(default=None),
    sort: str | None = Query(default=None),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    query = service.build_query(
        viewer_id=int(current_user["id"]),
        limit=limit,
        filter=filter,
        sort=sort,
    )
    return await service.page(query, cursor=cursor)
