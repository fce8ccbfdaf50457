"""
Profile API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from feed import service as feed_service

from . import schemas, service

router = APIRouter(prefix="/users")


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return {"user": await service.get_user(user_id)}


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    request: schemas.UpdateProfileRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    user = await service.update_user(user_id, request, viewer_id=int(current_user["id"]))
    return {"message": "Profile updated successfully", "user": user}


@router.get("/{user_id}/posts")
async def get_user_posts(
    user_id: int,
    limit: str | None = Query(default=None),
    cursor: str | None = Query(default=None, max_length=512),
    sort: str | None = Query(default=None),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    await service.get_user(user_id)
    query = feed_service.build_query(
        viewer_id=int(current_user["id"]),
        limit=limit,
        sort=sort,
        author_id=user_id,
    )
    return await feed_service.page(query, cursor=cursor)
