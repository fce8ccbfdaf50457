"""
Notification API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies

from . import service

router = APIRouter(prefix="/notifications")


@router.get("")
async def list_notifications(
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.list_notifications(viewer_id=int(current_user["id"]))


@router.get("/unread/count")
async def unread_count(
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.unread_count(viewer_id=int(current_user["id"]))


@router.patch("/read-all")
async def mark_all_read(
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.mark_all_read(viewer_id=int(current_user["id"]))


@router.patch("/{notification_id}/read")
async def mark_read(
    notification_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.mark_read(notification_id, viewer_id=int(current_user["id"]))
