"""
Friend API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter(prefix="/friends")


@router.get("")
async def list_friends(
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.list_friends(viewer_id=int(current_user["id"]))


@router.get("/suggestions")
async def suggestions(
    limit: int = Query(20, ge=1, le=100),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.suggestions(viewer_id=int(current_user["id"]), limit=limit)


@router.get("/requests")
async def list_requests(
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.list_requests(viewer_id=int(current_user["id"]))


@router.post("/requests", status_code=201)
async def send_request(
    request: schemas.FriendRequestCreate,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.send_request(viewer=current_user, target_id=request.user_id)


@router.post("/requests/{request_id}/accept")
async def accept_request(
    request_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.accept_request(request_id, viewer=current_user)


@router.post("/requests/{request_id}/reject")
async def reject_request(
    request_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.reject_request(request_id, viewer_id=int(current_user["id"]))


@router.delete("/{friend_id}")
async def remove_friend(
    friend_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.remove_friend(friend_id, viewer_id=int(current_user["id"]))
