"""
Post API endpoints (single post CRUD, likes, comments).

The paginated list (`GET /posts`) lives in `feed/router.py`.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter(prefix="/posts")


@router.post("", status_code=201)
async def create_post(
    request: schemas.CreatePostRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    post = await service.create_post(request, viewer_id=int(current_user["id"]))
    return {"post": post}


@router.get("/{post_id}")
async def get_post(
    post_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    post = await service.get_post(post_id, viewer_id=int(current_user["id"]))
    return {"post": post}


@router.put("/{post_id}")
async def update_post(
    post_id: int,
    request: schemas.UpdatePostRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    post = await service.update_post(post_id, request, viewer_id=int(current_user["id"]))
    return {"post": post}


@router.delete("/{post_id}")
async def delete_post(
    post_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.delete_post(post_id, viewer_id=int(current_user["id"]))


@router.post("/{post_id}/like")
async def toggle_like(
    post_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.toggle_like(post_id, viewer=current_user)


@router.post("/{post_id}/comments", status_code=201)
async def add_comment(
    post_id: int,
    request: schemas.CreateCommentRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    comment = await service.add_comment(post_id, request, viewer=current_user)
    return {"comment": comment}


@router.delete("/{post_id}/comments/{comment_id}")
async def delete_comment(
    post_id: int,
    comment_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.delete_comment(post_id, comment_id, viewer_id=int(current_user["id"]))
