"""
Post business logic: ownership rules, response shaping, notifications.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from notifications import repository as notification_repository

from . import repository, schemas

logger = logging.getLogger(__name__)


def to_post_response(row: dict[str, Any]) -> dict[str, Any]:
    """
    Wire shape of one post (camelCase, matches the web client).
    """
    return {
        "id": int(row["id"]),
        "content": str(row["content"]),
        "imageUrl": row.get("image_url"),
        "createdAt": row["created_at"],
        "updatedAt": row.get("updated_at"),
        "author": {
            "id": int(row["author_id"]),
            "name": row.get("author_name"),
            "avatar": row.get("author_avatar"),
        },
        "likesCount": int(row.get("likes_count") or 0),
        "commentsCount": int(row.get("comments_count") or 0),
        "isLiked": bool(row.get("is_liked", False)),
    }


def to_comment_response(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": int(row["id"]),
        "postId": int(row["post_id"]),
        "content": str(row["content"]),
        "createdAt": row["created_at"],
        "author": {
            "id": int(row["author_id"]),
            "name": row.get("author_name"),
            "avatar": row.get("author_avatar"),
        },
    }


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found.")


async def _require_owner(post_id: int, *, viewer_id: int, action: str) -> None:
    owner_id = await repository.get_post_owner(post_id)
    if owner_id is None:
        raise _not_found()
    if owner_id != viewer_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You can only {action} your own posts.",
        )


async def get_post(post_id: int, *, viewer_id: int) -> dict[str, Any]:
    row = await repository.get_post(post_id, viewer_id=viewer_id)
    if row is None:
        raise _not_found()
    post = to_post_response(row)
    post["comments"] = [to_comment_response(c) for c in await repository.list_comments(post_id)]
    return post


async def create_post(payload: schemas.CreatePostRequest, *, viewer_id: int) -> dict[str, Any]:
    post_id = await repository.create_post(
        author_id=viewer_id,
        content=payload.content,
        image_url=payload.image_url or None,
    )
    logger.info("post_created post_id=%s author_id=%s", post_id, viewer_id)
    return await get_post(post_id, viewer_id=viewer_id)


async def update_post(
    post_id: int,
    payload: schemas.UpdatePostRequest,
    *,
    viewer_id: int,
) -> dict[str, Any]:
    await _require_owner(post_id, viewer_id=viewer_id, action="edit")
    updated = await repository.update_post(
        post_id,
        content=payload.content,
        image_url=payload.image_url or None,
        remove_image=payload.remove_image,
    )
    if not updated:
        raise _not_found()
    return await get_post(post_id, viewer_id=viewer_id)


async def delete_post(post_id: int, *, viewer_id: int) -> dict[str, Any]:
    await _require_owner(post_id, viewer_id=viewer_id, action="delete")
    if not await repository.delete_post(post_id):
        raise _not_found()
    logger.info("post_deleted post_id=%s author_id=%s", post_id, viewer_id)
    return {"ok": True, "postId": post_id}


async def toggle_like(post_id: int, *, viewer: dict) -> dict[str, Any]:
    viewer_id = int(viewer["id"])
    owner_id = await repository.get_post_owner(post_id)
    if owner_id is None:
        raise _not_found()

    liked, likes_count = await repository.toggle_like(post_id, user_id=viewer_id)
    if liked and owner_id != viewer_id:
        await notification_repository.create_notification(
            user_id=owner_id,
            actor_id=viewer_id,
            type="like",
            post_id=post_id,
            message=f"{viewer.get('name') or 'Someone'} liked your post",
        )
    return {"liked": liked, "likesCount": likes_count}


async def add_comment(
    post_id: int,
    payload: schemas.CreateCommentRequest,
    *,
    viewer: dict,
) -> dict[str, Any]:
    viewer_id = int(viewer["id"])
    owner_id = await repository.get_post_owner(post_id)
    if owner_id is None:
        raise _not_found()

    row = await repository.create_comment(
        post_id=post_id,
        author_id=viewer_id,
        content=payload.content,
    )
    if owner_id != viewer_id:
        await notification_repository.create_notification(
            user_id=owner_id,
            actor_id=viewer_id,
            type="comment",
            post_id=post_id,
            message=f"{viewer.get('name') or 'Someone'} commented on your post",
        )
    return to_comment_response(row)


async def delete_comment(post_id: int, comment_id: int, *, viewer_id: int) -> dict[str, Any]:
    comment = await repository.get_comment(comment_id)
    if comment is None or int(comment["post_id"]) != post_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found.")

    # Comment author or the post author may delete.
    if int(comment["author_id"]) != viewer_id:
        owner_id = await repository.get_post_owner(post_id)
        if owner_id != viewer_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only delete your own comments.",
            )

    await repository.delete_comment(comment_id)
    return {"ok": True, "commentId": comment_id}
