"""
Notification business logic.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status

from . import repository

LIST_LIMIT = 50


def to_notification_response(row: dict[str, Any]) -> dict[str, Any]:
    response = {
        "id": int(row["id"]),
        "type": str(row["type"]),
        "message": str(row["message"]),
        "postId": row.get("post_id"),
        "read": bool(row["read"]),
        "createdAt": row["created_at"],
        "actorId": int(row["actor_id"]),
    }
    if "actor_name" in row:
        response["actor"] = {
            "id": int(row["actor_id"]),
            "name": row["actor_name"],
            "avatar": row.get("actor_avatar"),
        }
    return response


async def list_notifications(*, viewer_id: int) -> dict[str, Any]:
    rows = await repository.list_notifications(viewer_id, limit=LIST_LIMIT)
    return {"notifications": [to_notification_response(r) for r in rows]}


async def mark_read(notification_id: int, *, viewer_id: int) -> dict[str, Any]:
    row = await repository.get_notification(notification_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found.")
    if int(row["user_id"]) != viewer_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized.")

    await repository.mark_read(notification_id)
    return {"message": "Notification marked as read"}


async def mark_all_read(*, viewer_id: int) -> dict[str, Any]:
    updated = await repository.mark_all_read(viewer_id)
    return {"message": "All notifications marked as read", "updated": updated}


async def unread_count(*, viewer_id: int) -> dict[str, int]:
    return {"count": await repository.count_unread(viewer_id)}
