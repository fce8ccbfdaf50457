"""
Friend request state machine and friendship listing.

pending --accept--> accepted (friendship edge created)
pending --reject--> rejected
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from auth import repository as user_repository

from . import repository

logger = logging.getLogger(__name__)


def _profile(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": int(row["id"]),
        "name": row.get("name"),
        "avatar": row.get("avatar"),
        "bio": row.get("bio"),
    }


def _request_response(row: dict[str, Any]) -> dict[str, Any]:
    response = {
        "id": int(row["id"]),
        "senderId": int(row["sender_id"]),
        "receiverId": int(row["receiver_id"]),
        "status": str(row["status"]),
        "createdAt": row["created_at"],
    }
    if "sender_name" in row:
        response["sender"] = {
            "id": int(row["sender_id"]),
            "name": row["sender_name"],
            "avatar": row.get("sender_avatar"),
        }
    if "receiver_name" in row:
        response["receiver"] = {
            "id": int(row["receiver_id"]),
            "name": row["receiver_name"],
            "avatar": row.get("receiver_avatar"),
        }
    return response


async def list_friends(*, viewer_id: int) -> dict[str, Any]:
    rows = await repository.list_friends(viewer_id)
    friends = [dict(_profile(r), friendsSince=r.get("friends_since")) for r in rows]
    return {"friends": friends, "count": len(friends)}


async def send_request(*, viewer: dict, target_id: int) -> dict[str, Any]:
    viewer_id = int(viewer["id"])
    if target_id == viewer_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot send a friend request to yourself.",
        )

    target = await user_repository.get_user_by_id(target_id)
    if target is None or not bool(target.get("is_active", False)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")

    if await repository.are_friends(viewer_id, target_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="You are already friends.")

    if await repository.get_pending_request(sender_id=viewer_id, receiver_id=target_id) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Friend request already sent.")

    # The target already asked us: answering with a request accepts theirs.
    reverse = await repository.get_pending_request(sender_id=target_id, receiver_id=viewer_id)
    if reverse is not None:
        accepted = await repository.accept_request(int(reverse["id"]), receiver_name=str(viewer["name"]))
        if accepted is not None:
            logger.info("friend_request_auto_accepted request_id=%s", reverse["id"])
            return {"request": _request_response(accepted), "friends": True}

    row = await repository.create_request(
        sender_id=viewer_id,
        receiver_id=target_id,
        sender_name=str(viewer["name"]),
    )
    logger.info("friend_request_sent request_id=%s sender_id=%s receiver_id=%s", row["id"], viewer_id, target_id)
    return {"request": _request_response(row), "friends": False}


async def list_requests(*, viewer_id: int) -> dict[str, Any]:
    incoming = await repository.list_incoming_requests(viewer_id)
    outgoing = await repository.list_outgoing_requests(viewer_id)
    return {
        "incoming": [_request_response(r) for r in incoming],
        "outgoing": [_request_response(r) for r in outgoing],
    }


async def _pending_for_receiver(request_id: int, *, viewer_id: int) -> dict[str, Any]:
    row = await repository.get_request(request_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Friend request not found.")
    if int(row["receiver_id"]) != viewer_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the receiver can answer a friend request.",
        )
    if row["status"] != "pending":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Friend request is already {row['status']}.",
        )
    return row


async def accept_request(request_id: int, *, viewer: dict) -> dict[str, Any]:
    viewer_id = int(viewer["id"])
    await _pending_for_receiver(request_id, viewer_id=viewer_id)

    row = await repository.accept_request(request_id, receiver_name=str(viewer["name"]))
    if row is None:
        # Answered concurrently between the check and the update.
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Friend request is no longer pending.")
    logger.info("friend_request_accepted request_id=%s", request_id)
    return {"request": _request_response(row)}


async def reject_request(request_id: int, *, viewer_id: int) -> dict[str, Any]:
    await _pending_for_receiver(request_id, viewer_id=viewer_id)

    row = await repository.reject_request(request_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Friend request is no longer pending.")
    logger.info("friend_request_rejected request_id=%s", request_id)
    return {"request": _request_response(row)}


async def remove_friend(friend_id: int, *, viewer_id: int) -> dict[str, Any]:
    if friend_id == viewer_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid friend id.")
    if not await repository.delete_friendship(viewer_id, friend_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Friendship not found.")
    return {"ok": True, "friendId": friend_id}


async def suggestions(*, viewer_id: int, limit: int = 20) -> dict[str, Any]:
    rows = await repository.list_suggestions(viewer_id, limit=limit)
    return {"users": [_profile(r) for r in rows]}
