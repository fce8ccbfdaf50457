"""
Friendship persistence (raw SQL).

A friendship is an undirected edge stored once as the canonical pair
(user_low_id, user_high_id) with user_low_id < user_high_id. Lookups by
either endpoint go through `edge()` or the CASE projection below.

Friend requests are directed (sender -> receiver) and move from `pending`
to `accepted` or `rejected`.
"""

from __future__ import annotations

from typing import Any

from core import db
from notifications import repository as notification_repository

_REQUEST_COLUMNS = "id, sender_id, receiver_id, status, created_at, updated_at"
_PROFILE_COLUMNS = "u.id, u.name, u.avatar, u.bio"


def edge(user_a: int, user_b: int) -> tuple[int, int]:
    if user_a == user_b:
        raise ValueError("A user cannot be friends with themselves.")
    return (user_a, user_b) if user_a < user_b else (user_b, user_a)


async def list_friend_ids(user_id: int) -> list[int]:
    rows = await db.fetch_all(
        """
        SELECT CASE WHEN user_low_id = $1 THEN user_high_id ELSE user_low_id END AS friend_id
        FROM friendships
        WHERE user_low_id = $1 OR user_high_id = $1
        """,
        user_id,
    )
    return [int(r["friend_id"]) for r in rows]


async def list_friends(user_id: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {_PROFILE_COLUMNS}, f.created_at AS friends_since
        FROM friendships f
        JOIN users u
          ON u.id = CASE WHEN f.user_low_id = $1 THEN f.user_high_id ELSE f.user_low_id END
        WHERE f.user_low_id = $1 OR f.user_high_id = $1
        ORDER BY u.name ASC, u.id ASC
        """,
        user_id,
    )


async def are_friends(user_a: int, user_b: int) -> bool:
    low, high = edge(user_a, user_b)
    row = await db.fetch_one(
        """
        SELECT 1 AS ok
        FROM friendships
        WHERE user_low_id = $1 AND user_high_id = $2
        """,
        low,
        high,
    )
    return row is not None


async def delete_friendship(user_a: int, user_b: int) -> bool:
    low, high = edge(user_a, user_b)
    row = await db.fetch_one(
        """
        DELETE FROM friendships
        WHERE user_low_id = $1 AND user_high_id = $2
        RETURNING user_low_id
        """,
        low,
        high,
    )
    return row is not None


async def get_request(request_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"SELECT {_REQUEST_COLUMNS} FROM friend_requests WHERE id = $1",
        request_id,
    )


async def get_pending_request(*, sender_id: int, receiver_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {_REQUEST_COLUMNS}
        FROM friend_requests
        WHERE sender_id = $1
          AND receiver_id = $2
          AND status = 'pending'
        """,
        sender_id,
        receiver_id,
    )


async def create_request(*, sender_id: int, receiver_id: int, sender_name: str) -> dict[str, Any]:
    """
    Create (or re-open a previously answered) request and notify the receiver.
    """
    async with db.transaction() as conn:
        record = await conn.fetchrow(
            f"""
            INSERT INTO friend_requests (sender_id, receiver_id)
            VALUES ($1, $2)
            ON CONFLICT (sender_id, receiver_id) DO UPDATE
            SET status = 'pending',
                updated_at = now()
            RETURNING {_REQUEST_COLUMNS}
            """,
            sender_id,
            receiver_id,
        )
        if record is None:
            raise RuntimeError("Failed to create friend request.")
        await notification_repository.create_notification(
            user_id=receiver_id,
            actor_id=sender_id,
            type="friend_request",
            message=f"{sender_name} sent you a friend request",
            conn=conn,
        )
    return dict(record)


async def list_incoming_requests(user_id: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT r.id, r.sender_id, r.receiver_id, r.status, r.created_at, r.updated_at,
               u.name AS sender_name, u.avatar AS sender_avatar
        FROM friend_requests r
        JOIN users u ON u.id = r.sender_id
        WHERE r.receiver_id = $1
          AND r.status = 'pending'
        ORDER BY r.created_at DESC, r.id DESC
        """,
        user_id,
    )


async def list_outgoing_requests(user_id: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT r.id, r.sender_id, r.receiver_id, r.status, r.created_at, r.updated_at,
               u.name AS receiver_name, u.avatar AS receiver_avatar
        FROM friend_requests r
        JOIN users u ON u.id = r.receiver_id
        WHERE r.sender_id = $1
          AND r.status = 'pending'
        ORDER BY r.created_at DESC, r.id DESC
        """,
        user_id,
    )


async def accept_request(request_id: int, *, receiver_name: str) -> dict[str, Any] | None:
    """
    Accept a pending request: mark it, insert the friendship edge and notify
    the sender in one transaction. Returns None if the request is not pending.
    """
    async with db.transaction() as conn:
        record = await conn.fetchrow(
            f"""
            UPDATE friend_requests
            SET status = 'accepted',
                updated_at = now()
            WHERE id = $1
              AND status = 'pending'
            RETURNING {_REQUEST_COLUMNS}
            """,
            request_id,
        )
        if record is None:
            return None

        sender_id = int(record["sender_id"])
        receiver_id = int(record["receiver_id"])
        low, high = edge(sender_id, receiver_id)
        await conn.execute(
            """
            INSERT INTO friendships (user_low_id, user_high_id)
            VALUES ($1, $2)
            ON CONFLICT (user_low_id, user_high_id) DO NOTHING
            """,
            low,
            high,
        )
        await notification_repository.create_notification(
            user_id=sender_id,
            actor_id=receiver_id,
            type="friend_accept",
            message=f"{receiver_name} accepted your friend request",
            conn=conn,
        )
    return dict(record)


async def reject_request(request_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        UPDATE friend_requests
        SET status = 'rejected',
            updated_at = now()
        WHERE id = $1
          AND status = 'pending'
        RETURNING {_REQUEST_COLUMNS}
        """,
        request_id,
    )


async def list_suggestions(user_id: int, *, limit: int = 20) -> list[dict[str, Any]]:
    """
    Active users that are not the viewer, not friends, and have no pending
    request with the viewer in either direction.
    """
    return await db.fetch_all(
        f"""
        SELECT {_PROFILE_COLUMNS}
        FROM users u
        WHERE u.id <> $1
          AND u.is_active = true
          AND NOT EXISTS (
            SELECT 1 FROM friendships f
            WHERE (f.user_low_id = LEAST(u.id, $1) AND f.user_high_id = GREATEST(u.id, $1))
          )
          AND NOT EXISTS (
            SELECT 1 FROM friend_requests r
            WHERE r.status = 'pending'
              AND ((r.sender_id = $1 AND r.receiver_id = u.id)
                OR (r.sender_id = u.id AND r.receiver_id = $1))
          )
        ORDER BY u.created_at DESC, u.id DESC
        LIMIT $2
        """,
        user_id,
        limit,
    )
