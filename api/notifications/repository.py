"""
Notification persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db

NOTIFICATION_TYPES = {"friend_request", "friend_accept", "like", "comment"}

_COLUMNS = "id, user_id, actor_id, type, post_id, message, read, created_at"

_INSERT_SQL = f"""
INSERT INTO notifications (user_id, actor_id, type, post_id, message)
VALUES ($1, $2, $3, $4, $5)
RETURNING {_COLUMNS}
"""


async def create_notification(
    *,
    user_id: int,
    actor_id: int,
    type: str,
    message: str,
    post_id: int | None = None,
    conn: asyncpg.Connection | None = None,
) -> dict[str, Any]:
    """
    Insert one notification. Pass `conn` to join a caller's transaction.
    """
    if type not in NOTIFICATION_TYPES:
        raise ValueError(f"Unknown notification type: {type}")

    args = (user_id, actor_id, type, post_id, message)
    if conn is not None:
        record = await conn.fetchrow(_INSERT_SQL, *args)
        row = dict(record) if record is not None else None
    else:
        row = await db.fetch_one(_INSERT_SQL, *args)
    if row is None:
        raise RuntimeError("Failed to create notification.")
    return row


async def list_notifications(user_id: int, *, limit: int = 50) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT
          n.id, n.user_id, n.actor_id, n.type, n.post_id, n.message, n.read, n.created_at,
          u.name AS actor_name,
          u.avatar AS actor_avatar
        FROM notifications n
        JOIN users u ON u.id = n.actor_id
        WHERE n.user_id = $1
        ORDER BY n.created_at DESC, n.id DESC
        LIMIT $2
        """,
        user_id,
        limit,
    )


async def get_notification(notification_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"SELECT {_COLUMNS} FROM notifications WHERE id = $1",
        notification_id,
    )


async def mark_read(notification_id: int) -> None:
    await db.execute("UPDATE notifications SET read = true WHERE id = $1", notification_id)


async def mark_all_read(user_id: int) -> int:
    rows = await db.fetch_all(
        """
        UPDATE notifications
        SET read = true
        WHERE user_id = $1
          AND read = false
        RETURNING id
        """,
        user_id,
    )
    return len(rows)


async def count_unread(user_id: int) -> int:
    value = await db.fetch_value(
        "SELECT count(*) FROM notifications WHERE user_id = $1 AND read = false",
        user_id,
    )
    return int(value or 0)
