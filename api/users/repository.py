"""
Profile persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

from core import db

_PROFILE_COLUMNS = "id, email, name, avatar, bio, created_at, updated_at"


async def get_profile(user_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {_PROFILE_COLUMNS}
        FROM users
        WHERE id = $1
          AND is_active = true
        """,
        user_id,
    )


async def update_profile(user_id: int, *, changes: dict[str, Any]) -> dict[str, Any] | None:
    """
    Update only the columns present in `changes` (name, bio, avatar).
    """
    allowed = [column for column in ("name", "bio", "avatar") if column in changes]
    if not allowed:
        return await get_profile(user_id)

    assignments = ", ".join(f"{column} = ${i}" for i, column in enumerate(allowed, start=2))
    return await db.fetch_one(
        f"""
        UPDATE users
        SET {assignments},
            updated_at = now()
        WHERE id = $1
        RETURNING {_PROFILE_COLUMNS}
        """,
        user_id,
        *[changes[column] for column in allowed],
    )
