"""
Accounts and refresh-token sessions.

A session is one refresh_tokens row. Rotating a session revokes the old row
and points it at its successor so a replayed token can be traced.
"""

from __future__ import annotations

from datetime import datetime, timezone

from core import db

USER_COLUMNS = "id, email, name, avatar, bio, password_hash, is_active, created_at, updated_at"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_user(*, email: str, password_hash: str, name: str) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO users (email, password_hash, name)
        VALUES ($1, $2, $3)
        RETURNING {USER_COLUMNS}
        """,
        normalize_email(email),
        password_hash,
        name.strip(),
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_by_email(email: str) -> dict | None:
    return await db.fetch_one(
        f"SELECT {USER_COLUMNS} FROM users WHERE lower(email) = $1",
        normalize_email(email),
    )


async def get_user_by_id(user_id: int) -> dict | None:
    return await db.fetch_one(f"SELECT {USER_COLUMNS} FROM users WHERE id = $1", user_id)


_INSERT_SESSION = """
INSERT INTO refresh_tokens (user_id, token_hash, expires_at, user_agent, ip_address)
VALUES ($1, $2, $3, $4, $5)
RETURNING id
"""


def _utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


async def open_session(
    *,
    user_id: int,
    token_hash: str,
    expires_at: datetime,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> int:
    session_id = await db.fetch_value(
        _INSERT_SESSION,
        user_id,
        token_hash,
        _utc(expires_at),
        user_agent,
        ip_address,
    )
    if session_id is None:
        raise RuntimeError("Failed to open session.")
    return int(session_id)


async def find_session(token_hash: str) -> dict | None:
    """Session row for a refresh token hash, with its owner's account state."""
    return await db.fetch_one(
        """
        SELECT t.id, t.user_id, t.expires_at, t.revoked_at, u.is_active AS user_is_active
        FROM refresh_tokens t
        JOIN users u ON u.id = t.user_id
        WHERE t.token_hash = $1
        """,
        token_hash,
    )


async def rotate_session(
    old_session_id: int,
    *,
    user_id: int,
    token_hash: str,
    expires_at: datetime,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> int | None:
    """
    Revoke a live session and open its successor in one transaction.

    Returns the new session id, or None when the old session was already
    revoked (a concurrent refresh won the row lock first).
    """
    async with db.transaction() as conn:
        claimed = await conn.fetchval(
            """
            UPDATE refresh_tokens
            SET revoked_at = now(), last_used_at = now()
            WHERE id = $1
              AND revoked_at IS NULL
            RETURNING id
            """,
            old_session_id,
        )
        if claimed is None:
            return None

        session_id = await conn.fetchval(
            _INSERT_SESSION,
            user_id,
            token_hash,
            _utc(expires_at),
            user_agent,
            ip_address,
        )
        await conn.execute(
            "UPDATE refresh_tokens SET replaced_by_token_id = $2 WHERE id = $1",
            old_session_id,
            session_id,
        )
    return int(session_id)


_REVOKE_KEYS = {"session_id": "id", "token_hash": "token_hash", "user_id": "user_id"}


async def revoke_sessions(**match: int | str) -> int:
    """
    Revoke live sessions matching exactly one of session_id, token_hash or
    user_id. Returns how many were revoked.
    """
    if len(match) != 1 or not set(match) <= set(_REVOKE_KEYS):
        raise ValueError(f"revoke_sessions takes one of {sorted(_REVOKE_KEYS)}.")
    key, value = next(iter(match.items()))

    rows = await db.fetch_all(
        f"""
        UPDATE refresh_tokens
        SET revoked_at = now()
        WHERE {_REVOKE_KEYS[key]} = $1
          AND revoked_at IS NULL
        RETURNING id
        """,
        value,
    )
    return len(rows)
