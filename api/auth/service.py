"""
Accounts, sessions and viewer resolution.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import asyncpg
from fastapi import HTTPException, status

from . import repository, schemas, security

logger = logging.getLogger(__name__)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _inactive() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is inactive.")


def to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=int(user_row["id"]),
        email=str(user_row["email"]),
        name=str(user_row["name"]),
        avatar=user_row.get("avatar"),
        bio=user_row.get("bio"),
        is_active=bool(user_row["is_active"]),
        created_at=user_row["created_at"],
    )


async def _start_session(
    user_id: int,
    email: str,
    *,
    client: dict,
    replaces: int | None = None,
) -> schemas.TokenPairResponse:
    refresh_token = security.build_refresh_token()
    session = dict(
        user_id=user_id,
        token_hash=security.hash_refresh_token(refresh_token),
        expires_at=datetime.now(timezone.utc) + timedelta(days=security.refresh_token_expire_days()),
        **client,
    )
    if replaces is None:
        await repository.open_session(**session)
    elif await repository.rotate_session(replaces, **session) is None:
        logger.warning("refresh_token_race session_id=%s user_id=%s", replaces, user_id)
        raise _unauthorized("Refresh token is revoked.")

    return schemas.TokenPairResponse(
        access_token=security.build_access_token(user_id=user_id, email=email),
        refresh_token=refresh_token,
    )


async def _signed_in(user_row: dict, client: dict) -> schemas.AuthResponse:
    tokens = await _start_session(int(user_row["id"]), str(user_row["email"]), client=client)
    return schemas.AuthResponse(user=to_user_response(user_row), tokens=tokens)


async def register(payload: schemas.RegisterRequest, **client: str | None) -> schemas.AuthResponse:
    taken = HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email is already registered.")
    if await repository.get_user_by_email(payload.email) is not None:
        raise taken

    try:
        user_row = await repository.create_user(
            email=payload.email,
            password_hash=security.hash_password(payload.password),
            name=payload.name,
        )
    except asyncpg.UniqueViolationError as exc:
        # Lost a race with a concurrent signup for the same email.
        raise taken from exc
    logger.info("user_registered user_id=%s", user_row["id"])
    return await _signed_in(user_row, client)


async def login(payload: schemas.LoginRequest, **client: str | None) -> schemas.AuthResponse:
    user_row = await repository.get_user_by_email(payload.email)
    # Same answer for an unknown email and a wrong password.
    if user_row is None or not security.verify_password(payload.password, str(user_row.get("password_hash") or "")):
        raise _unauthorized("Invalid email or password.")
    if not user_row.get("is_active"):
        raise _inactive()
    return await _signed_in(user_row, client)


async def refresh_tokens(payload: schemas.RefreshRequest, **client: str | None) -> schemas.TokenPairResponse:
    session = await repository.find_session(security.hash_refresh_token(payload.refresh_token.strip()))
    if session is None:
        raise _unauthorized("Invalid refresh token.")
    if session["revoked_at"] is not None:
        logger.warning("refresh_token_reused session_id=%s user_id=%s", session["id"], session["user_id"])
        raise _unauthorized("Refresh token is revoked.")

    expires_at = session["expires_at"]
    if not isinstance(expires_at, datetime) or expires_at <= datetime.now(timezone.utc):
        await repository.revoke_sessions(session_id=int(session["id"]))
        raise _unauthorized("Refresh token is expired.")

    user_row = await repository.get_user_by_id(int(session["user_id"]))
    if user_row is None or not session["user_is_active"]:
        await repository.revoke_sessions(session_id=int(session["id"]))
        raise _unauthorized("Invalid refresh token owner.")

    return await _start_session(
        int(user_row["id"]),
        str(user_row["email"]),
        client=client,
        replaces=int(session["id"]),
    )


async def logout(payload: schemas.LogoutRequest, *, current_user_id: int) -> dict[str, bool]:
    refresh_token = (payload.refresh_token or "").strip()
    if refresh_token:
        await repository.revoke_sessions(token_hash=security.hash_refresh_token(refresh_token))
    else:
        revoked = await repository.revoke_sessions(user_id=current_user_id)
        logger.info("sessions_revoked user_id=%s count=%s", current_user_id, revoked)
    return {"ok": True}


async def get_user_from_access_token(access_token: str) -> dict:
    try:
        user_id = security.access_token_user_id(access_token)
    except security.AuthSecurityError as exc:
        raise _unauthorized(str(exc)) from exc

    user_row = await repository.get_user_by_id(user_id)
    if user_row is None:
        raise _unauthorized("User not found.")
    if not user_row.get("is_active"):
        raise _inactive()
    return user_row
