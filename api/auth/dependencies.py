"""
Viewer resolution for protected routes.

Every protected route depends on `get_current_user`, which turns the
`Authorization: Bearer <token>` header into the active user's row.
"""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status

from . import service


def _extract_bearer_token(authorization: str | None) -> str:
    scheme, _, token = (authorization or "").strip().partition(" ")
    if not scheme:
        detail = "Authentication required."
    elif scheme.lower() != "bearer" or not token.strip():
        detail = "Authorization must be: Bearer <token>."
    else:
        return token.strip()
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return _extract_bearer_token(authorization)


async def get_current_user(access_token: str = Depends(get_bearer_token)) -> dict:
    return await service.get_user_from_access_token(access_token)
