"""
Credential helpers for the viewer identity.

- passwords: bcrypt
- access tokens: short-lived JWT whose `sub` is the user id
- refresh tokens: random opaque strings, only their sha256 is stored
"""

from __future__ import annotations

import hashlib
import secrets
import time

import bcrypt
import jwt

from core import settings

ACCESS_TOKEN_TYPE = "access"


class AuthSecurityError(RuntimeError):
    pass


def jwt_secret() -> str:
    # Set JWT_SECRET in any shared environment.
    return settings.env_str("JWT_SECRET", "dev-change-this-secret")


def jwt_algorithm() -> str:
    return settings.env_str("JWT_ALG", "HS256")


def access_token_ttl_s() -> int:
    return settings.env_int("ACCESS_TOKEN_EXPIRE_MIN", 15) * 60


def refresh_token_expire_days() -> int:
    return settings.env_int("REFRESH_TOKEN_EXPIRE_DAYS", 30)


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(plain_password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def build_access_token(*, user_id: int, email: str) -> str:
    now = int(time.time())
    claims = {
        "sub": str(user_id),
        "email": email,
        "type": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": now + access_token_ttl_s(),
    }
    return jwt.encode(claims, jwt_secret(), algorithm=jwt_algorithm())


def access_token_user_id(token: str) -> int:
    """
    Validate an access token and return the user id it was issued for.
    """
    if not (token or "").strip():
        raise AuthSecurityError("Access token is empty.")

    try:
        claims = jwt.decode(token.strip(), jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid or expired access token.") from exc

    if str(claims.get("type") or "").lower() != ACCESS_TOKEN_TYPE:
        raise AuthSecurityError("Token is not an access token.")

    subject = str(claims.get("sub") or "").strip()
    if not subject.isascii() or not subject.isdigit():
        raise AuthSecurityError("Invalid access token subject.")
    return int(subject)


def build_refresh_token() -> str:
    return secrets.token_urlsafe(48)


def hash_refresh_token(raw_refresh_token: str) -> str:
    if not raw_refresh_token:
        raise AuthSecurityError("Refresh token is empty.")
    return hashlib.sha256(raw_refresh_token.encode("utf-8")).hexdigest()
