"""
Auth request/response models. JSON keys are camelCase like the rest of the API.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(_CamelModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=1, max_length=100)


class LoginRequest(_CamelModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class RefreshRequest(_CamelModel):
    refresh_token: str = Field(..., min_length=20)


class LogoutRequest(_CamelModel):
    # Omitted: every session of the current user is revoked.
    refresh_token: str | None = Field(default=None, min_length=20)


class UserResponse(_CamelModel):
    id: int
    email: str
    name: str
    avatar: str | None = None
    bio: str | None = None
    is_active: bool
    created_at: datetime


class TokenPairResponse(_CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResponse(_CamelModel):
    user: UserResponse
    tokens: TokenPairResponse
