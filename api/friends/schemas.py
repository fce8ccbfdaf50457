"""
Pydantic schemas for friend endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class FriendRequestCreate(BaseModel):
    user_id: int = Field(..., alias="userId", ge=1)

    model_config = {"populate_by_name": True}
