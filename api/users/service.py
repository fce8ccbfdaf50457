"""
Profile business logic.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status

from . import repository, schemas


def to_profile_response(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": int(row["id"]),
        "email": row.get("email"),
        "name": row.get("name"),
        "avatar": row.get("avatar"),
        "bio": row.get("bio"),
        "createdAt": row.get("created_at"),
    }


async def get_user(user_id: int) -> dict[str, Any]:
    row = await repository.get_profile(user_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    return to_profile_response(row)


async def update_user(
    user_id: int,
    payload: schemas.UpdateProfileRequest,
    *,
    viewer_id: int,
) -> dict[str, Any]:
    if user_id != viewer_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only update your own profile.",
        )

    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes:
        if changes["name"] is None or not changes["name"].strip():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name cannot be empty.")
        changes["name"] = changes["name"].strip()

    row = await repository.update_profile(user_id, changes=changes)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    return to_profile_response(row)
