"""
Pydantic schemas for post endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class CreatePostRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    image_url: str | None = Field(default=None, alias="imageUrl", max_length=2048)

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}


class UpdatePostRequest(BaseModel):
    content: str | None = Field(default=None, min_length=1, max_length=5000)
    image_url: str | None = Field(default=None, alias="imageUrl", max_length=2048)
    remove_image: bool = Field(default=False, alias="removeImage")

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}

    @model_validator(mode="after")
    def _has_changes(self) -> "UpdatePostRequest":
        if self.content is None and not self.image_url and not self.remove_image:
            raise ValueError("Nothing to update.")
        return self


class CreateCommentRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)

    model_config = {"str_strip_whitespace": True}
