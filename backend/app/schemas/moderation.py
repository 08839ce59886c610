"""Pydantic schemas for the moderation queue."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from app.schemas.base import CamelModel
from app.services.recipe_text import join_lines


class PendingRecipeCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    country: str = Field(..., min_length=1, max_length=128)
    description: str = ""
    ingredients: str = ""
    instructions: str = ""
    image_url: str | None = None
    category: str | None = Field(default=None, max_length=128)
    dish_type: str | None = Field(default=None, max_length=128)

    @field_validator("ingredients", "instructions", mode="before")
    @classmethod
    def _join(cls, value: str | list[str] | None) -> str:
        if value is None or isinstance(value, list):
            return join_lines(value)
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _none_to_empty(cls, value: str | None) -> str:
        return value or ""


class PendingRecipeRead(CamelModel):
    id: int
    title: str
    description: str
    ingredients: str
    instructions: str
    image_url: str | None = None
    category: str
    country: str
    dish_type: str | None = None
    user_id: int | None = None
    status: str
    approved_recipe_id: int | None = None
    created_at: datetime
    decided_at: datetime | None = None


class ModerationDecision(CamelModel):
    # Checked in the service so a bad value reports as an invalid action
    action: str | None = None


class ModerationResult(CamelModel):
    message: str
    status: str
    recipe_id: int | None = None
