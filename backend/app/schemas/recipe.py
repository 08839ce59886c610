"""Pydantic schemas for recipes, categories and favorites."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from app.schemas.base import CamelModel
from app.services.recipe_text import join_lines


class RecipeBase(CamelModel):
    description: str = ""
    ingredients: str = ""
    instructions: str = ""
    image_url: str | None = None

    # Scanned or generated recipes arrive with line arrays
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


class RecipeCreate(RecipeBase):
    title: str = Field(..., min_length=1, max_length=255)
    category: str | None = Field(default=None, max_length=128)


class RecipeUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    ingredients: str | None = None
    instructions: str | None = None
    image_url: str | None = None
    category: str | None = Field(default=None, max_length=128)

    @field_validator("ingredients", "instructions", mode="before")
    @classmethod
    def _join(cls, value: str | list[str] | None) -> str | None:
        if isinstance(value, list):
            return join_lines(value)
        return value


class RecipeRead(CamelModel):
    id: int
    title: str
    description: str
    ingredients: str
    instructions: str
    image_url: str | None = None
    category: str
    created_at: datetime


class CookingSteps(CamelModel):
    recipe_id: int
    title: str
    ingredients: list[str]
    steps: list[str]


class CategoryCreate(CamelModel):
    name: str = Field(..., max_length=128)


class CategoryRead(CamelModel):
    id: int
    name: str


class FavoriteToggle(CamelModel):
    recipe_id: int = Field(..., ge=1)


class FavoriteToggleResult(CamelModel):
    is_favorite: bool


class FavoriteCheck(CamelModel):
    recipe_ids: list[int] = Field(default_factory=list)
