"""Pydantic schemas for AI-backed endpoints and the recipe importer."""
from __future__ import annotations

from pydantic import Field

from app.schemas.base import CamelModel


class RecipeDraft(CamelModel):
    title: str = ""
    description: str = ""
    ingredients: str = ""
    instructions: str = ""
    image_url: str = ""
    category: str | None = None


class GenerateRecipeRequest(CamelModel):
    country: str = Field(..., min_length=1, max_length=128)
    dish_type: str | None = Field(default=None, max_length=128)


class GeneratedRecipe(RecipeDraft):
    category: str = "Other"
    country: str
    dish_type: str | None = None


class OptimizeRecipeRequest(CamelModel):
    title: str = Field(..., min_length=1)
    ingredients: str = Field(..., min_length=1)
    instructions: str = Field(..., min_length=1)


class OptimizedRecipe(CamelModel):
    optimized_instructions: str
    tips: list[str] = []
    estimated_time: str


class StepIllustrationRequest(CamelModel):
    step_description: str = Field(..., min_length=1)
    recipe_name: str = ""


class ImageResponse(CamelModel):
    image_url: str = ""


class ImportRequest(CamelModel):
    url: str = Field(..., min_length=1, max_length=2048)
