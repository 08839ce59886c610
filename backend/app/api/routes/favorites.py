"""Favorite endpoints."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_db, optional_session, require_authenticated
from app.core.sessions import SessionData
from app.schemas.recipe import FavoriteCheck, FavoriteToggle, FavoriteToggleResult, RecipeRead
from app.services import favorites as favorite_service

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("", response_model=list[RecipeRead])
async def list_favorites(
    session: AsyncSession = Depends(get_db),
    session_data: SessionData = Depends(require_authenticated),
) -> list[RecipeRead]:
    recipes = await favorite_service.list_favorite_recipes(session, session_data.id)
    return [RecipeRead.model_validate(recipe) for recipe in recipes]


@router.post("", response_model=FavoriteToggleResult)
async def toggle_favorite(
    payload: FavoriteToggle,
    session: AsyncSession = Depends(get_db),
    session_data: SessionData = Depends(require_authenticated),
) -> FavoriteToggleResult:
    is_favorite = await favorite_service.toggle_favorite(session, session_data.id, payload.recipe_id)
    return FavoriteToggleResult(is_favorite=is_favorite)


@router.post("/check")
async def check_favorites(
    payload: Any = Body(default=None),
    session: AsyncSession = Depends(get_db),
    session_data: SessionData | None = Depends(optional_session),
) -> dict[str, bool]:
    """Map each favorited id among ``recipeIds`` to true; anonymous callers get ``{}``."""
    if session_data is None:
        return {}
    try:
        check = FavoriteCheck.model_validate(payload if isinstance(payload, dict) else {})
    except ValidationError:
        return {}
    favorites = await favorite_service.favorite_map(session, session_data.id, check.recipe_ids)
    return {str(recipe_id): flag for recipe_id, flag in favorites.items()}
