"""Per-user favorite markers on published recipes."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.recipe import Favorite, Recipe
from app.services.recipes import require_recipe

logger = logging.getLogger(__name__)


async def list_favorite_recipes(session: AsyncSession, user_id: int) -> list[Recipe]:
    result = await session.execute(
        select(Recipe)
        .join(Favorite, Favorite.recipe_id == Recipe.id)
        .where(Favorite.user_id == user_id)
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
    )
    return list(result.scalars().all())


async def toggle_favorite(session: AsyncSession, user_id: int, recipe_id: int) -> bool:
    """Flip the favorite marker and commit; return whether the recipe is now a favorite.

    The check and the write are separate round-trips. A concurrent toggle that
    inserted first trips the unique constraint, which counts as favorited.
    """

    await require_recipe(session, recipe_id)
    result = await session.execute(
        select(Favorite).where(Favorite.user_id == user_id, Favorite.recipe_id == recipe_id)
    )
    existing = result.scalar_one_or_none()

    if existing:
        await session.delete(existing)
        await session.commit()
        return False

    session.add(Favorite(user_id=user_id, recipe_id=recipe_id))
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.info("Favorite (%s, %s) already present", user_id, recipe_id)
    return True


async def favorite_map(session: AsyncSession, user_id: int, recipe_ids: list[int]) -> dict[int, bool]:
    if not recipe_ids:
        return {}
    result = await session.execute(
        select(Favorite.recipe_id).where(Favorite.user_id == user_id, Favorite.recipe_id.in_(recipe_ids))
    )
    return {recipe_id: True for recipe_id in result.scalars().all()}
