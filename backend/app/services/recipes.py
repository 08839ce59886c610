"""Service layer for the published recipe catalog and its categories."""
from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import Conflict, NotFound, ValidationFailed
from app.models.recipe import DEFAULT_CATEGORY, Category, Recipe
from app.schemas.recipe import RecipeCreate, RecipeUpdate

ALL_CATEGORIES = "All"


async def list_recipes(
    session: AsyncSession, query: str | None = None, category: str | None = None
) -> list[Recipe]:
    statement = select(Recipe).order_by(Recipe.created_at.desc(), Recipe.id.desc())
    if query:
        pattern = f"%{query.strip().lower()}%"
        statement = statement.where(
            or_(
                func.lower(Recipe.title).like(pattern),
                func.lower(Recipe.description).like(pattern),
                func.lower(Recipe.ingredients).like(pattern),
            )
        )
    if category and category != ALL_CATEGORIES:
        statement = statement.where(Recipe.category == category)
    result = await session.execute(statement)
    return list(result.scalars().all())


async def get_recipe(session: AsyncSession, recipe_id: int) -> Recipe | None:
    return await session.get(Recipe, recipe_id)


async def require_recipe(session: AsyncSession, recipe_id: int) -> Recipe:
    recipe = await get_recipe(session, recipe_id)
    if not recipe:
        raise NotFound("Recipe not found")
    return recipe


async def create_recipe(session: AsyncSession, data: RecipeCreate) -> Recipe:
    recipe = Recipe(
        title=data.title,
        description=data.description,
        ingredients=data.ingredients,
        instructions=data.instructions,
        image_url=data.image_url,
        category=data.category or DEFAULT_CATEGORY,
    )
    session.add(recipe)
    await session.flush()
    return recipe


async def update_recipe(session: AsyncSession, recipe_id: int, data: RecipeUpdate) -> Recipe:
    recipe = await require_recipe(session, recipe_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field in {"title", "description", "ingredients", "instructions"}:
            continue
        if field == "category":
            value = value or DEFAULT_CATEGORY
        setattr(recipe, field, value)
    await session.flush()
    return recipe


async def delete_recipe(session: AsyncSession, recipe_id: int) -> None:
    recipe = await require_recipe(session, recipe_id)
    await session.delete(recipe)
    await session.flush()


async def list_categories(session: AsyncSession) -> list[Category]:
    result = await session.execute(select(Category).order_by(Category.name))
    return list(result.scalars().all())


async def create_category(session: AsyncSession, name: str) -> Category:
    name = name.strip()
    if not name:
        raise ValidationFailed("Category name is required")

    existing = await session.execute(select(Category.id).where(Category.name == name))
    if existing.first() is not None:
        raise Conflict("Category already exists")

    category = Category(name=name)
    session.add(category)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise Conflict("Category already exists") from exc
    return category


async def delete_category(session: AsyncSession, category_id: int) -> None:
    # Recipes keep the category name as plain text
    category = await session.get(Category, category_id)
    if not category:
        raise NotFound("Category not found")
    await session.delete(category)
    await session.flush()
