"""Published recipe and category endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_db, require_admin, require_authenticated
from app.core.sessions import SessionData
from app.schemas.auth import OkResponse
from app.schemas.recipe import CategoryCreate, CategoryRead, CookingSteps, RecipeCreate, RecipeRead, RecipeUpdate
from app.services import recipes as recipe_service
from app.services.recipe_text import split_lines

router = APIRouter(tags=["recipes"])


@router.get("/recipes", response_model=list[RecipeRead])
async def list_recipes(
    q: str | None = Query(default=None, max_length=200),
    category: str | None = Query(default=None, max_length=128),
    session: AsyncSession = Depends(get_db),
) -> list[RecipeRead]:
    recipes = await recipe_service.list_recipes(session, query=q, category=category)
    return [RecipeRead.model_validate(recipe) for recipe in recipes]


@router.post("/recipes", response_model=RecipeRead, status_code=status.HTTP_201_CREATED)
async def create_recipe(
    payload: RecipeCreate,
    session: AsyncSession = Depends(get_db),
    _: SessionData = Depends(require_authenticated),
) -> RecipeRead:
    recipe = await recipe_service.create_recipe(session, payload)
    await session.commit()
    return RecipeRead.model_validate(recipe)


@router.get("/recipes/{recipe_id}", response_model=RecipeRead)
async def get_recipe(recipe_id: int, session: AsyncSession = Depends(get_db)) -> RecipeRead:
    recipe = await recipe_service.require_recipe(session, recipe_id)
    return RecipeRead.model_validate(recipe)


@router.get("/recipes/{recipe_id}/steps", response_model=CookingSteps)
async def get_cooking_steps(recipe_id: int, session: AsyncSession = Depends(get_db)) -> CookingSteps:
    """Ingredient lines and instruction steps for step-by-step cooking."""
    recipe = await recipe_service.require_recipe(session, recipe_id)
    return CookingSteps(
        recipe_id=recipe.id,
        title=recipe.title,
        ingredients=split_lines(recipe.ingredients),
        steps=split_lines(recipe.instructions),
    )


@router.put("/recipes/{recipe_id}", response_model=RecipeRead)
async def update_recipe(
    recipe_id: int,
    payload: RecipeUpdate,
    session: AsyncSession = Depends(get_db),
    _: SessionData = Depends(require_authenticated),
) -> RecipeRead:
    recipe = await recipe_service.update_recipe(session, recipe_id, payload)
    await session.commit()
    return RecipeRead.model_validate(recipe)


@router.delete("/recipes/{recipe_id}", response_model=OkResponse)
async def delete_recipe(
    recipe_id: int,
    session: AsyncSession = Depends(get_db),
    _: SessionData = Depends(require_authenticated),
) -> OkResponse:
    await recipe_service.delete_recipe(session, recipe_id)
    await session.commit()
    return OkResponse()


@router.get("/categories", response_model=list[CategoryRead])
async def list_categories(session: AsyncSession = Depends(get_db)) -> list[CategoryRead]:
    categories = await recipe_service.list_categories(session)
    return [CategoryRead.model_validate(category) for category in categories]


@router.post("/categories", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    session: AsyncSession = Depends(get_db),
    _: SessionData = Depends(require_admin),
) -> CategoryRead:
    category = await recipe_service.create_category(session, payload.name)
    await session.commit()
    return CategoryRead.model_validate(category)


@router.delete("/categories", response_model=OkResponse)
async def delete_category(
    id: int = Query(..., ge=1),
    session: AsyncSession = Depends(get_db),
    _: SessionData = Depends(require_admin),
) -> OkResponse:
    await recipe_service.delete_category(session, id)
    await session.commit()
    return OkResponse()
