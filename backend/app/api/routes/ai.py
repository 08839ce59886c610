"""Endpoints backed by the external AI provider, plus the recipe importer."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_ai_provider, get_db, get_recipe_importer, require_authenticated
from app.core.errors import AppError, NotFound, ValidationFailed
from app.core.sessions import SessionData, save_session, snapshot_for
from app.schemas.ai import (
    GeneratedRecipe,
    GenerateRecipeRequest,
    ImageResponse,
    ImportRequest,
    OptimizedRecipe,
    OptimizeRecipeRequest,
    RecipeDraft,
    StepIllustrationRequest,
)
from app.schemas.user import ProfileImageResponse
from app.services import users as user_service
from app.services.ai_provider import OpenAIProvider, avatar_prompt, step_illustration_prompt
from app.services.importer import RecipeImporter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ai"])


@router.post("/ai-analyze", response_model=RecipeDraft, response_model_exclude_none=True)
async def analyze_recipe_image(
    file: UploadFile | None = File(default=None),
    provider: OpenAIProvider = Depends(get_ai_provider),
    _: SessionData = Depends(require_authenticated),
) -> RecipeDraft:
    if file is None:
        raise ValidationFailed("No file uploaded")
    content = await file.read()
    if not content:
        raise ValidationFailed("Uploaded file is empty")
    draft = await provider.analyze_image(content, file.content_type)
    return RecipeDraft(**draft)


@router.post("/generate-recipe", response_model=GeneratedRecipe)
async def generate_recipe(
    payload: GenerateRecipeRequest,
    provider: OpenAIProvider = Depends(get_ai_provider),
    _: SessionData = Depends(require_authenticated),
) -> GeneratedRecipe:
    draft = await provider.generate_recipe(payload.country, payload.dish_type)
    # No image is generated; drafts keep the image of their source, if any
    return GeneratedRecipe(**draft, image_url="", country=payload.country, dish_type=payload.dish_type or None)


@router.post("/optimize-recipe", response_model=OptimizedRecipe)
async def optimize_recipe(
    payload: OptimizeRecipeRequest,
    provider: OpenAIProvider = Depends(get_ai_provider),
    _: SessionData = Depends(require_authenticated),
) -> OptimizedRecipe:
    result = await provider.optimize_recipe(payload.title, payload.ingredients, payload.instructions)
    return OptimizedRecipe(**result)


@router.post("/generate-step-illustration", response_model=ImageResponse)
async def generate_step_illustration(
    payload: StepIllustrationRequest,
    provider: OpenAIProvider = Depends(get_ai_provider),
    _: SessionData = Depends(require_authenticated),
) -> ImageResponse:
    """Illustrations are optional decoration; failures degrade to an empty URL."""
    if not provider.configured:
        return ImageResponse(image_url="")
    try:
        image_url = await provider.generate_image(
            step_illustration_prompt(payload.step_description, payload.recipe_name)
        )
    except AppError as exc:
        logger.warning("Step illustration failed: %s", exc.message)
        return ImageResponse(image_url="")
    return ImageResponse(image_url=image_url)


@router.post("/generate-profile-image", response_model=ProfileImageResponse)
async def generate_profile_image(
    response: Response,
    session: AsyncSession = Depends(get_db),
    provider: OpenAIProvider = Depends(get_ai_provider),
    session_data: SessionData = Depends(require_authenticated),
) -> ProfileImageResponse:
    user = await user_service.get_user(session, session_data.id)
    if not user:
        raise NotFound("User not found")

    image_url = await provider.generate_image(avatar_prompt(user.username))
    await user_service.set_profile_image(session, user, image_url)
    await session.commit()
    save_session(response, snapshot_for(user))
    return ProfileImageResponse(image_url=image_url, message="Profile image generated successfully")


@router.post("/import", response_model=RecipeDraft, response_model_exclude_none=True)
async def import_recipe(
    payload: ImportRequest,
    importer: RecipeImporter = Depends(get_recipe_importer),
) -> RecipeDraft:
    recipe = await importer.import_recipe(payload.url)
    return RecipeDraft(**recipe)
