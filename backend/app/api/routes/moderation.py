"""Moderation queue endpoints for submitted recipe drafts."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_db, require_admin, require_authenticated
from app.core.sessions import SessionData
from app.models.pending_recipe import ModerationStatus
from app.schemas.moderation import ModerationDecision, ModerationResult, PendingRecipeCreate, PendingRecipeRead
from app.services import moderation as moderation_service

router = APIRouter(prefix="/admin/pending-recipes", tags=["moderation"])


@router.get("", response_model=list[PendingRecipeRead])
async def list_pending_recipes(
    session: AsyncSession = Depends(get_db),
    _: SessionData = Depends(require_admin),
) -> list[PendingRecipeRead]:
    entries = await moderation_service.list_pending(session)
    return [PendingRecipeRead.model_validate(entry) for entry in entries]


@router.post("", response_model=PendingRecipeRead, status_code=status.HTTP_201_CREATED)
async def submit_pending_recipe(
    payload: PendingRecipeCreate,
    session: AsyncSession = Depends(get_db),
    session_data: SessionData = Depends(require_authenticated),
) -> PendingRecipeRead:
    entry = await moderation_service.submit(session, payload, session_data.id)
    await session.commit()
    return PendingRecipeRead.model_validate(entry)


@router.post("/{entry_id}", response_model=ModerationResult)
async def decide_pending_recipe(
    entry_id: int,
    payload: ModerationDecision,
    session: AsyncSession = Depends(get_db),
    _: SessionData = Depends(require_admin),
) -> ModerationResult:
    entry, recipe = await moderation_service.decide(session, entry_id, payload.action)
    # Recipe creation and status change land in one commit
    await session.commit()
    if entry.status == ModerationStatus.APPROVED.value:
        message = "Recipe approved and added to collection"
    else:
        message = "Recipe rejected"
    return ModerationResult(message=message, status=entry.status, recipe_id=recipe.id if recipe else None)
