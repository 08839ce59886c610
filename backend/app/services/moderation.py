"""Moderation queue for submitted recipe drafts.

Entries start as PENDING and move exactly once, to APPROVED or REJECTED.
Approval publishes a copy of the draft as a Recipe; the caller commits the
status change and the new Recipe together.
"""
from __future__ import annotations

import enum
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import Conflict, InvalidAction, NotFound
from app.models._time import utcnow
from app.models.pending_recipe import ModerationStatus, PendingRecipe
from app.models.recipe import DEFAULT_CATEGORY, Recipe
from app.schemas.moderation import PendingRecipeCreate

logger = logging.getLogger(__name__)


class ModerationAction(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"


_TRANSITIONS: dict[tuple[ModerationStatus, ModerationAction], ModerationStatus] = {
    (ModerationStatus.PENDING, ModerationAction.APPROVE): ModerationStatus.APPROVED,
    (ModerationStatus.PENDING, ModerationAction.REJECT): ModerationStatus.REJECTED,
}


def parse_action(value: str | None) -> ModerationAction:
    try:
        return ModerationAction(value)
    except ValueError as exc:
        raise InvalidAction("Invalid action") from exc


def next_status(current: ModerationStatus, action: ModerationAction) -> ModerationStatus:
    try:
        return _TRANSITIONS[(current, action)]
    except KeyError as exc:
        raise Conflict(f"Recipe already {current.value.lower()}") from exc


async def submit(session: AsyncSession, draft: PendingRecipeCreate, user_id: int) -> PendingRecipe:
    entry = PendingRecipe(
        title=draft.title,
        description=draft.description,
        ingredients=draft.ingredients,
        instructions=draft.instructions,
        image_url=draft.image_url or None,
        category=draft.category or DEFAULT_CATEGORY,
        country=draft.country,
        dish_type=draft.dish_type or None,
        user_id=user_id,
        status=ModerationStatus.PENDING.value,
    )
    session.add(entry)
    await session.flush()
    return entry


async def list_pending(session: AsyncSession) -> list[PendingRecipe]:
    result = await session.execute(
        select(PendingRecipe)
        .where(PendingRecipe.status == ModerationStatus.PENDING.value)
        .order_by(PendingRecipe.created_at.desc(), PendingRecipe.id.desc())
    )
    return list(result.scalars().all())


async def get_entry(session: AsyncSession, entry_id: int) -> PendingRecipe | None:
    return await session.get(PendingRecipe, entry_id)


def _promote(entry: PendingRecipe) -> Recipe:
    # country and dish_type only steer generation; the catalog does not keep them
    return Recipe(
        title=entry.title,
        description=entry.description,
        ingredients=entry.ingredients,
        instructions=entry.instructions,
        image_url=entry.image_url,
        category=entry.category or DEFAULT_CATEGORY,
    )


async def decide(session: AsyncSession, entry_id: int, raw_action: str | None) -> tuple[PendingRecipe, Recipe | None]:
    """Apply an admin decision to a PENDING entry; nothing is committed here."""

    action = parse_action(raw_action)
    result = await session.execute(
        select(PendingRecipe).where(PendingRecipe.id == entry_id).with_for_update()
    )
    entry = result.scalar_one_or_none()
    if not entry:
        raise NotFound("Recipe not found")

    target = next_status(ModerationStatus(entry.status), action)
    recipe: Recipe | None = None
    if target is ModerationStatus.APPROVED:
        recipe = _promote(entry)
        session.add(recipe)
        await session.flush()
        entry.approved_recipe_id = recipe.id

    entry.status = target.value
    entry.decided_at = utcnow()
    await session.flush()
    logger.info("Pending recipe %s %s", entry.id, target.value.lower())
    return entry, recipe
