"""Reusable dependencies for FastAPI routes."""
from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.authorization import Capability, authorize
from app.core.errors import Unauthorized
from app.core.security import SecretManager
from app.core.sessions import SessionData, destroy_session, load_session
from app.db.session import get_session
from app.services.ai_provider import OpenAIProvider
from app.services.app_settings import load_settings
from app.services.importer import RecipeImporter
from app.services.users import get_session_version


async def get_db() -> AsyncIterator[AsyncSession]:
    async with get_session() as session:
        yield session


async def get_secret_manager() -> SecretManager:
    return SecretManager()


async def optional_session(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> SessionData | None:
    """Return the caller's session if it is present and still current."""

    session_data = load_session(request)
    if session_data is None:
        return None

    # A role change or deletion bumps/removes the version and retires old snapshots
    stored_version = await get_session_version(db, session_data.id)
    if stored_version is None or stored_version != session_data.session_version:
        destroy_session(response)
        # Error responses are built fresh by the handlers in main.py
        request.state.clear_session = True
        return None
    return session_data


async def require_authenticated(
    session_data: SessionData | None = Depends(optional_session),
) -> SessionData:
    authorize(session_data, Capability.AUTHENTICATED).raise_for_denial()
    if session_data is None:
        raise Unauthorized("Unauthorized")
    return session_data


async def require_admin(
    session_data: SessionData | None = Depends(optional_session),
) -> SessionData:
    authorize(session_data, Capability.ADMIN_ONLY).raise_for_denial()
    if session_data is None:
        raise Unauthorized("Unauthorized")
    return session_data


async def get_ai_provider(
    db: AsyncSession = Depends(get_db),
    secret_manager: SecretManager = Depends(get_secret_manager),
) -> OpenAIProvider:
    ai_settings = await load_settings(db, secret_manager)
    return OpenAIProvider(ai_settings.openai_api_key)


async def get_recipe_importer() -> RecipeImporter:
    return RecipeImporter()
