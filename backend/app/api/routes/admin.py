"""Admin endpoints for user management and application settings."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.authorization import ActionKind, Capability, Role, authorize
from app.core.config import get_settings
from app.core.dependencies import get_db, get_secret_manager, require_admin
from app.core.security import SecretManager, mask_secret
from app.core.sessions import SessionData, save_session, snapshot_for
from app.schemas.auth import OkResponse
from app.schemas.settings import SettingsRead, SettingUpdate
from app.schemas.user import UserRead, UserRoleUpdate
from app.services import app_settings
from app.services import users as user_service
from app.services.app_settings import AISettings

router = APIRouter(prefix="/admin", tags=["admin"])


def _settings_to_read(ai_settings: AISettings) -> SettingsRead:
    return SettingsRead(
        openai_api_key=mask_secret(ai_settings.openai_api_key),
        openai_api_key_configured=bool(ai_settings.openai_api_key),
    )


@router.get("/users", response_model=list[UserRead])
async def list_users(
    session: AsyncSession = Depends(get_db),
    _: SessionData = Depends(require_admin),
) -> list[UserRead]:
    users = await user_service.list_users(session)
    return [UserRead.model_validate(user) for user in users]


@router.patch("/users/{user_id}", response_model=UserRead)
async def change_user_role(
    user_id: int,
    payload: UserRoleUpdate,
    response: Response,
    session: AsyncSession = Depends(get_db),
    session_data: SessionData = Depends(require_admin),
) -> UserRead:
    authorize(
        session_data,
        Capability.ADMIN_ONLY,
        target_user_id=user_id,
        action=ActionKind.CHANGE_ROLE,
        allow_self_role_change=get_settings().allow_self_role_change,
    ).raise_for_denial()

    user = await user_service.change_role(session, user_id, Role(payload.role))
    await session.commit()
    if user.id == session_data.id:
        # Keep the caller signed in with the new role and version
        save_session(response, snapshot_for(user))
    return UserRead.model_validate(user)


@router.delete("/users/{user_id}", response_model=OkResponse)
async def delete_user(
    user_id: int,
    session: AsyncSession = Depends(get_db),
    session_data: SessionData = Depends(require_admin),
) -> OkResponse:
    authorize(
        session_data,
        Capability.ADMIN_ONLY,
        target_user_id=user_id,
        action=ActionKind.DELETE_USER,
    ).raise_for_denial()

    await user_service.delete_user(session, user_id)
    await session.commit()
    return OkResponse()


@router.get("/settings", response_model=SettingsRead)
async def get_app_settings(
    session: AsyncSession = Depends(get_db),
    secret_manager: SecretManager = Depends(get_secret_manager),
    _: SessionData = Depends(require_admin),
) -> SettingsRead:
    return _settings_to_read(await app_settings.load_settings(session, secret_manager))


@router.post("/settings", response_model=SettingsRead)
async def update_app_setting(
    payload: SettingUpdate,
    session: AsyncSession = Depends(get_db),
    secret_manager: SecretManager = Depends(get_secret_manager),
    _: SessionData = Depends(require_admin),
) -> SettingsRead:
    ai_settings = await app_settings.update_setting(session, payload.key, payload.value, secret_manager)
    await session.commit()
    return _settings_to_read(ai_settings)
