"""Admin-managed settings exposed as a typed record over the settings table."""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ValidationFailed
from app.core.security import SecretManager
from app.models.setting import Setting

logger = logging.getLogger(__name__)

SECRET_KEYS = frozenset({"openai_api_key"})


@dataclass(slots=True)
class AISettings:
    openai_api_key: str | None = None


KNOWN_KEYS = frozenset(field.name for field in fields(AISettings))


def _decode(key: str, value: str, secret_manager: SecretManager) -> str:
    if key not in SECRET_KEYS or not value:
        return value
    try:
        return secret_manager.decrypt(value)
    except ValueError:
        # Rows written before encryption at rest hold the plain value
        logger.warning("Setting %s is not encrypted; re-save it to encrypt", key)
        return value


async def load_settings(session: AsyncSession, secret_manager: SecretManager) -> AISettings:
    result = await session.execute(select(Setting).where(Setting.key.in_(KNOWN_KEYS)))
    values = {row.key: _decode(row.key, row.value, secret_manager) for row in result.scalars().all()}
    return AISettings(**{key: value or None for key, value in values.items()})


async def update_setting(
    session: AsyncSession, key: str, value: str | None, secret_manager: SecretManager
) -> AISettings:
    """Upsert ``key``; an empty value clears it."""

    if key not in KNOWN_KEYS:
        raise ValidationFailed(f"Unknown setting: {key}")

    value = (value or "").strip()
    stored = secret_manager.encrypt(value) if value and key in SECRET_KEYS else value

    result = await session.execute(select(Setting).where(Setting.key == key))
    setting = result.scalar_one_or_none()
    if setting is None:
        setting = Setting(key=key, value=stored)
        session.add(setting)
    else:
        setting.value = stored
    await session.flush()
    return await load_settings(session, secret_manager)
