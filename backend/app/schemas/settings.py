"""Pydantic schemas for admin settings."""
from __future__ import annotations

from pydantic import Field

from app.schemas.base import CamelModel


class SettingUpdate(CamelModel):
    key: str = Field(..., min_length=1, max_length=128)
    value: str | None = None


class SettingsRead(CamelModel):
    openai_api_key: str = ""
    openai_api_key_configured: bool = False
