"""Pydantic schemas for user operations."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import EmailStr, Field, field_validator

from app.schemas.base import CamelModel


class UserCreate(CamelModel):
    username: str = Field(..., min_length=3, max_length=64)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("username")
    @classmethod
    def _strip_username(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 3:
            raise ValueError("Username must be at least 3 characters")
        return value


class UserRead(CamelModel):
    id: int
    username: str
    email: str
    role: str
    profile_image_url: str | None = None
    created_at: datetime


class UserRoleUpdate(CamelModel):
    role: Literal["USER", "ADMIN"]


class ProfileImageResponse(CamelModel):
    success: bool = True
    image_url: str
    message: str = "Profile image generated"
