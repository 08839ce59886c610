"""Authentication-related schemas."""
from __future__ import annotations

from pydantic import Field

from app.schemas.base import CamelModel


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)


class SessionRead(CamelModel):
    is_logged_in: bool = False
    id: int | None = None
    username: str | None = None
    email: str | None = None
    role: str | None = None
    profile_image_url: str | None = None


class OkResponse(CamelModel):
    ok: bool = True
