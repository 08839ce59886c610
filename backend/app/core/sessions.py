"""Signed-cookie session store holding a snapshot of the logged-in user."""
from __future__ import annotations

import logging

from fastapi import Request, Response
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from app.core.config import get_settings
from app.core.security import SessionSigner

logger = logging.getLogger(__name__)


class SessionData(BaseModel):
    """Denormalized copy of a user taken at login time."""

    id: int
    username: str
    email: str
    role: str
    is_logged_in: bool = True
    profile_image_url: str | None = None
    session_version: int = 0

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def snapshot_for(user) -> SessionData:
    return SessionData(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        is_logged_in=True,
        profile_image_url=user.profile_image_url,
        session_version=user.session_version,
    )


def load_session(request: Request) -> SessionData | None:
    """Return the session stored in the request cookie, or None."""

    settings = get_settings()
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None

    try:
        payload = SessionSigner().loads(token)
        return SessionData.model_validate(payload)
    except (ValueError, ValidationError):
        logger.debug("Discarding unreadable session cookie")
        return None


def save_session(response: Response, data: SessionData) -> None:
    settings = get_settings()
    token = SessionSigner().dumps(data.model_dump())
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        max_age=settings.session_max_age_seconds,
    )


def destroy_session(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        settings.session_cookie_name,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
