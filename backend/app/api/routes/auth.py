"""Registration, login and session endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.dependencies import get_db, optional_session
from app.core.errors import Unauthorized
from app.core.sessions import SessionData, destroy_session, save_session, snapshot_for
from app.schemas.auth import LoginRequest, OkResponse, SessionRead
from app.schemas.user import UserCreate, UserRead
from app.services.users import authenticate_user, create_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register_user(payload: UserCreate, session: AsyncSession = Depends(get_db)) -> UserRead:
    settings = get_settings()
    user = await create_user(session, payload, admin_bootstrap_count=settings.admin_bootstrap_count)
    await session.commit()
    return UserRead.model_validate(user)


@router.post("/login", response_model=SessionRead)
async def login(
    payload: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_db),
) -> SessionRead:
    user = await authenticate_user(session, payload.username, payload.password)
    if not user:
        logger.info("Failed login for %s", payload.username)
        raise Unauthorized("Invalid username or password")

    snapshot = snapshot_for(user)
    save_session(response, snapshot)
    return SessionRead.model_validate(snapshot.model_dump())


@router.post("/logout", response_model=OkResponse)
async def logout(response: Response) -> OkResponse:
    destroy_session(response)
    return OkResponse()


@router.get("/me", response_model=SessionRead)
async def current_session_info(session_data: SessionData | None = Depends(optional_session)) -> SessionRead:
    if session_data is None:
        return SessionRead(is_logged_in=False)
    return SessionRead.model_validate(session_data.model_dump())
