"""User service functions for registration, authentication and administration."""
from __future__ import annotations

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.authorization import Role
from app.core.errors import Conflict, NotFound
from app.core.security import PasswordHasher
from app.models.user import User
from app.schemas.user import UserCreate

logger = logging.getLogger(__name__)


async def get_user(session: AsyncSession, user_id: int) -> User | None:
    return await session.get(User, user_id)


async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
    result = await session.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def count_users(session: AsyncSession) -> int:
    result = await session.execute(select(func.count(User.id)))
    return result.scalar_one()


async def create_user(session: AsyncSession, user_in: UserCreate, admin_bootstrap_count: int = 2) -> User:
    """Register a user; the first ``admin_bootstrap_count`` accounts become admins."""

    existing = await session.execute(
        select(User).where(or_(User.username == user_in.username, User.email == user_in.email))
    )
    clash = existing.scalars().first()
    if clash:
        if clash.username == user_in.username:
            raise Conflict("Username already exists")
        raise Conflict("Email already exists")

    is_admin = await count_users(session) < admin_bootstrap_count
    user = User(
        username=user_in.username,
        email=user_in.email,
        password_hash=PasswordHasher.hash(user_in.password),
        role=Role.ADMIN.value if is_admin else Role.USER.value,
    )
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise Conflict("Username or email already exists") from exc
    logger.info("Registered user %s (admin=%s)", user.username, is_admin)
    return user


async def authenticate_user(session: AsyncSession, username: str, password: str) -> User | None:
    user = await get_user_by_username(session, username)
    if not user:
        return None
    if not PasswordHasher.verify(password, user.password_hash):
        return None
    return user


async def get_session_version(session: AsyncSession, user_id: int) -> int | None:
    result = await session.execute(select(User.session_version).where(User.id == user_id))
    return result.scalar_one_or_none()


async def list_users(session: AsyncSession) -> list[User]:
    result = await session.execute(select(User).order_by(User.id))
    return list(result.scalars().all())


async def change_role(session: AsyncSession, user_id: int, role: Role) -> User:
    user = await get_user(session, user_id)
    if not user:
        raise NotFound("User not found")
    if user.role != role.value:
        user.role = role.value
        user.session_version += 1
    await session.flush()
    logger.info("Role of user %s set to %s", user.username, role.value)
    return user


async def delete_user(session: AsyncSession, user_id: int) -> None:
    user = await get_user(session, user_id)
    if not user:
        raise NotFound("User not found")
    await session.delete(user)
    await session.flush()
    logger.info("Deleted user %s", user.username)


async def set_profile_image(session: AsyncSession, user: User, image_url: str) -> User:
    user.profile_image_url = image_url
    await session.flush()
    return user
