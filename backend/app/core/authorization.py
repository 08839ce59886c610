"""Capability checks evaluated against the session snapshot.

``authorize`` never looks at the database: the role carried by the session is
the only input. Stale roles are handled by session versioning in
``app.core.dependencies`` before a session ever reaches this module.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass

from app.core.errors import AppError, Forbidden, Unauthorized
from app.core.sessions import SessionData


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class Capability(str, enum.Enum):
    PUBLIC_READ = "PUBLIC_READ"
    AUTHENTICATED = "AUTHENTICATED"
    ADMIN_ONLY = "ADMIN_ONLY"
    SELF_OR_ADMIN = "SELF_OR_ADMIN"


class ActionKind(str, enum.Enum):
    DELETE_USER = "DELETE_USER"
    CHANGE_ROLE = "CHANGE_ROLE"


@dataclass(frozen=True, slots=True)
class Decision:
    allowed: bool
    reason: str | None = None
    error: type[AppError] | None = None

    @classmethod
    def allow(cls) -> Decision:
        return cls(allowed=True)

    @classmethod
    def deny(cls, error: type[AppError], reason: str) -> Decision:
        return cls(allowed=False, reason=reason, error=error)

    def raise_for_denial(self) -> None:
        if not self.allowed:
            raise (self.error or Forbidden)(self.reason or "Access denied")


def authorize(
    session: SessionData | None,
    capability: Capability,
    *,
    target_user_id: int | None = None,
    action: ActionKind | None = None,
    allow_self_role_change: bool = True,
) -> Decision:
    """Decide whether ``session`` holds ``capability``."""

    if capability is Capability.PUBLIC_READ:
        return Decision.allow()

    if session is None or not session.is_logged_in:
        return Decision.deny(Unauthorized, "Unauthorized")
    is_admin = session.role == Role.ADMIN.value

    if capability is Capability.AUTHENTICATED:
        return Decision.allow()

    if capability is Capability.SELF_OR_ADMIN:
        if session.id == target_user_id or is_admin:
            return Decision.allow()
        return Decision.deny(Forbidden, "Forbidden")

    if capability is Capability.ADMIN_ONLY:
        if not is_admin:
            return Decision.deny(Forbidden, "Forbidden")
        if target_user_id is not None and target_user_id == session.id:
            if action is ActionKind.DELETE_USER:
                return Decision.deny(Forbidden, "Forbidden: cannot delete own account")
            if action is ActionKind.CHANGE_ROLE and not allow_self_role_change:
                return Decision.deny(Forbidden, "Forbidden: cannot change own role")
        return Decision.allow()

    raise ValueError(f"Unknown capability: {capability}")
