"""Password hashing, encryption of stored settings and session cookie signing."""
from __future__ import annotations

import base64
import binascii
import hashlib
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from itsdangerous import BadSignature, URLSafeTimedSerializer
from passlib.context import CryptContext

from .config import get_settings

SESSION_SALT = "rezept-session"

_password_context = CryptContext(schemes=["argon2"], deprecated="auto")


class PasswordHasher:
    """Argon2id hashes for user passwords."""

    @staticmethod
    def hash(password: str) -> str:
        return _password_context.hash(password)

    @staticmethod
    def verify(password: str, hashed: str) -> bool:
        # Rows with a hash passlib cannot identify never authenticate
        try:
            return _password_context.verify(password, hashed)
        except ValueError:
            return False


def _fernet_key(raw_key: str) -> bytes:
    """Use ``raw_key`` if it already is a Fernet key, otherwise derive one from it."""

    try:
        if len(base64.urlsafe_b64decode(raw_key.encode("ascii"))) == 32:
            return raw_key.encode("ascii")
    except (binascii.Error, UnicodeEncodeError, ValueError):
        pass
    return base64.urlsafe_b64encode(hashlib.sha256(raw_key.encode("utf-8")).digest())


class SecretManager:
    """Fernet encryption for secret settings such as the AI provider key.

    ``REZEPT_ENCRYPTION_KEY`` takes precedence over the session secret, so
    rotating the cookie secret does not orphan stored keys.
    """

    def __init__(self, key: str | None = None) -> None:
        settings = get_settings()
        self._fernet = Fernet(_fernet_key(key or settings.encryption_key or settings.secret_key))

    def encrypt(self, value: str) -> str:
        return self._fernet.encrypt(value.encode("utf-8")).decode("ascii")

    def decrypt(self, token: str) -> str:
        try:
            return self._fernet.decrypt(token.encode("utf-8")).decode("utf-8")
        except InvalidToken as exc:
            raise ValueError("Value is not encrypted with the configured key") from exc


class SessionSigner:
    """Timestamped signatures for the session cookie payload."""

    def __init__(self, salt: str = SESSION_SALT, max_age: int | None = None) -> None:
        settings = get_settings()
        self._serializer = URLSafeTimedSerializer(settings.secret_key, salt=salt)
        self._max_age = max_age if max_age is not None else settings.session_max_age_seconds

    def dumps(self, data: dict[str, Any]) -> str:
        return self._serializer.dumps(data)

    def loads(self, token: str) -> dict[str, Any]:
        # SignatureExpired is a BadSignature
        try:
            return self._serializer.loads(token, max_age=self._max_age)
        except BadSignature as exc:
            raise ValueError("Invalid or expired session token") from exc


def mask_secret(value: str | None, visible: int = 4) -> str:
    """Return ``value`` with everything but the last ``visible`` characters hidden."""

    if not value:
        return ""
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
