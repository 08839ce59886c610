"""Application configuration and settings management."""
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".." / ".env"),
        env_file_encoding="utf-8",
        env_prefix="REZEPT_",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = "Rezept"
    secret_key: str = "change-me"
    encryption_key: str | None = None
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./rezept.db"

    # Sessions
    session_cookie_name: str = "rezept_session"
    session_max_age_seconds: int = 60 * 60 * 24 * 7
    session_cookie_secure: bool = False  # only behind HTTPS in production
    allowed_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Accounts
    admin_bootstrap_count: int = 2
    allow_self_role_change: bool = True

    # AI provider
    openai_base_url: str = "https://api.openai.com/v1"
    openai_text_model: str = "gpt-4o-mini"
    openai_vision_model: str = "gpt-4o"
    openai_image_model: str = "dall-e-3"
    openai_timeout_seconds: float = 60.0

    # Importer
    import_allowed_host: str = "chefkoch.de"
    import_timeout_seconds: float = 15.0

    # Frontend build served at /
    static_dir: str | None = None

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: List[str] | str) -> List[str]:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings instance."""

    return Settings()


settings = get_settings()
