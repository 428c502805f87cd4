"""
Configuration and settings for the feedback service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api")

    # Key-value store backends
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")
    redis_url: Optional[str] = Field(default=None, alias="REDIS_URL")
    redis_key_prefix: str = Field(
        default="feedback:", alias="FEEDBACK_REDIS_KEY_PREFIX"
    )

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, alias="FEEDBACK_USE_IN_MEMORY_BACKENDS"
    )

    # Shared bearer credential sent by the browser clients. Unset disables
    # the check.
    public_api_key: Optional[str] = Field(
        default=None, alias="FEEDBACK_PUBLIC_API_KEY"
    )

    # Admin
    default_admin_password: str = Field(
        default="RaSTechno@2024", alias="FEEDBACK_DEFAULT_ADMIN_PASSWORD"
    )
    session_ttl_seconds: int = Field(
        default=86400, alias="FEEDBACK_SESSION_TTL_SECONDS"
    )

    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["*"], alias="FEEDBACK_CORS_ALLOW_ORIGINS"
    )
    log_level: str = Field(default="INFO", alias="FEEDBACK_LOG_LEVEL")

    # uvicorn entry point
    host: str = Field(default="0.0.0.0", alias="FEEDBACK_HOST")
    port: int = Field(default=8000, alias="FEEDBACK_PORT")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
