"""Client settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SessionSettings(BaseSettings):
    """Tenant session settings.

    Environment variables:
        TENANCY_INACTIVITY_TIMEOUT_SECONDS: Idle time before forced sign-out (default: 1800)
        TENANCY_STORAGE_PATH: JSON file for persisted session hints (default: in-memory only)
        TENANCY_LOCALE: Language of user-facing messages, en or ar (default: en)
        TENANCY_ISOLATION_DEBUG: Log isolation summaries on every check (default: false)
        TENANCY_LOG_LEVEL: Minimum stdlib log level name (default: INFO)
        TENANCY_JSON_LOGS: Render logs as JSON (true) or console (false);
            unset picks console for a TTY and JSON otherwise
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    inactivity_timeout_seconds: float = Field(
        default=30 * 60,
        description="Idle time before the session guard signs the user out",
        ge=60,
    )
    storage_path: Path | None = Field(
        default=None,
        description="JSON file backing the persisted key-value store",
    )
    locale: Literal["en", "ar"] = Field(
        default="en",
        description="Language of onboarding messages",
    )
    isolation_debug: bool = Field(
        default=False,
        description="Log isolation check results and state summaries",
    )
    log_level: str = Field(default="INFO", description="Minimum log level name")
    json_logs: bool | None = Field(
        default=None,
        description="Force JSON or console log rendering; None auto-detects",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize and validate the log level name."""
        normalized = value.upper()
        levels = logging.getLevelNamesMapping()
        if normalized not in levels:
            raise ValueError(
                f"log_level must be one of {', '.join(sorted(levels))}, got {value!r}"
            )
        return normalized

    @property
    def log_level_number(self) -> int:
        """Get the numeric stdlib level for structlog filtering."""
        return logging.getLevelNamesMapping()[self.log_level]


@lru_cache
def get_session_settings() -> SessionSettings:
    """Get cached session settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return SessionSettings()
