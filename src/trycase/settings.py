"""Environment-based configuration using pydantic-settings.

Example:
    >>> from trycase.settings import get_settings
    >>> settings = get_settings()
    >>> settings.logging.captures
    False

    # Or with environment variables:
    # TRYCASE_LOG_LEVEL=DEBUG
    # TRYCASE_LOG_CAPTURES=true
    # TRYCASE_REPORT_INCLUDE_TRACEBACK=false
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, PositiveInt, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TRYCASE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"
    captures: bool = Field(default=False, description="Emit a debug event for every captured exception")

    @field_validator("level", "format", mode="before")
    @classmethod
    def _normalize_case(cls, v: str, info: ValidationInfo) -> str:
        if not isinstance(v, str):
            return v
        return v.upper() if info.field_name == "level" else v.lower()


class ReportSettings(BaseSettings):
    """Failure report configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TRYCASE_REPORT_",
        extra="ignore",
    )

    include_traceback: bool = True
    max_message_length: PositiveInt | None = Field(default=None, description="Truncate longer messages")


class TrycaseSettings(BaseSettings):
    """Root settings, loaded from ``TRYCASE_`` environment variables and ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="TRYCASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    report: ReportSettings = Field(default_factory=ReportSettings)


@lru_cache(maxsize=1)
def get_settings() -> TrycaseSettings:
    """Get the global settings instance (cached)."""
    return TrycaseSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() rereads the environment."""
    get_settings.cache_clear()
