"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated defaults for the retry executor and logging.
Supports .env files and nested configuration.

Example:
    >>> from retryd.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.attempt_timeout
    10.0

    # Or with environment variables:
    # RETRYD_RETRY_MAX_RETRIES=5
    # RETRYD_RETRY_STRATEGY=fixed
    # RETRYD_LOG_FORMAT=json
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, NonNegativeFloat, NonNegativeInt, PositiveFloat, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrySettings(BaseSettings):
    """Default retry configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYD_RETRY_",
        extra="ignore",
    )

    max_retries: Annotated[int, Field(ge=0, le=100)] = 3
    strategy: Literal["fixed", "exponential"] = "exponential"
    delay: NonNegativeFloat = Field(default=1.0, description="Fixed delay in seconds")
    base_delay: NonNegativeFloat = Field(default=1.0, description="Exponential base delay in seconds")
    max_delay: PositiveFloat | None = Field(default=None, description="Cap on exponential delay")
    attempt_timeout: PositiveFloat | None = Field(default=10.0, description="Per-attempt deadline in seconds")

    @field_validator("strategy", mode="before")
    @classmethod
    def _normalize_strategy(cls, v: str) -> str:
        return v.lower() if isinstance(v, str) else v


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYD_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"
    buffer_size: NonNegativeInt = Field(default=0, description="Entries buffered before flush (0 = unbuffered)")

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class RetrydSettings(BaseSettings):
    """Root settings for retryd.

    Loads configuration from environment variables with RETRYD_ prefix.

    Example environment variables:
        RETRYD_RETRY_MAX_RETRIES=5
        RETRYD_RETRY_ATTEMPT_TIMEOUT=30
        RETRYD_LOG_LEVEL=DEBUG
        RETRYD_LOG_BUFFER_SIZE=20
    """

    model_config = SettingsConfigDict(
        env_prefix="RETRYD_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> RetrydSettings:
    """Get the global settings instance (cached)."""
    return RetrydSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() rereads the environment."""
    get_settings.cache_clear()
