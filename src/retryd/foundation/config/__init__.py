"""Configuration management using pydantic-settings."""

from .settings import (
    LoggingSettings,
    RetrydSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "LoggingSettings",
    "RetrydSettings",
    "RetrySettings",
    "clear_settings_cache",
    "get_settings",
]
