"""Structured logging module: the injected logging collaborator for retry loops."""

from .logging import (
    BoundLogger,
    BufferedRenderer,
    ConsoleRenderer,
    JsonRenderer,
    LogEntry,
    LogRenderer,
    NoOpRenderer,
    RetryLogger,
    configure_from_settings,
    configure_logging,
    get_logger,
    shutdown_logging,
)

__all__ = [
    "BoundLogger",
    "BufferedRenderer",
    "ConsoleRenderer",
    "JsonRenderer",
    "LogEntry",
    "LogRenderer",
    "NoOpRenderer",
    "RetryLogger",
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    "shutdown_logging",
]
