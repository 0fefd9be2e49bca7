"""retryd: retry-with-backoff for sync and async operations.

Example:
    >>> from retryd import retry, FixedDelayStrategy, CancelToken
    >>> await retry(ping, FixedDelayStrategy(max_retries=3, delay=1.0), "ping upstream")
"""

from retryd.foundation.config import RetrydSettings, clear_settings_cache, get_settings
from retryd.foundation.errors import (
    AttemptTimeoutError,
    ErrorCode,
    InvalidDelayError,
    RetryCancelledError,
    RetryError,
    RetryErrorInfo,
)
from retryd.runtime.concurrency import CancelToken
from retryd.runtime.observability import configure_logging, get_logger, shutdown_logging
from retryd.runtime.retry import (
    ExponentialBackoffStrategy,
    FixedDelayStrategy,
    JitteredBackoffStrategy,
    RetryStrategy,
    retry,
    retry_sync,
    retryable,
    strategy_from_settings,
)

__version__ = "0.1.0"

__all__ = [
    # Execution
    "retry", "retry_sync", "retryable", "CancelToken",
    # Strategies
    "RetryStrategy", "FixedDelayStrategy", "ExponentialBackoffStrategy", "JitteredBackoffStrategy",
    "strategy_from_settings",
    # Errors
    "ErrorCode", "RetryErrorInfo", "RetryError", "AttemptTimeoutError", "RetryCancelledError", "InvalidDelayError",
    # Config & logging
    "RetrydSettings", "get_settings", "clear_settings_cache",
    "configure_logging", "get_logger", "shutdown_logging",
]
