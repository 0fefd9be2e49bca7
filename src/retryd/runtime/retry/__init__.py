"""Retry-with-backoff execution.

Runs a fallible operation until it succeeds, a pluggable strategy declares
no further attempts, or the caller's cancel token fires.

Example:
    >>> from retryd.runtime.retry import retry, ExponentialBackoffStrategy
    >>> from retryd.runtime.concurrency import CancelToken
    >>>
    >>> token = CancelToken(timeout=60.0)
    >>> rows = await retry(
    ...     load_rows,
    ...     ExponentialBackoffStrategy(max_retries=4, base_delay=0.5),
    ...     "load rows",
    ...     cancel=token,
    ...     attempt_timeout=5.0,
    ... )
"""

from .executor import UNSET, retry, retry_sync, retryable
from .strategy import (
    MAX_EXPONENT,
    ExponentialBackoffStrategy,
    FixedDelayStrategy,
    JitteredBackoffStrategy,
    RetryStrategy,
    strategy_from_settings,
)

__all__ = [
    # Strategies
    "RetryStrategy",
    "FixedDelayStrategy",
    "ExponentialBackoffStrategy",
    "JitteredBackoffStrategy",
    "MAX_EXPONENT",
    "strategy_from_settings",
    # Execution
    "retry",
    "retry_sync",
    "retryable",
    "UNSET",
]
