"""Backoff strategies deciding whether to retry and how long to wait.

Provides pluggable retry decisions:
- FixedDelayStrategy: Constant delay, bounded retry count
- ExponentialBackoffStrategy: Doubling delay with overflow guard and optional cap
- JitteredBackoffStrategy: Exponential with randomization (avoids thundering herd)

Any object with a matching should_retry() can be passed to the executor.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Annotated, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, PositiveFloat

if TYPE_CHECKING:
    from retryd.foundation.config import RetrySettings

# Largest shift that still fits a signed 64-bit duration; exponents above this are clamped
MAX_EXPONENT = 62

_STOP: tuple[bool, float] = (False, 0.0)


@runtime_checkable
class RetryStrategy(Protocol):
    """Protocol for retry decisions.

    Attempt numbers are 0-indexed: attempt=0 is the first failure.
    """

    def should_retry(self, attempt: int, error: BaseException) -> tuple[bool, float]:
        """Decide whether to retry after a failed attempt.

        Args:
            attempt: Number of failed attempts before this one (0 on first failure)
            error: Error raised by the most recent attempt

        Returns:
            (retry?, delay in seconds before the next attempt)
        """
        ...


class _StrategyModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", revalidate_instances="never")

    max_retries: Annotated[int, Field(ge=0)] = 3


class FixedDelayStrategy(_StrategyModel):
    """Retry up to max_retries times with the same delay each time.

    Attributes:
        max_retries: Retries allowed after the first attempt (0 = no retries)
        delay: Delay in seconds before every retry
    """

    delay: NonNegativeFloat = 1.0

    def should_retry(self, attempt: int, error: BaseException) -> tuple[bool, float]:
        return (True, self.delay) if attempt < self.max_retries else _STOP


class ExponentialBackoffStrategy(_StrategyModel):
    """Retry up to max_retries times, doubling the delay each time.

    Delay = min(base_delay * 2^min(attempt, MAX_EXPONENT), max_delay)

    Attributes:
        max_retries: Retries allowed after the first attempt
        base_delay: Delay in seconds before the first retry
        max_delay: Optional cap in seconds (None = uncapped, exponent still clamped)
    """

    base_delay: NonNegativeFloat = 1.0
    max_delay: PositiveFloat | None = None

    def delay(self, attempt: int) -> float:
        d = self.base_delay * (1 << min(attempt, MAX_EXPONENT))
        return d if self.max_delay is None else min(d, self.max_delay)

    def should_retry(self, attempt: int, error: BaseException) -> tuple[bool, float]:
        return (True, self.delay(attempt)) if attempt < self.max_retries else _STOP


class JitteredBackoffStrategy(ExponentialBackoffStrategy):
    """Exponential backoff scaled by a random factor in [0.5, 1.5).

    Spreads out callers that failed together. The cap still applies after jitter.
    """

    max_delay: PositiveFloat | None = 30.0

    def delay(self, attempt: int) -> float:
        d = ExponentialBackoffStrategy.delay(self, attempt) * (0.5 + random.random())
        return d if self.max_delay is None else min(d, self.max_delay)


def strategy_from_settings(settings: RetrySettings) -> RetryStrategy:
    """Build the configured default strategy."""
    if settings.strategy == "fixed":
        return FixedDelayStrategy(max_retries=settings.max_retries, delay=settings.delay)
    return ExponentialBackoffStrategy(
        max_retries=settings.max_retries, base_delay=settings.base_delay, max_delay=settings.max_delay,
    )
