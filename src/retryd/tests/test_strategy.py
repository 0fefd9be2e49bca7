"""Tests for backoff strategies."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from retryd.foundation.config import RetrySettings
from retryd.runtime.retry import (
    MAX_EXPONENT,
    ExponentialBackoffStrategy,
    FixedDelayStrategy,
    JitteredBackoffStrategy,
    RetryStrategy,
    strategy_from_settings,
)

ERR = RuntimeError("boom")

ALL_STRATEGIES = [
    FixedDelayStrategy(max_retries=3, delay=0.5),
    ExponentialBackoffStrategy(max_retries=3, base_delay=0.5),
    JitteredBackoffStrategy(max_retries=3, base_delay=0.5),
]


@pytest.mark.parametrize("strategy", ALL_STRATEGIES, ids=lambda s: type(s).__name__)
def test_stops_once_attempts_reach_max(strategy: RetryStrategy) -> None:
    """Every built-in strategy returns (False, 0) at and beyond max_retries."""
    for attempt in (3, 4, 10, 1000):
        assert strategy.should_retry(attempt, ERR) == (False, 0.0)


@pytest.mark.parametrize("strategy", ALL_STRATEGIES, ids=lambda s: type(s).__name__)
def test_satisfies_protocol(strategy: RetryStrategy) -> None:
    assert isinstance(strategy, RetryStrategy)


def test_zero_max_retries_never_retries() -> None:
    assert FixedDelayStrategy(max_retries=0, delay=1.0).should_retry(0, ERR) == (False, 0.0)
    assert ExponentialBackoffStrategy(max_retries=0).should_retry(0, ERR) == (False, 0.0)


def test_fixed_delay_is_constant() -> None:
    strategy = FixedDelayStrategy(max_retries=5, delay=0.25)
    assert [strategy.should_retry(a, ERR) for a in range(5)] == [(True, 0.25)] * 5


def test_exponential_doubles_from_base() -> None:
    strategy = ExponentialBackoffStrategy(max_retries=6, base_delay=0.1)
    delays = [strategy.should_retry(a, ERR)[1] for a in range(6)]
    assert delays == [0.1 * 2**a for a in range(6)]


def test_exponential_ignores_error_content() -> None:
    strategy = ExponentialBackoffStrategy(max_retries=2, base_delay=1.0)
    assert strategy.should_retry(1, ValueError("x")) == strategy.should_retry(1, KeyError("y")) == (True, 2.0)


def test_exponential_clamps_exponent() -> None:
    """Huge attempt counts do not overflow: the exponent stops growing at MAX_EXPONENT."""
    strategy = ExponentialBackoffStrategy(max_retries=10_000, base_delay=1e-9)
    ok, delay = strategy.should_retry(5_000, ERR)
    assert ok
    assert delay == 1e-9 * 2**MAX_EXPONENT
    assert strategy.should_retry(MAX_EXPONENT, ERR) == strategy.should_retry(MAX_EXPONENT + 1, ERR)


def test_exponential_respects_max_delay() -> None:
    strategy = ExponentialBackoffStrategy(max_retries=10, base_delay=1.0, max_delay=5.0)
    assert [strategy.should_retry(a, ERR)[1] for a in range(5)] == [1.0, 2.0, 4.0, 5.0, 5.0]


def test_jitter_stays_within_bounds() -> None:
    strategy = JitteredBackoffStrategy(max_retries=10, base_delay=1.0, max_delay=None)
    for attempt in range(6):
        ok, delay = strategy.should_retry(attempt, ERR)
        assert ok
        assert 0.5 * 2**attempt <= delay < 1.5 * 2**attempt


def test_jitter_capped_by_default() -> None:
    strategy = JitteredBackoffStrategy(max_retries=100, base_delay=1.0)
    assert all(strategy.should_retry(a, ERR)[1] <= 30.0 for a in range(20, 30))


@pytest.mark.parametrize("kwargs", [
    {"max_retries": -1},
    {"delay": -0.1},
    {"unknown": 1},
])
def test_fixed_rejects_invalid_config(kwargs: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        FixedDelayStrategy(**kwargs)


@pytest.mark.parametrize("kwargs", [
    {"max_retries": -3},
    {"base_delay": -1.0},
    {"max_delay": 0},
])
def test_exponential_rejects_invalid_config(kwargs: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        ExponentialBackoffStrategy(**kwargs)


def test_strategies_are_immutable() -> None:
    strategy = FixedDelayStrategy(max_retries=1, delay=1.0)
    with pytest.raises(ValidationError):
        strategy.max_retries = 5  # type: ignore[misc]
    assert hash(strategy) == hash(FixedDelayStrategy(max_retries=1, delay=1.0))


def test_strategy_from_settings() -> None:
    fixed = strategy_from_settings(RetrySettings(strategy="fixed", max_retries=2, delay=0.3))
    assert fixed == FixedDelayStrategy(max_retries=2, delay=0.3)

    exponential = strategy_from_settings(RetrySettings(max_retries=4, base_delay=0.2, max_delay=1.0))
    assert exponential == ExponentialBackoffStrategy(max_retries=4, base_delay=0.2, max_delay=1.0)
