"""Retry an operation that fails four times before succeeding.

Runs it once with a fixed delay and once with exponential backoff, logging
each failed attempt as a JSON line.

Usage:
    python -m retryd.examples.basic
"""

from __future__ import annotations

import sys
from typing import TextIO

from retryd.runtime.concurrency import run_sync
from retryd.runtime.observability import configure_logging, get_logger, shutdown_logging
from retryd.runtime.retry import ExponentialBackoffStrategy, FixedDelayStrategy, RetryStrategy, retry


class _FlakyCounter:
    """Raises until it has been called `succeed_on` times."""

    def __init__(self, succeed_on: int = 5) -> None:
        self.calls, self.succeed_on = 0, succeed_on

    def __call__(self) -> int:
        self.calls += 1
        if self.calls < self.succeed_on:
            raise RuntimeError("temporary error")
        return self.calls


async def _run(strategy: RetryStrategy, out: TextIO) -> bool:
    operation = _FlakyCounter()
    try:
        await retry(operation, strategy, "counting", logger=get_logger("example"))
    except Exception as e:
        print(f"Operation failed: {e}", file=out)
        return False
    print("Operation succeeded!", file=out)
    return True


def main(delay: float = 1.0, out: TextIO | None = None) -> int:
    out = out or sys.stdout
    configure_logging(format="json", output=out, buffer_size=20)
    try:
        print("Using FixedDelayStrategy:", file=out)
        fixed = run_sync(_run(FixedDelayStrategy(max_retries=5, delay=delay), out))
        print("\nUsing ExponentialBackoffStrategy:", file=out)
        exponential = run_sync(_run(ExponentialBackoffStrategy(max_retries=5, base_delay=delay), out))
    finally:
        shutdown_logging()
    return 0 if fixed and exponential else 1


if __name__ == "__main__":
    raise SystemExit(main())
