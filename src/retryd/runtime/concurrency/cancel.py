"""Caller-controlled cancellation for retry loops.

A CancelToken is the signal a caller hands to the executor to stop a retry
loop early, optionally with an overall deadline. Both the in-flight attempt
and any pending backoff delay wait on it, so firing it is honoured promptly.

A token is not tied to an event loop: one token can cover several retry_sync()
calls (each runs its own loop), and cancel() may be called from any thread.

Example:
    >>> token = CancelToken(timeout=30.0)  # whole run gets 30s
    >>> result = await retry(fetch, ExponentialBackoffStrategy(max_retries=5), "fetch", cancel=token)
    >>>
    >>> # Elsewhere, on shutdown (any thread):
    >>> token.cancel("shutting down")
"""

from __future__ import annotations

import asyncio
import threading
import time
from dataclasses import dataclass, field

DEADLINE_EXCEEDED = "deadline exceeded"


@dataclass(slots=True)
class CancelToken:
    """Cancellation signal with an optional deadline.

    The deadline is measured with time.monotonic() from construction. The token
    only ever moves from live to fired, and the reason it fired with first is
    the one it keeps.

    Attributes:
        timeout: Seconds until the token fires on its own (None = never)
    """

    timeout: float | None = None
    _deadline: float | None = field(default=None, init=False, repr=False)
    _reason: str | None = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _waiters: list[asyncio.Future[None]] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.timeout is not None:
            if self.timeout < 0:
                raise ValueError(f"timeout must be >= 0, got {self.timeout}")
            self._deadline = time.monotonic() + self.timeout

    def cancel(self, reason: str = "cancelled") -> None:
        """Fire the token. Safe from any thread; a token that already fired keeps its first reason."""
        self._check_deadline()
        if self._fire(reason):
            self._wake_waiters()

    def _fire(self, reason: str) -> bool:
        with self._lock:
            if self._reason is not None:
                return False
            self._reason = reason
            return True

    def _wake_waiters(self) -> None:
        with self._lock:
            waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            try:
                waiter.get_loop().call_soon_threadsafe(_resolve, waiter)
            except RuntimeError:
                pass  # Loop already closed; nothing is waiting there anymore

    def _check_deadline(self) -> None:
        if self._reason is None and self._deadline is not None and time.monotonic() >= self._deadline:
            self._fire(DEADLINE_EXCEEDED)

    @property
    def cancelled(self) -> bool:
        """Whether cancel() was called or the deadline passed."""
        self._check_deadline()
        return self._reason is not None

    @property
    def deadline_exceeded(self) -> bool:
        """Whether the token fired because its own deadline passed."""
        return self.cancelled and self._reason == DEADLINE_EXCEEDED

    @property
    def reason(self) -> str | None:
        self._check_deadline()
        return self._reason

    def remaining(self) -> float | None:
        """Seconds left until the deadline, clamped at 0 (None without a deadline)."""
        return None if self._deadline is None else max(0.0, self._deadline - time.monotonic())

    async def wait(self) -> None:
        """Block until the token fires. Works on whichever loop is running."""
        if self.cancelled:
            return
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        with self._lock:
            fired = self._reason is not None
            if not fired:
                self._waiters.append(waiter)
        if fired:
            return
        try:
            await asyncio.wait_for(waiter, self.remaining())
        except asyncio.TimeoutError:
            self._check_deadline()
        finally:
            with self._lock:
                if waiter in self._waiters:
                    self._waiters.remove(waiter)

    async def sleep(self, delay: float) -> bool:
        """Sleep for delay seconds unless the token fires first.

        Returns:
            True if the full delay elapsed, False if interrupted by cancellation
        """
        if self.cancelled:
            return False
        if delay <= 0:
            await checkpoint()
            return not self.cancelled
        try:
            await asyncio.wait_for(self.wait(), delay)
        except asyncio.TimeoutError:
            return not self.cancelled
        return False


def _resolve(waiter: asyncio.Future[None]) -> None:
    if not waiter.done():
        waiter.set_result(None)


async def checkpoint() -> None:
    """Cooperative cancellation checkpoint.

    Yields control to the event loop, allowing pending cancellations
    to be processed.
    """
    await asyncio.sleep(0)
