"""Retry executor: runs an operation until it succeeds, the strategy gives up, or the caller cancels.

Each attempt runs on its own worker (an asyncio task for coroutine functions,
a daemon thread of its own for plain functions) and is raced against a
per-attempt deadline and the caller's CancelToken. Whichever resolves first
decides the attempt:

- operation returned:   the value is returned, nothing is logged
- operation raised:     one warning is logged, then the strategy decides
                        between re-raising the error and sleeping
- deadline first:       AttemptTimeoutError, the strategy is not consulted
- token fired first:    RetryCancelledError, the strategy is not consulted

A timed-out coroutine operation is cancelled. A timed-out thread operation
cannot be stopped: the executor stops waiting for it but the thread runs
until the function returns on its own. Operations that may hang should watch
the same CancelToken (or their own deadline) and return early.

Example:
    >>> strategy = ExponentialBackoffStrategy(max_retries=5, base_delay=0.5)
    >>> user = await retry(lambda: client.get_user(42), strategy, "fetch user")
"""

from __future__ import annotations

import asyncio
import functools
import inspect
from typing import TYPE_CHECKING, Awaitable, Callable, Final, ParamSpec, TypeVar

from retryd.foundation.config import get_settings
from retryd.foundation.errors import (
    AttemptTimeoutError,
    ErrorCode,
    InvalidDelayError,
    RetryCancelledError,
)
from retryd.runtime.concurrency import CancelToken, run_sync, to_thread
from retryd.runtime.observability import get_logger

if TYPE_CHECKING:
    from retryd.runtime.observability import RetryLogger

    from .strategy import RetryStrategy

T = TypeVar("T")
P = ParamSpec("P")

Operation = Callable[[], Awaitable[T]] | Callable[[], T]


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"


# Sentinel: take the per-attempt timeout from settings
UNSET: Final = _Unset()


async def retry(
    operation: Operation[T],
    strategy: RetryStrategy,
    label: str,
    *,
    cancel: CancelToken | None = None,
    attempt_timeout: float | None | _Unset = UNSET,
    logger: RetryLogger | None = None,
) -> T:
    """Execute operation with retry logic based on strategy.

    Args:
        operation: Zero-argument callable, sync or async. Raising an Exception is a failed attempt
        strategy: Decides whether to retry and how long to wait
        label: Describes the operation in log messages ("Attempt 2 to <label>")
        cancel: Caller's cancellation signal; interrupts attempts and delays
        attempt_timeout: Per-attempt deadline in seconds. None disables it,
            UNSET uses RETRYD_RETRY_ATTEMPT_TIMEOUT (default 10s)
        logger: Receives one warning per failed attempt (default: get_logger("retryd"))

    Returns:
        Value returned by the first successful attempt

    Raises:
        Exception: The last operation error, unchanged, once the strategy stops
        AttemptTimeoutError: An attempt outlived attempt_timeout
        RetryCancelledError: The cancel token fired
        InvalidDelayError: The strategy returned a negative delay
    """
    timeout = get_settings().retry.attempt_timeout if isinstance(attempt_timeout, _Unset) else attempt_timeout
    log = logger if logger is not None else get_logger("retryd")
    token = cancel if cancel is not None else CancelToken()

    attempt = 0
    while True:
        if token.cancelled:
            raise _cancelled(token, label, attempt)

        finished = await _run_attempt(operation, token, timeout, label, attempt)
        try:
            return finished.result()
        except Exception as exc:
            log.warning(
                f"Attempt {attempt + 1} to {label}",
                label=label, attempt=attempt + 1, error=str(exc), error_type=type(exc).__name__,
            )

            should_retry, delay = strategy.should_retry(attempt, exc)
            if not should_retry:
                raise
            if delay < 0:
                raise InvalidDelayError.create(
                    label, f"{type(strategy).__name__} returned negative delay {delay!r}", attempt=attempt,
                ) from exc
            if not await token.sleep(delay):
                raise _cancelled(token, label, attempt) from exc
        attempt += 1


async def _run_attempt(
    operation: Operation[T], token: CancelToken, timeout: float | None, label: str, attempt: int,
) -> asyncio.Future[T]:
    """Race one invocation against its deadline and the cancel token. Returns the finished worker."""
    worker = asyncio.ensure_future(_invoke(operation))
    watcher = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait({worker, watcher}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
    finally:
        watcher.cancel()
        if not worker.done():
            worker.cancel()

    if token.cancelled:
        _discard(worker)
        raise _cancelled(token, label, attempt)
    if watcher in done:
        _discard(worker)
        watcher.result()
    if worker not in done:
        _discard(worker)
        raise AttemptTimeoutError.create(
            label, f"Attempt {attempt + 1} to {label} timed out after {timeout}s", attempt=attempt, timeout=timeout,
        )
    return worker


async def _invoke(operation: Operation[T]) -> T:
    if inspect.iscoroutinefunction(operation):
        return await operation()
    result = await to_thread(operation)
    # Sync callables may still hand back an awaitable (lambda: client.fetch())
    return await result if inspect.isawaitable(result) else result  # type: ignore[return-value]


def _discard(worker: asyncio.Future[object]) -> None:
    """Mark an abandoned worker's outcome as retrieved so asyncio does not warn about it."""
    worker.add_done_callback(lambda f: f.cancelled() or f.exception())


def _cancelled(token: CancelToken, label: str, attempt: int) -> RetryCancelledError:
    code = ErrorCode.DEADLINE_EXCEEDED if token.deadline_exceeded else ErrorCode.CANCELLED
    return RetryCancelledError.create(label, f"Retry of {label} {token.reason or 'cancelled'}", attempt=attempt, code=code)


def retry_sync(
    operation: Callable[[], T],
    strategy: RetryStrategy,
    label: str,
    *,
    cancel: CancelToken | None = None,
    attempt_timeout: float | None | _Unset = UNSET,
    logger: RetryLogger | None = None,
) -> T:
    """Blocking variant of retry() for synchronous callers. Same arguments and errors."""
    return run_sync(retry(operation, strategy, label, cancel=cancel, attempt_timeout=attempt_timeout, logger=logger))


def retryable(
    strategy: RetryStrategy,
    label: str | None = None,
    *,
    attempt_timeout: float | None | _Unset = UNSET,
    logger: RetryLogger | None = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator running every call of the wrapped function through the executor.

    Works on sync and async functions; label defaults to the function's qualified name.

    Example:
        >>> @retryable(FixedDelayStrategy(max_retries=3, delay=0.2))
        ... async def fetch_quote(symbol: str) -> float:
        ...     return await api.quote(symbol)
    """
    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        name = label or func.__qualname__

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
                return await retry(
                    functools.partial(func, *args, **kwargs), strategy, name,
                    attempt_timeout=attempt_timeout, logger=logger,
                )
            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return retry_sync(
                functools.partial(func, *args, **kwargs), strategy, name,
                attempt_timeout=attempt_timeout, logger=logger,
            )
        return wrapper

    return decorator
