"""Sync/async interoperability utilities.

Bridges the async executor and plain-function operations:
    - to_thread: Run a sync operation on a daemon thread of its own
    - run_sync: Run the async executor from sync code

These handle the tricky edge cases:
    - Running in an existing event loop (e.g., FastAPI, Jupyter)
    - Abandoned workers: a thread cannot be interrupted, so a timed-out
      sync operation keeps running until it returns on its own. It holds
      no shared pool slot and, being a daemon, does not block interpreter exit.
"""

from __future__ import annotations

import asyncio
import contextvars
import functools
import threading
from typing import Callable, Coroutine, TypeVar

T = TypeVar("T")


def run_sync(coro: Coroutine[object, object, T]) -> T:
    """Run async coroutine from synchronous context.

    1. No running loop → asyncio.run()
    2. Called from within an event loop → run on a fresh loop in a helper thread
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    return _run_in_thread_loop(coro)


def _run_in_thread_loop(coro: Coroutine[object, object, T]) -> T:
    """Run coroutine in a new thread with its own event loop."""
    result: T | None = None
    error: BaseException | None = None
    ctx = contextvars.copy_context()

    def runner() -> None:
        nonlocal result, error
        try:
            result = ctx.run(asyncio.run, coro)
        except BaseException as e:
            error = e

    thread = threading.Thread(target=runner, name="retryd-run-sync", daemon=True)
    thread.start()
    thread.join()

    if error is not None:
        raise error
    return result  # type: ignore[return-value]


async def to_thread(func: Callable[..., T], *args: object, **kwargs: object) -> T:
    """Run sync function on a fresh daemon thread with the caller's context vars.

    Cancelling the returned awaitable stops the wait, not the thread.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[T] = loop.create_future()
    ctx = contextvars.copy_context()
    call = functools.partial(ctx.run, func, *args, **kwargs)

    def runner() -> None:
        try:
            outcome, failed = call(), False
        except BaseException as e:
            outcome, failed = e, True
        try:
            loop.call_soon_threadsafe(_settle, future, outcome, failed)
        except RuntimeError:
            pass  # Loop closed while the thread ran; nobody is waiting for it

    threading.Thread(target=runner, name="retryd-worker", daemon=True).start()
    return await future


def _settle(future: asyncio.Future[T], outcome: object, failed: bool) -> None:
    if future.done():
        return
    if failed:
        future.set_exception(outcome)  # type: ignore[arg-type]
    else:
        future.set_result(outcome)  # type: ignore[arg-type]
