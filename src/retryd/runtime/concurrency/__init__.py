"""Concurrency primitives for the retry executor.

Key Components:
    - CancelToken: Caller-controlled cancellation with optional deadline
    - checkpoint: Cooperative cancellation point
    - to_thread / run_sync: Sync/async interop

Design Philosophy:
    - Structured: a worker never outlives the attempt that started it
      (coroutines are cancelled; threads are abandoned, not killed)
    - Zero external dependencies: Pure asyncio (Python 3.11+)
"""

from __future__ import annotations

from .cancel import DEADLINE_EXCEEDED, CancelToken, checkpoint
from .interop import run_sync, to_thread

__all__ = [
    "CancelToken",
    "DEADLINE_EXCEEDED",
    "checkpoint",
    "run_sync",
    "to_thread",
]
