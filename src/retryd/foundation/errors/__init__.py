"""Error types for retryd.

- ErrorCode: Codes for errors the executor raises itself
- RetryErrorInfo: Structured payload carried by every executor error
- RetryError and subclasses: AttemptTimeoutError, RetryCancelledError, InvalidDelayError
"""

from .errors import (
    AttemptTimeoutError,
    ErrorCode,
    InvalidDelayError,
    RetryCancelledError,
    RetryError,
    RetryErrorInfo,
)

__all__ = [
    "ErrorCode", "RetryErrorInfo",
    "RetryError", "AttemptTimeoutError", "RetryCancelledError", "InvalidDelayError",
]
