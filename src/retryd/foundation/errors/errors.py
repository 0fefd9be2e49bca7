"""Standardized errors raised by the retry executor.

Operation errors are never wrapped: they pass through the executor unchanged.
The types here cover the executor's own terminal conditions (attempt timeout,
cancellation, bad strategy output). Uses Pydantic for the error payload.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, computed_field


class ErrorCode(StrEnum):
    """Machine-readable codes for executor-raised errors."""
    ATTEMPT_TIMEOUT = "ATTEMPT_TIMEOUT"
    CANCELLED = "CANCELLED"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    INVALID_DELAY = "INVALID_DELAY"


class RetryErrorInfo(BaseModel):
    """Structured description of an executor-raised failure.

    Attributes:
        label: Label of the retry loop that failed
        message: Human-readable error message
        code: Machine-readable error code
        attempt: 0-indexed attempt in progress when the error was raised
        timeout: Per-attempt timeout in seconds, if one applied
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        extra="forbid",
        json_schema_extra={
            "title": "Retry Error",
            "examples": [{
                "label": "fetch user",
                "message": "Attempt 1 to fetch user timed out after 10.0s",
                "code": "ATTEMPT_TIMEOUT",
                "attempt": 0,
                "timeout": 10.0,
            }],
        },
    )

    label: str
    message: Annotated[str, Field(min_length=1)]
    code: ErrorCode
    attempt: NonNegativeInt = 0
    timeout: float | None = None

    @computed_field
    @property
    def is_cancellation(self) -> bool:
        """Whether the loop was stopped by the caller's signal rather than the attempt deadline."""
        return self.code in (ErrorCode.CANCELLED, ErrorCode.DEADLINE_EXCEEDED)

    def render(self) -> str:
        return f"[{self.code}] {self.message}"

    __str__ = render


class RetryError(Exception):
    """Exception wrapping a RetryErrorInfo for raising."""

    default_code: ErrorCode = ErrorCode.CANCELLED

    def __init__(self, error: RetryErrorInfo) -> None:
        self.error = error
        super().__init__(error.message)

    @classmethod
    def create(
        cls,
        label: str,
        message: str,
        *,
        attempt: int = 0,
        code: ErrorCode | None = None,
        timeout: float | None = None,
    ) -> Self:
        return cls(RetryErrorInfo(
            label=label, message=message, code=code or cls.default_code, attempt=attempt, timeout=timeout,
        ))

    @property
    def code(self) -> ErrorCode:
        return self.error.code

    @property
    def attempt(self) -> int:
        return self.error.attempt

    @property
    def label(self) -> str:
        return self.error.label


class AttemptTimeoutError(RetryError, TimeoutError):
    """A single attempt outlived its per-attempt deadline. Ends the retry loop."""

    default_code = ErrorCode.ATTEMPT_TIMEOUT


class RetryCancelledError(RetryError):
    """The caller's cancel token fired during an attempt or a backoff delay."""

    default_code = ErrorCode.CANCELLED


class InvalidDelayError(RetryError, ValueError):
    """A strategy asked for a negative backoff delay."""

    default_code = ErrorCode.INVALID_DELAY
