"""Structured logging for retry loops.

One entry per failed attempt, carrying the retry's own fields (label,
attempt, error, error_type) next to whatever the caller bound. Entries go to
a renderer: human-readable console lines for development, JSON lines for
production, optionally buffered and drained on shutdown.

The executor never reaches for a global logger on its own: callers pass a
logger in, and get_logger() is only the default.

Quick Start:
    >>> from retryd.runtime.observability import configure_logging, get_logger, shutdown_logging
    >>>
    >>> configure_logging(format="json", buffer_size=20)  # once at startup
    >>> log = get_logger("billing", tenant="acme")
    >>> await retry(charge_card, strategy, "charge card", logger=log)
    >>> shutdown_logging()  # flush before exit
"""

from __future__ import annotations

import logging
import sys
import time
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol, TextIO, runtime_checkable

import orjson

if TYPE_CHECKING:
    from retryd.foundation.config import LoggingSettings

JsonDict = dict[str, Any]

# Fields the executor attaches to every attempt warning; console output leads with them
RETRY_FIELDS = ("label", "attempt")


# ─────────────────────────────────────────────────────────────────────────────
# Logger
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class RetryLogger(Protocol):
    """What the executor needs from a logger: warn per failed attempt, info for lifecycle."""

    def info(self, event: str, **kw: Any) -> None: ...
    def warning(self, event: str, **kw: Any) -> None: ...


@dataclass(slots=True)
class BoundLogger:
    """Logger with bound fields. bind() returns a new logger; the original is untouched.

    Example:
        >>> log = BoundLogger(context={"service": "api"})
        >>> log.warning("Attempt 1 to fetch", label="fetch", attempt=1, error="timeout")
        # => 10:30:45.123 [warning] Attempt 1 to fetch label="fetch" attempt=1 error="timeout" service="api"
    """

    context: JsonDict = field(default_factory=dict)
    _renderer: LogRenderer | None = None
    _level: int = logging.DEBUG

    def bind(self, **kw: Any) -> BoundLogger:
        return BoundLogger(context={**self.context, **kw}, _renderer=self._renderer, _level=self._level)

    def _log(self, level: int, event: str, **kw: Any) -> None:
        if level < self._level:
            return
        entry = LogEntry(time.time(), logging.getLevelName(level).lower(), event, {**self.context, **kw})
        (self._renderer or _get_renderer()).render(entry)

    def debug(self, event: str, **kw: Any) -> None: self._log(logging.DEBUG, event, **kw)
    def info(self, event: str, **kw: Any) -> None: self._log(logging.INFO, event, **kw)
    def warning(self, event: str, **kw: Any) -> None: self._log(logging.WARNING, event, **kw)
    def error(self, event: str, **kw: Any) -> None: self._log(logging.ERROR, event, **kw)


@dataclass(slots=True)
class LogEntry:
    timestamp: float
    level: str
    event: str
    context: JsonDict

    @property
    def when(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=UTC)


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class LogRenderer(Protocol):
    def render(self, entry: LogEntry) -> None: ...


@dataclass(slots=True)
class ConsoleRenderer:
    """One line per entry: timestamp [level] event label=... attempt=... other=...

    Retry fields come first, the rest sorted by key. Values are JSON-encoded so
    strings are quoted. Colors only tint the level tag.
    """

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None  # None = auto-detect
    show_timestamp: bool = True

    def __post_init__(self) -> None:
        if self.colors is None:
            self.colors = getattr(self.output, "isatty", lambda: False)()

    def render(self, entry: LogEntry) -> None:
        tag = f"[{entry.level}]"
        if self.colors:
            tag = f"{_LEVEL_COLORS.get(entry.level, '')}{tag}\033[0m"
        parts = [entry.when.strftime("%H:%M:%S.%f")[:-3]] if self.show_timestamp else []
        parts += [tag, entry.event]
        ordered = [k for k in RETRY_FIELDS if k in entry.context]
        ordered += sorted(k for k in entry.context if k not in RETRY_FIELDS)
        parts += [f"{k}={orjson.dumps(entry.context[k], default=str).decode()}" for k in ordered]
        print(" ".join(parts), file=self.output)


_LEVEL_COLORS = {"debug": "\033[2m", "info": "\033[32m", "warning": "\033[33m", "error": "\033[31m"}


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines output for log aggregation."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        record = {"timestamp": entry.when.isoformat(), "level": entry.level, "event": entry.event, **entry.context}
        print(orjson.dumps(record, option=orjson.OPT_NON_STR_KEYS, default=str).decode(), file=self.output)


@dataclass(slots=True)
class NoOpRenderer:
    """Silent renderer for testing."""

    def render(self, entry: LogEntry) -> None:
        pass


@dataclass(slots=True)
class BufferedRenderer:
    """Buffers entries and forwards them in batches. Flushes when buffer_size reached or on shutdown.

    No I/O happens on the attempt path until the buffer fills.
    """

    renderer: LogRenderer
    buffer_size: int = 20
    _buffer: list[LogEntry] = field(default_factory=list)
    _closed: bool = False

    def render(self, entry: LogEntry) -> None:
        if self._closed:
            self.renderer.render(entry)
            return
        self._buffer.append(entry)
        if len(self._buffer) >= self.buffer_size:
            self.flush()

    def flush(self) -> None:
        pending, self._buffer = self._buffer, []
        for entry in pending:
            self.renderer.render(entry)

    def shutdown(self) -> None:
        self.flush()
        self._closed = True

    @property
    def pending(self) -> int:
        return len(self._buffer)


# ─────────────────────────────────────────────────────────────────────────────
# Lifecycle
# ─────────────────────────────────────────────────────────────────────────────


_renderer: ContextVar[LogRenderer | None] = ContextVar("log_renderer", default=None)
_default_level: ContextVar[int] = ContextVar("log_level", default=logging.INFO)


def configure_logging(
    format: str = "console",  # noqa: A002 - shadows builtin but matches stdlib
    level: str = "INFO",
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
    buffer_size: int = 0,
) -> LogRenderer:
    """Configure default structured logging. Format: "console" (human), "json" (machine), "none".

    With buffer_size > 0 entries are batched; call shutdown_logging() before exit to drain them.
    """
    _default_level.set(getattr(logging, level.upper(), logging.INFO))
    match format:
        case "console": renderer: LogRenderer = ConsoleRenderer(output=output or sys.stderr, colors=colors)
        case "json": renderer = JsonRenderer(output=output or sys.stdout)
        case "none": renderer = NoOpRenderer()
        case _: raise ValueError(f"Unknown format: {format}. Use 'console', 'json', or 'none'")
    if buffer_size > 0:
        renderer = BufferedRenderer(renderer, buffer_size=buffer_size)
    _renderer.set(renderer)
    return renderer


def configure_from_settings(settings: LoggingSettings, *, output: TextIO | None = None) -> LogRenderer:
    """Configure logging from LoggingSettings (RETRYD_LOG_* environment)."""
    return configure_logging(settings.format, settings.level, output=output, buffer_size=settings.buffer_size)


def shutdown_logging() -> None:
    """Flush and drain the configured renderer, then fall back to the default renderer and level."""
    if (renderer := _renderer.get()) is not None:
        if isinstance(renderer, BufferedRenderer):
            renderer.shutdown()
        elif (output := getattr(renderer, "output", None)) is not None:
            output.flush()
    _renderer.set(None)
    _default_level.set(logging.INFO)


def get_logger(name: str | None = None, *, renderer: LogRenderer | None = None, **initial_context: Any) -> BoundLogger:
    """Get a structured logger with optional initial context. Name is added to context as 'logger'."""
    ctx = {**initial_context, **({"logger": name} if name else {})}
    return BoundLogger(context=ctx, _renderer=renderer, _level=_default_level.get())


def _get_renderer() -> LogRenderer:
    if (renderer := _renderer.get()) is None:
        _renderer.set(renderer := ConsoleRenderer())
    return renderer
