"""Shared fixtures for retryd tests."""

from __future__ import annotations

import pytest

from retryd.foundation.config import clear_settings_cache
from retryd.runtime.observability import BoundLogger, LogEntry, get_logger


class RecordingRenderer:
    """Collects rendered entries in memory."""

    def __init__(self) -> None:
        self.entries: list[LogEntry] = []

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    @property
    def events(self) -> list[str]:
        return [e.event for e in self.entries]


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> object:
    """Isolate every test from RETRYD_* variables in the developer's environment."""
    import os
    for key in [k for k in os.environ if k.startswith("RETRYD_")]:
        monkeypatch.delenv(key)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def recorder() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def log(recorder: RecordingRenderer) -> BoundLogger:
    return get_logger("test", renderer=recorder)
