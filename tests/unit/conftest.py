from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from eventlog.diagnostics import InMemoryDiagnosticSink

BASE_TIME = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


class StepClock:
    """Deterministic clock: each call returns the current time, then advances by `step`."""

    def __init__(self, start: datetime = BASE_TIME, step: timedelta = timedelta(seconds=1)) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + self.step
        return current

    def freeze(self) -> None:
        """Stop advancing so subsequent records share a timestamp."""
        self.step = timedelta(0)


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def diagnostics() -> InMemoryDiagnosticSink:
    return InMemoryDiagnosticSink()


@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    return tmp_path / "events.txt"


@pytest.fixture
def base_time() -> datetime:
    return BASE_TIME
