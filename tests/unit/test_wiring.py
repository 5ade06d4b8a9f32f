from __future__ import annotations

from pathlib import Path

import pytest

from config import EventLogConfig
from eventlog.models import EventType
from eventlog.storage import ConsoleEventStorage, DuckDBEventStorage, FileEventStorage
from eventlog.wiring import build_event_log


def test_build_attaches_backends_in_fan_out_order(tmp_path: Path, clock) -> None:
    cfg = EventLogConfig(file_path=str(tmp_path / "events.txt"), duckdb_path=str(tmp_path / "events.duckdb"))

    event_log = build_event_log(cfg, clock=clock)

    assert [type(s) for s in event_log.storages] == [FileEventStorage, DuckDBEventStorage, ConsoleEventStorage]


def test_build_without_optional_backends(tmp_path: Path, clock) -> None:
    cfg = EventLogConfig(file_path=str(tmp_path / "events.txt"), console_mirror=False)

    event_log = build_event_log(cfg, clock=clock)

    assert [type(s) for s in event_log.storages] == [FileEventStorage]


@pytest.mark.parametrize(("load_on_start", "expected"), [(True, 1), (False, 0)])
def test_build_reconciles_from_file_when_configured(
    tmp_path: Path, clock, load_on_start: bool, expected: int
) -> None:
    path = tmp_path / "events.txt"
    first_run = build_event_log(EventLogConfig(file_path=str(path), console_mirror=False), clock=clock)
    first_run.log_info(EventType.APPLICATION_START, description="first run")

    second_run = build_event_log(
        EventLogConfig(file_path=str(path), console_mirror=False, load_on_start=load_on_start), clock=clock
    )

    assert len(second_run.records) == expected
