from __future__ import annotations

import io
from datetime import datetime, timedelta

import pytest

from eventlog.diagnostics import InMemoryDiagnosticSink
from eventlog.models import EventRecord, EventType, LogLevel, format_record
from eventlog.storage import ConsoleEventStorage


def _record(ts: datetime, description: str = "") -> EventRecord:
    return EventRecord(
        level=LogLevel.INFO,
        event_type=EventType.TECHNICAL_ACTION,
        timestamp=ts,
        user="System",
        object_id="Database",
        description=description,
    )


def test_save_keeps_record_and_prints_it(base_time: datetime) -> None:
    stream = io.StringIO()
    storage = ConsoleEventStorage(stream=stream)
    record = _record(base_time, "Data backup completed")

    storage.save(record)

    assert storage.load() == [record]
    assert stream.getvalue() == format_record(record) + "\n"


def test_defaults_to_stdout(base_time: datetime, capsys: pytest.CaptureFixture[str]) -> None:
    storage = ConsoleEventStorage()
    storage.save(_record(base_time, "to stdout"))

    assert "Description: to stdout" in capsys.readouterr().out


def test_load_returns_a_copy(base_time: datetime) -> None:
    storage = ConsoleEventStorage(stream=io.StringIO())
    storage.save(_record(base_time))

    loaded = storage.load()
    loaded.clear()

    assert len(storage.load()) == 1
    assert storage.durable is False


def test_get_by_period_filters_and_orders(base_time: datetime) -> None:
    storage = ConsoleEventStorage(stream=io.StringIO())
    for offset, label in [(3, "c"), (1, "a"), (2, "b"), (9, "late")]:
        storage.save(_record(base_time + timedelta(seconds=offset), label))

    result = storage.get_by_period(base_time + timedelta(seconds=1), base_time + timedelta(seconds=3))

    assert [r.description for r in result] == ["a", "b", "c"]


def test_failed_print_keeps_record_and_reports(base_time: datetime, diagnostics: InMemoryDiagnosticSink) -> None:
    stream = io.StringIO()
    stream.close()
    storage = ConsoleEventStorage(stream=stream, diagnostics=diagnostics)
    record = _record(base_time)

    storage.save(record)

    assert storage.load() == [record]
    assert len(diagnostics.of_kind("render_error")) == 1
    assert storage.degraded_status()["write_failures"] == 1
