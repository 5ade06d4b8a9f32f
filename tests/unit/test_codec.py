from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest

from eventlog.codec import decode_record, decode_timestamp, encode_record
from eventlog.errors import RecordParseError
from eventlog.models import EventRecord, EventType, LogLevel


def _record(**overrides: object) -> EventRecord:
    fields: dict[str, object] = {
        "level": LogLevel.WARNING,
        "event_type": EventType.DEADLINE_CHANGED,
        "timestamp": datetime(2024, 1, 15, 10, 30, 0, 123456, tzinfo=timezone.utc),
        "user": "Sidorov V.K.",
        "object_id": "Booking-015",
        "description": "Meeting moved from 14:00 to 15:00",
    }
    fields.update(overrides)
    return EventRecord(**fields)  # type: ignore[arg-type]


def test_encode_uses_fixed_field_order() -> None:
    record = _record()
    line = encode_record(record)

    assert "\n" not in line
    assert line.split("|") == [
        str(record.id),
        "Warning",
        "DeadlineChanged",
        "2024-01-15T10:30:00.123456+00:00",
        "Sidorov V.K.",
        "Booking-015",
        "Meeting moved from 14:00 to 15:00",
    ]


def test_encode_always_writes_microseconds() -> None:
    record = _record(timestamp=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
    assert "|2024-01-15T10:30:00.000000+00:00|" in encode_record(record)


@pytest.mark.parametrize(
    "record",
    [
        _record(),
        _record(user="Иванов А.П.", object_id="Заявка-001", description="Создана новая заявка"),
        _record(object_id="", description=""),
        _record(timestamp=datetime(2023, 12, 31, 23, 59, 59, 999999, tzinfo=timezone(timedelta(hours=-5)))),
    ],
)
def test_round_trip_preserves_every_field(record: EventRecord) -> None:
    decoded = decode_record(encode_record(record))

    assert decoded == record
    assert decoded.id == record.id
    assert decoded.timestamp == record.timestamp
    assert decoded.timestamp.utcoffset() == record.timestamp.utcoffset()


def test_decode_accepts_trailing_newline_and_extra_fields() -> None:
    record = _record()
    decoded = decode_record(encode_record(record) + "|ignored\r\n")
    assert decoded == record


def test_decode_accepts_seven_digit_fraction_and_offset() -> None:
    record_id = uuid4()
    line = f"{record_id}|Info|RecordCreated|2024-01-15T10:30:00.1234567+03:00|User|Object|Description"

    decoded = decode_record(line)

    assert decoded.id == record_id
    assert decoded.timestamp == datetime(2024, 1, 15, 7, 30, 0, 123456, tzinfo=timezone.utc)


def test_decode_timestamp_handles_zulu_and_naive() -> None:
    assert decode_timestamp("2024-01-15T10:30:00Z") == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert decode_timestamp("2024-01-15T10:30:00").tzinfo is timezone.utc


@pytest.mark.parametrize(
    ("line", "reason"),
    [
        ("invalid_data", "expected 7 fields"),
        ("123|broken|record", "expected 7 fields"),
        ("a1b2c3d4|Info|RecordCreated|2024-01-15T10:30:00|User|Object|Description", "invalid record id"),
        (f"{UUID(int=1)}|info|RecordCreated|2024-01-15T10:30:00|User|Object|Description", "unknown level"),
        (f"{UUID(int=1)}|Info|Created|2024-01-15T10:30:00|User|Object|Description", "unknown event type"),
        (f"{UUID(int=1)}|Info|RecordCreated|invalid_date|User|Object|Description", "invalid timestamp"),
        ("|||2024-01-15T10:30:00|||", "invalid record id"),
    ],
)
def test_decode_rejects_malformed_lines(line: str, reason: str) -> None:
    with pytest.raises(RecordParseError) as excinfo:
        decode_record(line, line_number=4)

    assert reason in excinfo.value.reason
    assert excinfo.value.line == line
    assert excinfo.value.line_number == 4
    assert "line 4" in str(excinfo.value)


def test_parse_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        decode_record("nope")
