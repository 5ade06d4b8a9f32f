"""Single-line pipe-delimited record codec.

Line layout (one record per line, UTF-8):

    <uuid>|<level>|<event_type>|<timestamp-iso>|<user>|<object_id>|<description>

The description is the last field and is not escaped; a value containing the
delimiter or a line break corrupts only its own line.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Final
from uuid import UUID

from pydantic import ValidationError

from .errors import RecordParseError
from .models import EventRecord, EventType, LogLevel

DELIMITER: Final = "|"
FIELD_COUNT: Final = 7

# Fractional seconds beyond microseconds (e.g. 7-digit .NET round-trip values).
_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")


def encode_timestamp(value: datetime) -> str:
    """Encode an aware datetime with fixed microsecond precision and an explicit offset."""
    return value.isoformat(timespec="microseconds")


def decode_timestamp(raw: str) -> datetime:
    """Inverse of `encode_timestamp`; naive values are taken as UTC."""
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _LONG_FRACTION.sub(r"\1", text)
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def encode_record(record: EventRecord) -> str:
    """Encode a record as one line without a trailing newline."""
    return DELIMITER.join(
        [
            str(record.id),
            record.level.value,
            record.event_type.value,
            encode_timestamp(record.timestamp),
            record.user,
            record.object_id,
            record.description,
        ]
    )


def decode_fields(fields: Sequence[str], *, line: str, line_number: int | None = None) -> EventRecord:
    """Build a record from already-split fields.

    Raises:
        RecordParseError: if any field is missing or does not parse.
    """

    def _fail(reason: str) -> RecordParseError:
        return RecordParseError(reason, line=line, line_number=line_number)

    if len(fields) < FIELD_COUNT:
        raise _fail(f"expected {FIELD_COUNT} fields, got {len(fields)}")

    raw_id, raw_level, raw_type, raw_ts, user, object_id, description = fields[:FIELD_COUNT]

    try:
        record_id = UUID(raw_id)
    except ValueError:
        raise _fail(f"invalid record id {raw_id!r}") from None
    try:
        level = LogLevel(raw_level)
    except ValueError:
        raise _fail(f"unknown level {raw_level!r}") from None
    try:
        event_type = EventType(raw_type)
    except ValueError:
        raise _fail(f"unknown event type {raw_type!r}") from None
    try:
        timestamp = decode_timestamp(raw_ts)
    except ValueError:
        raise _fail(f"invalid timestamp {raw_ts!r}") from None

    try:
        return EventRecord(
            id=record_id,
            level=level,
            event_type=event_type,
            timestamp=timestamp,
            user=user,
            object_id=object_id,
            description=description,
        )
    except ValidationError as exc:  # pragma: no cover - fields are pre-validated above
        raise _fail(str(exc)) from exc


def decode_record(line: str, *, line_number: int | None = None) -> EventRecord:
    """Decode one stored line into a record.

    Raises:
        RecordParseError: wrong field count, bad UUID, unknown enum name, or
            unparseable timestamp.
    """
    stripped = line.rstrip("\r\n")
    return decode_fields(stripped.split(DELIMITER), line=stripped, line_number=line_number)
