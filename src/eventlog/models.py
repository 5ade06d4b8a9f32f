"""Event record models.

Records are designed to be:
- Immutable once constructed (frozen model, no update-in-place).
- Identified by a stable UUID that survives save/load cycles.
- Permissive on input: missing optional metadata is normalized to defaults
  instead of being rejected, so logging never blocks the caller.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_USER = "System"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(tz=timezone.utc)


def as_aware(value: datetime) -> datetime:
    """Return `value` as an aware datetime, treating naive values as local time."""
    if value.tzinfo is None:
        return value.astimezone()
    return value


def _coerce_text(value: object) -> str:
    """Turn optional metadata into plain text.

    None becomes "", other non-strings go through `str()`, and lone
    surrogates are replaced so the value can always be stored as UTF-8.
    """
    if value is None:
        return ""
    text = value if isinstance(value, str) else str(value)
    return text.encode("utf-8", errors="replace").decode("utf-8")


class LogLevel(str, Enum):
    """Severity of a record, orthogonal to its event type."""

    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"


class EventType(str, Enum):
    """Closed set of things that can happen to a business object."""

    APPLICATION_START = "ApplicationStart"
    APPLICATION_SHUTDOWN = "ApplicationShutdown"
    RECORD_CREATED = "RecordCreated"
    RECORD_UPDATED = "RecordUpdated"
    RECORD_DELETED = "RecordDeleted"
    STATUS_CHANGED = "StatusChanged"
    DEADLINE_CHANGED = "DeadlineChanged"
    TECHNICAL_ACTION = "TechnicalAction"
    SYSTEM_ERROR = "SystemError"


class EventRecord(BaseModel):
    """One logged occurrence."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: UUID = Field(default_factory=uuid4)
    level: LogLevel
    event_type: EventType
    timestamp: datetime = Field(default_factory=utc_now)

    # Actor and affected object; never None after construction.
    user: str = DEFAULT_USER
    object_id: str = ""
    description: str = ""

    @field_validator("user", mode="before")
    @classmethod
    def _default_user(cls, v: object) -> str:
        text = _coerce_text(v)
        return text if text.strip() else DEFAULT_USER

    @field_validator("object_id", "description", mode="before")
    @classmethod
    def _default_empty(cls, v: object) -> str:
        return _coerce_text(v)

    @field_validator("timestamp")
    @classmethod
    def _aware_timestamp(cls, v: datetime) -> datetime:
        return as_aware(v)

    def __str__(self) -> str:
        return format_record(self)


def format_record(record: EventRecord) -> str:
    """Render a record as a single human-readable line (local time, second precision)."""
    ts = record.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    return (
        f"[{ts}] [{record.level.value}] {record.event_type.value} - "
        f"User: {record.user}, Object: {record.object_id}, Description: {record.description}"
    )
