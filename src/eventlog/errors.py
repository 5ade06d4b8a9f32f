"""Exceptions raised inside the event log core.

None of these escape the public facade: backends catch them at their boundary
and turn them into diagnostics.
"""

from __future__ import annotations


class EventLogError(Exception):
    """Base class for event log failures."""


class RecordParseError(EventLogError, ValueError):
    """A stored line (or row) does not decode into a valid record."""

    def __init__(self, reason: str, *, line: str, line_number: int | None = None) -> None:
        self.reason = reason
        self.line = line
        self.line_number = line_number
        where = f" at line {line_number}" if line_number is not None else ""
        super().__init__(f"Malformed record{where}: {reason}. Line: {line!r}")


class MediumAccessError(EventLogError):
    """The storage medium could not be opened, read, or written."""

    def __init__(self, source: str, operation: str, cause: BaseException) -> None:
        self.source = source
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed for {source}: {cause}")
