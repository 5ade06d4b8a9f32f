"""Append-only application event log.

This package provides:
- An immutable `EventRecord` with a stable id, level, event type and timestamp.
- A pipe-delimited single-line codec for durable storage.
- Interchangeable storage backends (text file, DuckDB, console mirror).
- The `EventLog` facade that fans writes out to every backend and answers
  period/user/type queries from an in-memory index.

Failures below the facade are reported to a pluggable diagnostics sink
instead of being raised.
"""

from .codec import decode_record, encode_record
from .diagnostics import Diagnostic, DiagnosticSink, InMemoryDiagnosticSink, LoggingDiagnosticSink
from .errors import EventLogError, MediumAccessError, RecordParseError
from .logger import EventLog
from .models import EventRecord, EventType, LogLevel
from .storage import ConsoleEventStorage, DuckDBEventStorage, EventStorage, FileEventStorage

__all__ = [
    "ConsoleEventStorage",
    "Diagnostic",
    "DiagnosticSink",
    "DuckDBEventStorage",
    "EventLog",
    "EventLogError",
    "EventRecord",
    "EventStorage",
    "EventType",
    "FileEventStorage",
    "InMemoryDiagnosticSink",
    "LogLevel",
    "LoggingDiagnosticSink",
    "MediumAccessError",
    "RecordParseError",
    "decode_record",
    "encode_record",
]
