"""Event storage backends.

Every backend implements the same small capability (`EventStorage`): append a
record, load everything, load a time window. Medium failures are caught here,
reported to the diagnostics sink, and degrade to "nothing saved" / "nothing
loaded" so the facade never sees them.
"""

from __future__ import annotations

import re
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol, TextIO

import duckdb

from .codec import decode_fields, decode_record, encode_record, encode_timestamp
from .diagnostics import Diagnostic, DiagnosticSink, FailureTracker, LoggingDiagnosticSink, safe_report
from .errors import MediumAccessError, RecordParseError
from .models import EventRecord, format_record
from .query import filter_by_period

DEFAULT_FILE_PATH = "event_log.txt"


class EventStorage(Protocol):
    """A medium that persists and returns event records.

    `durable` marks backends whose contents outlive the process; the facade
    reconciles its in-memory index from the first durable backend attached.
    """

    durable: bool

    def save(self, record: EventRecord) -> None:
        """Append a single record."""

    def load(self) -> list[EventRecord]:
        """Return every stored record in storage order."""

    def get_by_period(self, start: datetime, end: datetime) -> list[EventRecord]:
        """Return stored records with `start <= timestamp <= end`, ascending."""


class FileEventStorage:
    """Append-only text file, one encoded record per line.

    Each call opens the file, does its work, and closes it again; nothing is
    held open between calls.
    """

    durable = True

    def __init__(
        self,
        path: str | Path = DEFAULT_FILE_PATH,
        *,
        encoding: str = "utf-8",
        diagnostics: DiagnosticSink | None = None,
    ) -> None:
        self._path = Path(path)
        self._encoding = encoding
        self._diagnostics: DiagnosticSink = diagnostics or LoggingDiagnosticSink()
        self._failures = FailureTracker()

    @property
    def name(self) -> str:
        return f"file:{self._path}"

    def __repr__(self) -> str:
        return f"FileEventStorage(path={str(self._path)!r})"

    def save(self, record: EventRecord) -> None:
        """Append one line; on failure the record is dropped (no retry)."""
        line = encode_record(record)
        try:
            with self._path.open("a", encoding=self._encoding) as fh:
                fh.write(line + "\n")
        except (OSError, UnicodeEncodeError) as exc:
            self._failures.write_failed()
            safe_report(self._diagnostics, Diagnostic.from_access_error(MediumAccessError(self.name, "save", exc)))

    def load(self) -> list[EventRecord]:
        """Read every line; blank lines are skipped, malformed lines reported and skipped.

        Lines are decoded one at a time, so undecodable bytes cost only their
        own line. A missing file is an empty log, not an error.
        """
        if not self._path.exists():
            return []

        records: list[EventRecord] = []
        try:
            with self._path.open("rb") as fh:
                for line_number, raw in enumerate(fh, start=1):
                    try:
                        line = self._decode_line(raw, line_number)
                        if not line.strip():
                            continue
                        records.append(decode_record(line, line_number=line_number))
                    except RecordParseError as exc:
                        safe_report(self._diagnostics, Diagnostic.from_parse_error(self.name, exc))
        except OSError as exc:
            self._failures.read_failed()
            safe_report(self._diagnostics, Diagnostic.from_access_error(MediumAccessError(self.name, "load", exc)))
            return []
        return records

    def _decode_line(self, raw: bytes, line_number: int) -> str:
        try:
            return raw.decode(self._encoding)
        except UnicodeDecodeError as exc:
            shown = raw.decode(self._encoding, errors="replace").rstrip("\r\n")
            raise RecordParseError(
                f"undecodable {self._encoding} bytes ({exc.reason})", line=shown, line_number=line_number
            ) from exc

    def get_by_period(self, start: datetime, end: datetime) -> list[EventRecord]:
        return filter_by_period(self.load(), start, end)

    def degraded_status(self) -> dict[str, Any]:
        """Return a minimal degraded-status snapshot."""
        return self._failures.snapshot()


class ConsoleEventStorage:
    """Ephemeral in-process store that also echoes each record to a text stream."""

    durable = False

    def __init__(self, *, stream: TextIO | None = None, diagnostics: DiagnosticSink | None = None) -> None:
        """Create an empty store.

        Args:
            stream: Where rendered records are written. Defaults to the
                current `sys.stdout` at write time.
            diagnostics: Sink for rendering failures.
        """
        self._stream = stream
        self._diagnostics: DiagnosticSink = diagnostics or LoggingDiagnosticSink()
        self._lock = threading.Lock()
        self._records: list[EventRecord] = []
        self._failures = FailureTracker()

    @property
    def name(self) -> str:
        return "console"

    def __repr__(self) -> str:
        return "ConsoleEventStorage()"

    def save(self, record: EventRecord) -> None:
        """Keep the record, then print it. A failed print does not lose the record."""
        with self._lock:
            self._records.append(record)
        stream = self._stream if self._stream is not None else sys.stdout
        try:
            print(format_record(record), file=stream, flush=True)
        except (OSError, ValueError) as exc:
            self._failures.write_failed()
            safe_report(
                self._diagnostics,
                Diagnostic(kind="render_error", source=self.name, message=f"could not write record: {exc}"),
            )

    def load(self) -> list[EventRecord]:
        """Return a point-in-time copy of all saved records."""
        with self._lock:
            return list(self._records)

    def get_by_period(self, start: datetime, end: datetime) -> list[EventRecord]:
        return filter_by_period(self.load(), start, end)

    def degraded_status(self) -> dict[str, Any]:
        """Return a minimal degraded-status snapshot."""
        return self._failures.snapshot()


_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_COLUMNS = ("id", "level", "event_type", "logged_at", "user_name", "object_id", "description")


class DuckDBEventStorage:
    """DuckDB table for durable local persistence.

    Like the file backend, each operation opens its own connection and closes
    it before returning. Timestamps are stored in their encoded text form so
    rows decode through the same path as file lines.
    """

    durable = True

    def __init__(
        self,
        *,
        path: str | Path,
        table: str = "event_log",
        diagnostics: DiagnosticSink | None = None,
    ) -> None:
        """Create a DuckDB-backed store at the given path (the file is created on first save)."""
        if not _IDENTIFIER.match(table):
            raise ValueError(f"table must be a plain SQL identifier. Got: {table!r}")
        self._path = Path(path)
        self._table = table
        self._sequence = f"{table}_seq"
        self._diagnostics: DiagnosticSink = diagnostics or LoggingDiagnosticSink()
        self._failures = FailureTracker()

    @property
    def name(self) -> str:
        return f"duckdb:{self._path}#{self._table}"

    def __repr__(self) -> str:
        return f"DuckDBEventStorage(path={str(self._path)!r}, table={self._table!r})"

    def _ensure_schema(self, conn: duckdb.DuckDBPyConnection) -> None:
        """Create the backing sequence and table if they do not exist yet."""
        conn.execute(f"create sequence if not exists {self._sequence}")
        conn.execute(
            f"""
            create table if not exists {self._table} (
              seq bigint not null default nextval('{self._sequence}'),
              id varchar not null,
              level varchar not null,
              event_type varchar not null,
              logged_at varchar not null,
              user_name varchar not null,
              object_id varchar not null,
              description varchar not null
            )
            """
        )

    def save(self, record: EventRecord) -> None:
        """Insert a single row; on failure the record is dropped (no retry)."""
        insert_sql = f"insert into {self._table} ({', '.join(_COLUMNS)}) values (?, ?, ?, ?, ?, ?, ?)"
        try:
            with duckdb.connect(str(self._path)) as conn:
                self._ensure_schema(conn)
                conn.execute(
                    insert_sql,
                    [
                        str(record.id),
                        record.level.value,
                        record.event_type.value,
                        encode_timestamp(record.timestamp),
                        record.user,
                        record.object_id,
                        record.description,
                    ],
                )
        except (duckdb.Error, OSError) as exc:
            self._failures.write_failed()
            safe_report(self._diagnostics, Diagnostic.from_access_error(MediumAccessError(self.name, "save", exc)))

    def load(self) -> list[EventRecord]:
        """Return all rows in insertion order; undecodable rows are reported and skipped."""
        if not self._path.exists():
            return []

        try:
            with duckdb.connect(str(self._path)) as conn:
                exists = conn.execute(
                    "select count(*) from information_schema.tables where table_name = ?",
                    [self._table],
                ).fetchone()
                if not exists or not exists[0]:
                    return []
                rows = conn.execute(f"select {', '.join(_COLUMNS)} from {self._table} order by seq").fetchall()
        except (duckdb.Error, OSError) as exc:
            self._failures.read_failed()
            safe_report(self._diagnostics, Diagnostic.from_access_error(MediumAccessError(self.name, "load", exc)))
            return []

        records: list[EventRecord] = []
        for row_number, row in enumerate(rows, start=1):
            fields = ["" if value is None else str(value) for value in row]
            try:
                records.append(decode_fields(fields, line="|".join(fields), line_number=row_number))
            except RecordParseError as exc:
                safe_report(self._diagnostics, Diagnostic.from_parse_error(self.name, exc))
        return records

    def get_by_period(self, start: datetime, end: datetime) -> list[EventRecord]:
        return filter_by_period(self.load(), start, end)

    def degraded_status(self) -> dict[str, Any]:
        """Return a minimal degraded-status snapshot."""
        return self._failures.snapshot()
