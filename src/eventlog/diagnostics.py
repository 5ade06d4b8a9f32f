"""Side channel for non-fatal failures.

Backends never raise parse or medium-access failures to their callers. They
report a `Diagnostic` to a `DiagnosticSink` and degrade to a best-effort
result instead. The sink is pluggable; by default reports go to the stdlib
`logging` module.
"""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Sequence
from datetime import datetime
from typing import Any, Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field

from .errors import MediumAccessError, RecordParseError
from .models import utc_now

DiagnosticKind = Literal["parse_error", "medium_access_error", "storage_error", "render_error"]

logger = logging.getLogger("eventlog.diagnostics")


class Diagnostic(BaseModel):
    """A structured report of something that went wrong but did not abort the caller."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    kind: DiagnosticKind
    # Which backend or component produced the report (e.g. "file:/var/log/events.txt").
    source: str
    message: str

    # Parse failures only.
    line: str | None = None
    line_number: int | None = None

    occurred_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_parse_error(cls, source: str, exc: RecordParseError) -> Diagnostic:
        return cls(
            kind="parse_error",
            source=source,
            message=str(exc),
            line=exc.line,
            line_number=exc.line_number,
        )

    @classmethod
    def from_access_error(cls, exc: MediumAccessError) -> Diagnostic:
        return cls(kind="medium_access_error", source=exc.source, message=str(exc))


class DiagnosticSink(Protocol):
    """Receives diagnostics. Implementations should not raise."""

    def report(self, diagnostic: Diagnostic) -> None:
        """Record or forward a single diagnostic."""


class LoggingDiagnosticSink:
    """Forward diagnostics to a stdlib logger.

    Parse errors are logged at WARNING; everything else at ERROR.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def report(self, diagnostic: Diagnostic) -> None:
        level = logging.WARNING if diagnostic.kind == "parse_error" else logging.ERROR
        extra: dict[str, Any] = {
            "diagnostic_kind": diagnostic.kind,
            "diagnostic_source": diagnostic.source,
        }
        if diagnostic.line_number is not None:
            extra["line_number"] = diagnostic.line_number
        self._log.log(level, "[%s] %s: %s", diagnostic.kind, diagnostic.source, diagnostic.message, extra=extra)


class InMemoryDiagnosticSink:
    """In-memory sink for tests and local debugging."""

    def __init__(self) -> None:
        """Create an empty in-memory sink."""
        self._lock = threading.Lock()
        self._diagnostics: list[Diagnostic] = []

    def report(self, diagnostic: Diagnostic) -> None:
        """Append a diagnostic to the in-memory list (thread-safe)."""
        with self._lock:
            self._diagnostics.append(diagnostic)

    def snapshot(self) -> Sequence[Diagnostic]:
        """Return a point-in-time copy of all reported diagnostics."""
        with self._lock:
            return list(self._diagnostics)

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.snapshot() if d.kind == kind]


def safe_report(sink: DiagnosticSink, diagnostic: Diagnostic) -> None:
    """Report to `sink`, falling back to the module logger if the sink itself fails."""
    try:
        sink.report(diagnostic)
    except Exception:  # noqa: BLE001 - reporting must not break logging
        logger.exception("Diagnostic sink %r failed while reporting %s", sink, diagnostic.kind)


def configure_logging(level: str | int = logging.WARNING) -> None:
    """Install a plain console handler for the `eventlog` logger hierarchy.

    Diagnostics go to stderr so they do not interleave with the console
    backend's mirrored records on stdout.
    """
    root = logging.getLogger("eventlog")
    root.setLevel(level)
    if not any(getattr(h, "_eventlog_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handler._eventlog_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)


class FailureTracker:
    """Counts failures and the time window they span (degraded-status snapshot)."""

    def __init__(self) -> None:
        self.write_failures = 0
        self.read_failures = 0
        self.first_failure_at: datetime | None = None
        self.last_failure_at: datetime | None = None

    def _mark(self) -> None:
        now = utc_now()
        self.first_failure_at = self.first_failure_at or now
        self.last_failure_at = now

    def write_failed(self) -> None:
        self.write_failures += 1
        self._mark()

    def read_failed(self) -> None:
        self.read_failures += 1
        self._mark()

    def snapshot(self) -> dict[str, Any]:
        return {
            "write_failures": self.write_failures,
            "read_failures": self.read_failures,
            "first_failure_at": self.first_failure_at,
            "last_failure_at": self.last_failure_at,
        }
