"""Event log facade.

Callers log and query through `EventLog` only. Writes fan out to every attached
storage backend in attachment order and then land in an in-memory index; all
queries read the index. `load_from_durable_storage` replaces the index with
what the first durable backend holds (e.g. after a process restart).

The facade does no internal locking. Hosts that call it from several threads
must serialize access themselves.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from .diagnostics import Diagnostic, DiagnosticSink, FailureTracker, LoggingDiagnosticSink, safe_report
from .models import Clock, EventRecord, EventType, LogLevel, utc_now
from .query import filter_by_period, filter_by_type, filter_by_user
from .storage import EventStorage


def _storage_name(storage: EventStorage) -> str:
    name = getattr(storage, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(storage).__name__


class EventLog:
    """Fans records out to storage backends and answers queries from memory."""

    def __init__(
        self,
        *,
        storages: Iterable[EventStorage] = (),
        clock: Clock = utc_now,
        diagnostics: DiagnosticSink | None = None,
    ) -> None:
        """Create an event log.

        Args:
            storages: Backends to attach, in fan-out order.
            clock: Source of record timestamps. Inject a fixed or stepping
                clock in tests.
            diagnostics: Where backend failures during fan-out are reported.
        """
        self._storages: list[EventStorage] = list(storages)
        self._records: list[EventRecord] = []
        self._clock = clock
        self._diagnostics: DiagnosticSink = diagnostics or LoggingDiagnosticSink()
        self._failures = FailureTracker()

    @property
    def storages(self) -> Sequence[EventStorage]:
        return tuple(self._storages)

    @property
    def records(self) -> Sequence[EventRecord]:
        """Snapshot of the in-memory index, in insertion order."""
        return tuple(self._records)

    def add_storage(self, storage: EventStorage) -> None:
        """Attach a backend. No deduplication: attaching twice writes twice."""
        self._storages.append(storage)

    def log(
        self,
        level: LogLevel,
        event_type: EventType,
        user: object = None,
        object_id: object = None,
        description: object = None,
    ) -> None:
        """Record an event in every backend, then in the in-memory index.

        Optional metadata is coerced to text (None becomes the default), so
        odd input never raises here.

        A backend that raises is reported and skipped; the remaining backends
        and the index still receive the record.
        """
        record = EventRecord(
            level=level,
            event_type=event_type,
            timestamp=self._clock(),
            user=user,
            object_id=object_id,
            description=description,
        )

        for storage in self._storages:
            try:
                storage.save(record)
            except Exception as exc:  # noqa: BLE001 - one backend must not block the rest
                self._failures.write_failed()
                safe_report(
                    self._diagnostics,
                    Diagnostic(
                        kind="storage_error",
                        source=_storage_name(storage),
                        message=f"save failed for record {record.id}: {exc!r}",
                    ),
                )

        self._records.append(record)

    def log_info(
        self, event_type: EventType, user: object = None, object_id: object = None, description: object = None
    ) -> None:
        self.log(LogLevel.INFO, event_type, user, object_id, description)

    def log_warning(
        self, event_type: EventType, user: object = None, object_id: object = None, description: object = None
    ) -> None:
        self.log(LogLevel.WARNING, event_type, user, object_id, description)

    def log_error(
        self, event_type: EventType, user: object = None, object_id: object = None, description: object = None
    ) -> None:
        self.log(LogLevel.ERROR, event_type, user, object_id, description)

    def load_from_durable_storage(self) -> None:
        """Replace the in-memory index with the first durable backend's contents.

        No-op when no durable backend is attached.
        """
        for storage in self._storages:
            if getattr(storage, "durable", False):
                try:
                    loaded = storage.load()
                except Exception as exc:  # noqa: BLE001 - keep the current index on failure
                    self._failures.read_failed()
                    safe_report(
                        self._diagnostics,
                        Diagnostic(
                            kind="storage_error",
                            source=_storage_name(storage),
                            message=f"load failed: {exc!r}",
                        ),
                    )
                    return
                self._records = list(loaded)
                return

    def get_by_period(self, start: datetime, end: datetime) -> list[EventRecord]:
        """Records with `start <= timestamp <= end`, oldest first (ties keep insertion order)."""
        return filter_by_period(self._records, start, end)

    def get_by_user(self, user: str | None) -> list[EventRecord]:
        """Records logged by `user`, compared case-insensitively, oldest first."""
        return filter_by_user(self._records, user)

    def get_by_type(self, event_type: EventType) -> list[EventRecord]:
        return filter_by_type(self._records, event_type)

    def degraded_status(self) -> dict[str, Any]:
        """Return a minimal degraded-status snapshot for fan-out/reconcile failures."""
        return self._failures.snapshot()
