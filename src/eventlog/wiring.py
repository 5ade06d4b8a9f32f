"""Build an `EventLog` from application configuration."""

from __future__ import annotations

from pathlib import Path

from config import EventLogConfig

from .diagnostics import DiagnosticSink, LoggingDiagnosticSink
from .logger import EventLog
from .models import Clock, utc_now
from .storage import ConsoleEventStorage, DuckDBEventStorage, FileEventStorage


def build_event_log(
    cfg: EventLogConfig,
    *,
    diagnostics: DiagnosticSink | None = None,
    clock: Clock | None = None,
) -> EventLog:
    """Attach backends in fan-out order (file, DuckDB, console) and optionally reconcile.

    The file backend is always attached first, so it is the one
    `load_from_durable_storage` reads from.
    """
    sink = diagnostics or LoggingDiagnosticSink()
    event_log = EventLog(clock=clock or utc_now, diagnostics=sink)

    event_log.add_storage(FileEventStorage(Path(cfg.file_path), diagnostics=sink))
    if cfg.duckdb_path:
        event_log.add_storage(DuckDBEventStorage(path=Path(cfg.duckdb_path), diagnostics=sink))
    if cfg.console_mirror:
        event_log.add_storage(ConsoleEventStorage(diagnostics=sink))

    if cfg.load_on_start:
        event_log.load_from_durable_storage()
    return event_log
