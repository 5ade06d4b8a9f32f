"""Demo entrypoint wiring the event log together.

This module intentionally contains a small, end-to-end "smoke test" that:

- Loads configuration from environment.
- Builds the event log with a durable file backend and a console mirror.
- Reloads events persisted by previous runs.
- Logs sample events from the request-tracking, room-booking and
  equipment-issuance subsystems, then prints a few queries.

It is **not** part of the event log API; it is a thin caller of it.
"""

from __future__ import annotations

from datetime import datetime

from config import load_config
from eventlog import EventLog, EventRecord, EventType
from eventlog.diagnostics import configure_logging
from eventlog.wiring import build_event_log


def _print_section(title: str, records: list[EventRecord]) -> None:
    print(f"\n=== {title} ===")
    for record in records:
        print(record)


def log_sample_events(event_log: EventLog) -> None:
    """Log the demo events from the three business subsystems plus technical ones."""
    # Request tracking.
    event_log.log_info(EventType.RECORD_CREATED, "Ivanov A.P.", "Request-001", "New equipment request created")
    event_log.log_info(EventType.STATUS_CHANGED, "Petrova S.I.", "Request-001", "Status changed to 'In progress'")

    # Room booking.
    event_log.log_info(EventType.RECORD_CREATED, "Sidorov V.K.", "Booking-015", "Conference room booked for 15:00")
    event_log.log_warning(EventType.DEADLINE_CHANGED, "Sidorov V.K.", "Booking-015", "Meeting moved from 14:00 to 15:00")

    # Equipment issuance.
    event_log.log_error(
        EventType.SYSTEM_ERROR, "System", "Equipment-023", "Failed to issue equipment: device not found"
    )

    # Technical.
    event_log.log_info(EventType.TECHNICAL_ACTION, "System", "Database", "Data backup completed")

    event_log.log_info(EventType.RECORD_UPDATED, "Ivanov A.P.", "Request-001", "Additional equipment added to request")
    event_log.log_info(EventType.RECORD_DELETED, "Petrova S.I.", "Request-005", "Request deleted at the user's request")


def run_demo() -> None:
    """Run the demo against the configured durable file."""
    cfg = load_config().event_log
    configure_logging(cfg.diagnostics_level_number)

    # build_event_log reloads previous events when load_on_start is set.
    event_log = build_event_log(cfg)

    print("=== Event log ===\n")
    log_sample_events(event_log)

    now = datetime.now().astimezone()
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)

    today = event_log.get_by_period(start_of_day, now)
    _print_section("Events today", today)
    _print_section("Events by Ivanov A.P.", event_log.get_by_user("Ivanov A.P."))
    _print_section("System errors", event_log.get_by_type(EventType.SYSTEM_ERROR))

    print(f"\nTotal events today: {len(today)}")


def main() -> None:
    """CLI entrypoint for running the demo with `python src/main.py`."""
    run_demo()


if __name__ == "__main__":
    main()
