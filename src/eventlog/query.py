"""Filters shared by the facade and the storage backends.

Every filter returns a new list ordered by ascending timestamp. Sorting is
stable, so records with equal timestamps keep their insertion (or file) order.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from .models import EventRecord, EventType, as_aware


def _by_timestamp(records: Iterable[EventRecord]) -> list[EventRecord]:
    return sorted(records, key=lambda r: r.timestamp)


def filter_by_period(records: Iterable[EventRecord], start: datetime, end: datetime) -> list[EventRecord]:
    """Records with `start <= timestamp <= end` (both bounds inclusive)."""
    lo, hi = as_aware(start), as_aware(end)
    return _by_timestamp(r for r in records if lo <= r.timestamp <= hi)


def filter_by_user(records: Iterable[EventRecord], user: str | None) -> list[EventRecord]:
    """Records whose user matches `user`, ignoring case. A None query matches nothing."""
    if user is None:
        return []
    wanted = user.casefold()
    return _by_timestamp(r for r in records if r.user.casefold() == wanted)


def filter_by_type(records: Iterable[EventRecord], event_type: EventType) -> list[EventRecord]:
    return _by_timestamp(r for r in records if r.event_type == event_type)
