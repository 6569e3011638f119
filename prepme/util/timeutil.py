from __future__ import annotations

"""Millisecond-epoch and local calendar-day helpers.

Records store times as integer milliseconds since the epoch. Activity is
bucketed by calendar day in the local time zone.
"""

import time
from datetime import date, datetime

DAY_MS = 86_400_000


def now_ms() -> int:
    """Current time as integer milliseconds since the epoch."""
    return int(time.time() * 1000)


def to_ms(dt: datetime) -> int:
    """Convert a datetime (naive = local time) to epoch milliseconds."""
    return int(dt.timestamp() * 1000)


def from_ms(ms: int | float) -> datetime:
    """Local naive datetime for an epoch-millisecond value."""
    return datetime.fromtimestamp(float(ms) / 1000.0)


def local_day(ms: int | float) -> date:
    """Calendar day (local time zone) of an epoch-millisecond value."""
    return from_ms(ms).date()


def as_datetime(now: datetime | int | float | None) -> datetime:
    """Normalize a 'now' argument: None -> current local time, ms -> local datetime."""
    if now is None:
        return datetime.now()
    if isinstance(now, datetime):
        if now.tzinfo is not None:
            return now.astimezone().replace(tzinfo=None)
        return now
    return from_ms(now)


def as_ms(now: datetime | int | float | None) -> int:
    """Normalize a 'now' argument to epoch milliseconds."""
    if now is None:
        return now_ms()
    if isinstance(now, datetime):
        return to_ms(now)
    return int(now)