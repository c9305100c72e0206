"""Minute-of-day offset → concrete future instant."""
from __future__ import annotations

from datetime import date, datetime, time, timedelta


def occurrence_on(day: date, offset_minutes: int) -> datetime:
    """Instant at ``offset_minutes`` past midnight of ``day``.

    Offsets of 1440 or more roll onto the following days, which is how
    windows wrapping past midnight are placed.
    """
    return datetime.combine(day, time(0, 0)) + timedelta(minutes=offset_minutes)


def next_occurrence(offset_minutes: int, now: datetime) -> datetime:
    """Next instant strictly after ``now`` at this minute-of-day.

    Today's occurrence if it is still in the future, otherwise tomorrow's.
    An occurrence equal to ``now`` counts as past.
    """
    candidate = now.replace(
        hour=0, minute=0, second=0, microsecond=0
    ) + timedelta(minutes=offset_minutes % (24 * 60))
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate
