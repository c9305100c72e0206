"""Bounded-horizon materialization of a daily reminder schedule.

Hosts without a dependable recurring trigger get the same effect from
one-shot triggers: every offset is placed on each of the next
``horizon_days`` calendar days. Entries already in the past are dropped,
not shifted, so today's missed reminders never double-book tomorrow.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List

from nourish.scheduling.occurrence import occurrence_on

REPEAT_HORIZON_DAYS = 14


def expand_repeating(
    offsets: Iterable[int],
    now: datetime,
    horizon_days: int = REPEAT_HORIZON_DAYS,
) -> List[datetime]:
    """Instants for days ``0..horizon_days-1`` strictly after ``now``, ascending."""
    if horizon_days <= 0:
        return []
    minutes = list(offsets)
    today = now.date()
    instants = set()
    for day_offset in range(horizon_days):
        day = today + timedelta(days=day_offset)
        for minute in minutes:
            instant = occurrence_on(day, minute)
            if now.tzinfo is not None:
                instant = instant.replace(tzinfo=now.tzinfo)
            if instant > now:
                instants.add(instant)
    return sorted(instants)
