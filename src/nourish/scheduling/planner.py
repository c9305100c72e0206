"""Candidate trigger instants for a meal window."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import List

from nourish.meals import MINUTES_PER_DAY, TimeWindow
from nourish.scheduling.occurrence import next_occurrence, occurrence_on
from nourish.scheduling.offsets import reminder_offsets
from nourish.scheduling.repeat import REPEAT_HORIZON_DAYS, expand_repeating


class MealReminderPlanner:
    """Window + repeat flag → sorted future instants."""

    def __init__(self, horizon_days: int = REPEAT_HORIZON_DAYS) -> None:
        self.horizon_days = horizon_days

    def offsets(self, window: TimeWindow) -> List[int]:
        return reminder_offsets(window.start_minute, window.normalized_end()).to_list()

    def candidates(self, window: TimeWindow, repeat: bool, now: datetime) -> List[datetime]:
        offsets = self.offsets(window)
        if repeat:
            return expand_repeating(offsets, now, self.horizon_days)
        return sorted({self._next(offset, now) for offset in offsets})

    @staticmethod
    def _next(offset: int, now: datetime) -> datetime:
        if offset < MINUTES_PER_DAY:
            return next_occurrence(offset, now)
        # Past-midnight part of a wrapping window: the run that started
        # yesterday evening may still be in progress.
        day = now.date() - timedelta(days=1)
        while True:
            instant = occurrence_on(day, offset)
            if now.tzinfo is not None:
                instant = instant.replace(tzinfo=now.tzinfo)
            if instant > now:
                return instant
            day += timedelta(days=1)
