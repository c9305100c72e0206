"""Two-shot hydration reminders.

Each call replaces the hydration series with exactly two triggers,
``now + interval`` and ``now + 2 * interval``. Re-triggering never stacks:
the previous pair is cancelled first by the ledger.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from nourish.errors import SchedulerRejected
from nourish.meals import MealKind
from nourish.scheduling.ledger import ReminderLedger
from nourish.scheduling.models import OutcomeStatus, ScheduleOutcome, SeriesKey

logger = logging.getLogger(__name__)

DEFAULT_HYDRATION_INTERVAL_MINUTES = 120
HYDRATION_SHOTS = 2


def hydration_instants(now: datetime, interval_minutes: int) -> List[datetime]:
    if isinstance(interval_minutes, bool) or not isinstance(interval_minutes, int):
        raise ValueError(f"interval_minutes must be an int, got {interval_minutes!r}")
    if interval_minutes <= 0:
        raise ValueError(f"interval_minutes must be positive, got {interval_minutes}")
    step = timedelta(minutes=interval_minutes)
    return [now + step * k for k in range(1, HYDRATION_SHOTS + 1)]


class HydrationScheduler:
    """Hydration series on top of a :class:`ReminderLedger`."""

    def __init__(
        self,
        ledger: ReminderLedger,
        interval_minutes: int = DEFAULT_HYDRATION_INTERVAL_MINUTES,
    ) -> None:
        hydration_instants(datetime.now(), interval_minutes)  # validate early
        self.ledger = ledger
        self.interval_minutes = interval_minutes

    async def schedule(
        self,
        now: Optional[datetime] = None,
        interval_minutes: Optional[int] = None,
    ) -> ScheduleOutcome:
        now = now or datetime.now()
        interval = self.interval_minutes if interval_minutes is None else interval_minutes
        candidates = hydration_instants(now, interval)
        logger.debug("Hydration every %d min from %s", interval, now.isoformat())
        return await self.ledger.replace_series(SeriesKey.hydration(), now, candidates)

    async def after_meal(
        self,
        meal: MealKind,
        now: Optional[datetime] = None,
        interval_minutes: Optional[int] = None,
    ) -> ScheduleOutcome:
        """The user just ate ``meal``.

        Only today's remaining nudges for that meal are dropped. Reminders on
        later days of a repeating meal intentionally stay pending, rather
        than every future reminder of the meal being cancelled. Hydration is
        then anchored at this moment. Meal triggers the scheduler refuses to
        cancel are reported in the outcome's ``cancel_failures``.
        """
        now = now or datetime.now()
        interval = self.interval_minutes if interval_minutes is None else interval_minutes
        hydration_instants(now, interval)
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)
        try:
            report = await self.ledger.cancel_series_until(SeriesKey.for_meal(meal), midnight)
        except SchedulerRejected as exc:
            exc.log()
            return ScheduleOutcome(
                series=SeriesKey.hydration(),
                status=OutcomeStatus.FAILED,
                reason=exc.reason,
            )
        if report.cancelled:
            logger.info("Dropped %d remaining %s reminders for today", report.cancelled, meal.label)
        outcome = await self.schedule(now=now, interval_minutes=interval)
        outcome.cancel_failures = report.failures + outcome.cancel_failures
        return outcome
