"""Reminder service — the controller a presentation layer talks to.

Wires the pieces together::

    settings (KeyValueStore) ──► MealReminderPlanner ──► ReminderLedger ──► scheduler
                                      HydrationScheduler ──┘

and adds the UI-side rules the engine itself stays out of:

- busy flag: while a scheduling call for a series is in flight, another call
  for the same series is refused (``status=FAILED``, reason ``busy``) instead
  of interleaving cancels and submits;
- window edits and repeat toggles re-plan a meal only if it currently has
  pending reminders, replacing them rather than adding more;
- the "upcoming" list for a meal also shows hydration reminders that fall
  inside that meal's window today.

Usage::

    service = ReminderService(scheduler, StaticPermissionGate(True), InMemoryKeyValueStore())
    await service.load()
    outcome = await service.schedule_meal(MealKind.LUNCH)
    print(outcome.message)
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Dict, List, Optional, Set, Tuple

from nourish.config import NourishConfig
from nourish.meals import MealKind, MealSettings, TimeWindow
from nourish.notify.base import NotificationScheduler, PermissionGate
from nourish.scheduling.hydration import HydrationScheduler
from nourish.scheduling.ledger import ReminderLedger
from nourish.scheduling.models import OutcomeStatus, PendingTrigger, ScheduleOutcome, SeriesKey
from nourish.scheduling.occurrence import occurrence_on
from nourish.scheduling.planner import MealReminderPlanner
from nourish.scheduling.tagging import ReminderTagger
from nourish.settings import MealSettingsRepository
from nourish.storage.kv import KeyValueStore
from nourish.suggestions import Dish, suggest_dishes

logger = logging.getLogger(__name__)

BUSY_REASON = "busy"


class ReminderService:
    """Meal + hydration reminder controller."""

    def __init__(
        self,
        scheduler: NotificationScheduler,
        permission_gate: PermissionGate,
        store: KeyValueStore,
        *,
        config: Optional[NourishConfig] = None,
        tagger: Optional[ReminderTagger] = None,
    ) -> None:
        self.config = config or NourishConfig()
        self.tagger = tagger or ReminderTagger()
        self.ledger = ReminderLedger(scheduler, permission_gate, self.tagger)
        self.planner = MealReminderPlanner(self.config.repeat_horizon_days)
        self.hydration = HydrationScheduler(self.ledger, self.config.hydration_interval_minutes)
        self.repository = MealSettingsRepository(store)
        self.settings = MealSettings()
        self._busy: Set[str] = set()

    # ── Settings lifecycle ──────────────────────────────────────

    async def load(self) -> MealSettings:
        self.settings = await self.repository.load()
        logger.debug("Loaded meal settings: %s", self.settings.to_dict())
        return self.settings

    def is_busy(self, series: SeriesKey) -> bool:
        return series.series_id in self._busy

    # ── Meals ───────────────────────────────────────────────────

    async def schedule_meal(
        self,
        meal: MealKind,
        now: Optional[datetime] = None,
    ) -> ScheduleOutcome:
        meal = MealKind(meal)
        series = SeriesKey.for_meal(meal)
        now = now or datetime.now()

        async def run() -> ScheduleOutcome:
            candidates = self.planner.candidates(
                self.settings.window_for(meal),
                self.settings.repeat_for(meal),
                now,
            )
            return await self.ledger.replace_series(series, now, candidates)

        return await self._guarded(series, run)

    async def set_window(
        self,
        meal: MealKind,
        window: TimeWindow,
        now: Optional[datetime] = None,
        *,
        reschedule: bool = True,
    ) -> Optional[ScheduleOutcome]:
        """Persist a new window; re-plan if the meal has pending reminders."""
        meal = MealKind(meal)
        await self.repository.save_window(meal, window)
        self.settings.windows[meal] = window
        logger.info("%s window set to %s", meal.label, window)
        if reschedule:
            return await self._reschedule_if_pending(meal, now)
        return None

    async def set_repeat(
        self,
        meal: MealKind,
        enabled: bool,
        now: Optional[datetime] = None,
    ) -> Optional[ScheduleOutcome]:
        """Persist the repeat flag; re-plan if the meal has pending reminders."""
        meal = MealKind(meal)
        await self.repository.save_repeat(meal, enabled)
        self.settings.repeat[meal] = bool(enabled)
        logger.info("%s repeat %s", meal.label, "on" if enabled else "off")
        return await self._reschedule_if_pending(meal, now)

    async def upcoming(
        self,
        meal: MealKind,
        now: Optional[datetime] = None,
    ) -> List[PendingTrigger]:
        """Future reminders shown under a meal, earliest first.

        The meal's own triggers, plus hydration triggers inside the meal's
        window today (the window end counts through its last second).
        """
        meal = MealKind(meal)
        now = now or datetime.now()
        window = self.settings.window_for(meal)
        own = await self.ledger.query_series(SeriesKey.for_meal(meal), now)

        window_start = occurrence_on(now.date(), window.start_minute)
        window_end = occurrence_on(now.date(), window.normalized_end()) + timedelta(
            seconds=59, microseconds=999000
        )
        if now.tzinfo is not None:
            window_start = window_start.replace(tzinfo=now.tzinfo)
            window_end = window_end.replace(tzinfo=now.tzinfo)
        water = [
            t for t in await self.ledger.query_series(SeriesKey.hydration(), now)
            if window_start <= t.trigger_at <= window_end
        ]
        return sorted(own + water, key=lambda t: t.trigger_at)

    # ── Hydration ───────────────────────────────────────────────

    async def schedule_hydration(
        self,
        now: Optional[datetime] = None,
        interval_minutes: Optional[int] = None,
    ) -> ScheduleOutcome:
        return await self._guarded(
            SeriesKey.hydration(),
            lambda: self.hydration.schedule(now=now, interval_minutes=interval_minutes),
        )

    async def had_meal(
        self,
        meal: MealKind,
        now: Optional[datetime] = None,
        interval_minutes: Optional[int] = None,
    ) -> ScheduleOutcome:
        """User confirmed they ate: drop today's nudges, start hydration.

        Touches both the meal series and the hydration series, so it is
        refused while either one is busy.
        """
        meal = MealKind(meal)
        return await self._guarded(
            SeriesKey.hydration(),
            lambda: self.hydration.after_meal(meal, now=now, interval_minutes=interval_minutes),
            also=(SeriesKey.for_meal(meal),),
        )

    # ── Misc ────────────────────────────────────────────────────

    async def cancel_reminder(self, trigger_id: str) -> bool:
        return await self.ledger.cancel_trigger(trigger_id)

    async def clear_all(self) -> None:
        await self.ledger.cancel_everything()

    async def pending(self) -> List[PendingTrigger]:
        return await self.ledger.pending_snapshot()

    def route_tap(self, title: str) -> MealKind:
        """Meal to open when a delivered notification is tapped."""
        return self.tagger.meal_for_title(title)

    def suggestions(self, meal: MealKind) -> List[Dish]:
        return suggest_dishes(meal)

    async def status(self, now: Optional[datetime] = None) -> Dict[str, object]:
        now = now or datetime.now()
        meals = {}
        for meal in MealKind:
            pending = await self.ledger.query_series(SeriesKey.for_meal(meal), now)
            meals[meal.value] = {
                "window": self.settings.window_for(meal).to_dict(),
                "repeat": self.settings.repeat_for(meal),
                "pending": len(pending),
            }
        hydration = await self.ledger.query_series(SeriesKey.hydration(), now)
        return {"meals": meals, "hydration_pending": len(hydration)}

    # ── Internal ────────────────────────────────────────────────

    async def _reschedule_if_pending(
        self,
        meal: MealKind,
        now: Optional[datetime],
    ) -> Optional[ScheduleOutcome]:
        now = now or datetime.now()
        if not await self.ledger.query_series(SeriesKey.for_meal(meal), now):
            return None
        return await self.schedule_meal(meal, now)

    async def _guarded(
        self,
        series: SeriesKey,
        action: Callable[[], Awaitable[ScheduleOutcome]],
        also: Tuple[SeriesKey, ...] = (),
    ) -> ScheduleOutcome:
        """Run ``action`` holding the busy flag of ``series`` and of ``also``."""
        keys = {series.series_id} | {s.series_id for s in also}
        busy = keys & self._busy
        if busy:
            logger.info("Ignoring overlapping request for %s", ", ".join(sorted(busy)))
            return ScheduleOutcome(series=series, status=OutcomeStatus.FAILED, reason=BUSY_REASON)
        self._busy |= keys
        try:
            return await action()
        finally:
            self._busy -= keys
