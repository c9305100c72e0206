"""Tests for nourish.service — the controller a presentation layer uses."""
from __future__ import annotations

import asyncio
from datetime import datetime

import pytest

from nourish.meals import MealKind, TimeWindow
from nourish.notify.memory import InMemoryNotificationScheduler
from nourish.notify.permissions import StaticPermissionGate
from nourish.scheduling.models import OutcomeStatus, SeriesKey
from nourish.service import BUSY_REASON, ReminderService
from nourish.storage.kv import InMemoryKeyValueStore

LUNCH = SeriesKey.for_meal(MealKind.LUNCH)


class TestScheduleMeal:
    @pytest.mark.asyncio
    async def test_default_breakfast(self, service):
        await service.load()
        now = datetime(2026, 2, 16, 7, 0)
        outcome = await service.schedule_meal(MealKind.BREAKFAST, now=now)
        assert outcome.status == OutcomeStatus.SCHEDULED
        assert outcome.instants == [
            datetime(2026, 2, 16, 8, 0),
            datetime(2026, 2, 16, 8, 30),
            datetime(2026, 2, 16, 9, 30),
        ]
        assert "3 reminders scheduled for Breakfast" in outcome.message

    @pytest.mark.asyncio
    async def test_reschedule_does_not_duplicate(self, service, scheduler):
        await service.load()
        now = datetime(2026, 2, 16, 7, 0)
        await service.schedule_meal(MealKind.BREAKFAST, now=now)
        await service.schedule_meal(MealKind.BREAKFAST, now=now)
        assert len(scheduler) == 3

    @pytest.mark.asyncio
    async def test_permission_required(self, scheduler, store):
        service = ReminderService(scheduler, StaticPermissionGate(False), store)
        outcome = await service.schedule_meal(MealKind.LUNCH, now=datetime(2026, 2, 16, 7, 0))
        assert outcome.status == OutcomeStatus.PERMISSION_REQUIRED
        assert len(scheduler) == 0

    @pytest.mark.asyncio
    async def test_repeat_flag_used(self, service, scheduler):
        await service.load()
        now = datetime(2026, 2, 16, 9, 30)
        await service.set_repeat(MealKind.BREAKFAST, True, now=now)
        outcome = await service.schedule_meal(MealKind.BREAKFAST, now=now)
        # day 0 entries have all passed; 13 remaining days × 3 offsets
        assert outcome.scheduled_count == 13 * 3


class TestEdits:
    @pytest.mark.asyncio
    async def test_window_edit_without_pending_only_saves(self, service, scheduler, store):
        await service.load()
        outcome = await service.set_window(
            MealKind.LUNCH, TimeWindow.from_hhmm("12:30", "13:00"), now=datetime(2026, 2, 16, 7, 0)
        )
        assert outcome is None
        assert len(scheduler) == 0
        assert await store.get("window:lunch") is not None

    @pytest.mark.asyncio
    async def test_window_edit_replaces_pending(self, service, scheduler):
        await service.load()
        now = datetime(2026, 2, 16, 7, 0)
        await service.schedule_meal(MealKind.LUNCH, now=now)
        assert len(scheduler) == 3
        outcome = await service.set_window(
            MealKind.LUNCH, TimeWindow.from_hhmm("12:30", "13:00"), now=now
        )
        assert outcome.instants == [datetime(2026, 2, 16, 12, 30), datetime(2026, 2, 16, 13, 0)]
        assert len(scheduler) == 2

    @pytest.mark.asyncio
    async def test_repeat_toggle_replaces_pending(self, service, scheduler):
        await service.load()
        now = datetime(2026, 2, 16, 7, 0)
        await service.schedule_meal(MealKind.DINNER, now=now)
        outcome = await service.set_repeat(MealKind.DINNER, True, now=now)
        assert outcome.scheduled_count == 14 * 3
        outcome = await service.set_repeat(MealKind.DINNER, False, now=now)
        assert outcome.scheduled_count == 3
        assert len(scheduler) == 3

    @pytest.mark.asyncio
    async def test_settings_survive_reload(self, scheduler, gate, store):
        first = ReminderService(scheduler, gate, store)
        await first.load()
        await first.set_window(MealKind.DINNER, TimeWindow.from_hhmm("18:00", "20:00"))
        await first.set_repeat(MealKind.DINNER, True)

        second = ReminderService(scheduler, gate, store)
        settings = await second.load()
        assert str(settings.window_for(MealKind.DINNER)) == "18:00–20:00"
        assert settings.repeat_for(MealKind.DINNER) is True


class TestHydrationFlow:
    @pytest.mark.asyncio
    async def test_schedule_hydration(self, service):
        now = datetime(2026, 2, 16, 9, 0)
        outcome = await service.schedule_hydration(now=now, interval_minutes=60)
        assert outcome.instants == [datetime(2026, 2, 16, 10, 0), datetime(2026, 2, 16, 11, 0)]

    @pytest.mark.asyncio
    async def test_had_meal(self, service):
        await service.load()
        await service.schedule_meal(MealKind.LUNCH, now=datetime(2026, 2, 16, 7, 0))
        now = datetime(2026, 2, 16, 12, 5)
        outcome = await service.had_meal(MealKind.LUNCH, now=now)
        assert outcome.scheduled_count == 2
        assert await service.ledger.query_series(LUNCH, now) == []

    @pytest.mark.asyncio
    async def test_interval_from_config(self, scheduler, gate, store):
        from nourish.config import NourishConfig

        service = ReminderService(
            scheduler, gate, store, config=NourishConfig(hydration_interval_minutes=30)
        )
        outcome = await service.schedule_hydration(now=datetime(2026, 2, 16, 9, 0))
        assert outcome.instants == [datetime(2026, 2, 16, 9, 30), datetime(2026, 2, 16, 10, 0)]


class TestUpcoming:
    @pytest.mark.asyncio
    async def test_includes_hydration_inside_window(self, service):
        await service.load()
        now = datetime(2026, 2, 16, 11, 0)
        await service.schedule_meal(MealKind.LUNCH, now=now)
        await service.schedule_hydration(now=now, interval_minutes=90)  # 12:30, 14:00
        upcoming = await service.upcoming(MealKind.LUNCH, now=now)
        assert [t.trigger_at for t in upcoming] == [
            datetime(2026, 2, 16, 12, 0),
            datetime(2026, 2, 16, 12, 30),
            datetime(2026, 2, 16, 12, 30),
            datetime(2026, 2, 16, 13, 30),
            datetime(2026, 2, 16, 14, 0),
        ]

    @pytest.mark.asyncio
    async def test_excludes_hydration_outside_window(self, service):
        await service.load()
        now = datetime(2026, 2, 16, 6, 0)
        await service.schedule_hydration(now=now)  # 08:00, 10:00
        upcoming = await service.upcoming(MealKind.DINNER, now=now)
        assert upcoming == []
        breakfast = await service.upcoming(MealKind.BREAKFAST, now=now)
        assert len(breakfast) == 2


class TestBusyFlag:
    @pytest.mark.asyncio
    async def test_overlapping_call_refused(self, gate, store):
        release = asyncio.Event()

        class SlowScheduler(InMemoryNotificationScheduler):
            async def list_pending(self):
                await release.wait()
                return await super().list_pending()

        scheduler = SlowScheduler()
        service = ReminderService(scheduler, gate, store)
        now = datetime(2026, 2, 16, 7, 0)

        first = asyncio.ensure_future(service.schedule_meal(MealKind.LUNCH, now=now))
        await asyncio.sleep(0)
        assert service.is_busy(LUNCH)

        second = await service.schedule_meal(MealKind.LUNCH, now=now)
        assert second.status == OutcomeStatus.FAILED
        assert second.reason == BUSY_REASON
        assert "busy" in second.message

        release.set()
        outcome = await first
        assert outcome.scheduled_count == 3
        assert not service.is_busy(LUNCH)

    @pytest.mark.asyncio
    async def test_other_series_not_blocked(self, gate, store):
        release = asyncio.Event()

        class SlowScheduler(InMemoryNotificationScheduler):
            async def submit(self, content, trigger_at):
                if "Lunch" in content.title:
                    await release.wait()
                return await super().submit(content, trigger_at)

        service = ReminderService(SlowScheduler(), gate, store)
        now = datetime(2026, 2, 16, 7, 0)
        first = asyncio.ensure_future(service.schedule_meal(MealKind.LUNCH, now=now))
        await asyncio.sleep(0)
        water = await service.schedule_hydration(now=now)
        assert water.status == OutcomeStatus.SCHEDULED
        release.set()
        await first

    @pytest.mark.asyncio
    async def test_had_meal_refused_while_meal_in_flight(self, gate, store):
        release = asyncio.Event()

        class SlowScheduler(InMemoryNotificationScheduler):
            async def submit(self, content, trigger_at):
                if "Lunch" in content.title:
                    await release.wait()
                return await super().submit(content, trigger_at)

        scheduler = SlowScheduler()
        service = ReminderService(scheduler, gate, store)
        first = asyncio.ensure_future(
            service.schedule_meal(MealKind.LUNCH, now=datetime(2026, 2, 16, 7, 0))
        )
        await asyncio.sleep(0)
        assert service.is_busy(LUNCH)

        later = datetime(2026, 2, 16, 7, 5)
        ate = await service.had_meal(MealKind.LUNCH, now=later)
        assert ate.status == OutcomeStatus.FAILED
        assert ate.reason == BUSY_REASON
        water = await service.ledger.query_series(SeriesKey.hydration(), later)
        assert water == []

        release.set()
        await first
        assert len(scheduler) == 3
        assert not service.is_busy(LUNCH)
        assert not service.is_busy(SeriesKey.hydration())

    @pytest.mark.asyncio
    async def test_meal_refused_while_had_meal_in_flight(self, gate, store):
        release = asyncio.Event()

        class SlowScheduler(InMemoryNotificationScheduler):
            async def submit(self, content, trigger_at):
                if "Hydration" in content.title:
                    await release.wait()
                return await super().submit(content, trigger_at)

        service = ReminderService(SlowScheduler(), gate, store)
        now = datetime(2026, 2, 16, 7, 0)
        ate = asyncio.ensure_future(service.had_meal(MealKind.LUNCH, now=now))
        await asyncio.sleep(0)
        assert service.is_busy(LUNCH)

        lunch = await service.schedule_meal(MealKind.LUNCH, now=now)
        assert lunch.reason == BUSY_REASON
        release.set()
        assert (await ate).scheduled_count == 2


class TestMisc:
    @pytest.mark.asyncio
    async def test_cancel_and_clear(self, service, scheduler):
        await service.load()
        now = datetime(2026, 2, 16, 7, 0)
        await service.schedule_meal(MealKind.LUNCH, now=now)
        pending = await service.pending()
        assert await service.cancel_reminder(pending[0].id) is True
        assert len(scheduler) == 2
        await service.clear_all()
        assert await service.pending() == []

    def test_route_tap(self, service):
        assert service.route_tap("Reminder: Lunch") == MealKind.LUNCH
        assert service.route_tap("Hydration Reminder") == MealKind.BREAKFAST

    def test_suggestions(self, service):
        names = [d.name for d in service.suggestions(MealKind.DINNER)]
        assert names == ["Paneer Salad", "Tomato Soup & Toast"]

    @pytest.mark.asyncio
    async def test_status(self, service):
        await service.load()
        now = datetime(2026, 2, 16, 7, 0)
        await service.schedule_meal(MealKind.BREAKFAST, now=now)
        status = await service.status(now=now)
        assert status["meals"]["breakfast"]["pending"] == 3
        assert status["meals"]["lunch"]["pending"] == 0
        assert status["hydration_pending"] == 0
