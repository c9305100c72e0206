from __future__ import annotations

from datetime import datetime

import pytest

from nourish.notify.memory import InMemoryNotificationScheduler
from nourish.notify.permissions import StaticPermissionGate
from nourish.scheduling.ledger import ReminderLedger
from nourish.service import ReminderService
from nourish.storage.kv import InMemoryKeyValueStore


@pytest.fixture
def day() -> datetime:
    """Monday 2026-02-16 00:00, the reference calendar day for tests."""
    return datetime(2026, 2, 16)


@pytest.fixture
def scheduler() -> InMemoryNotificationScheduler:
    return InMemoryNotificationScheduler()


@pytest.fixture
def gate() -> StaticPermissionGate:
    return StaticPermissionGate(True)


@pytest.fixture
def ledger(scheduler, gate) -> ReminderLedger:
    return ReminderLedger(scheduler, gate)


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def service(scheduler, gate, store) -> ReminderService:
    return ReminderService(scheduler, gate, store)
