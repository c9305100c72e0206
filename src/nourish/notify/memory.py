"""In-process notification scheduler.

Useful for tests, demos and hosts that keep pending notifications in
memory. By default only title, body and instant round-trip, like the
mobile schedulers this engine was built against; pass
``keep_series_id=True`` to emulate a host that preserves metadata.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional, Set

from nourish.errors import SchedulerRejected
from nourish.scheduling.models import NotificationContent, PendingTrigger

logger = logging.getLogger(__name__)

RejectRule = Callable[[NotificationContent, datetime], bool]


class InMemoryNotificationScheduler:
    """Dict-backed :class:`~nourish.notify.base.NotificationScheduler`."""

    def __init__(
        self,
        *,
        keep_series_id: bool = False,
        reject_if: Optional[RejectRule] = None,
    ) -> None:
        self.keep_series_id = keep_series_id
        self.reject_if = reject_if
        self.fail_cancel_ids: Set[str] = set()
        self._pending: Dict[str, PendingTrigger] = {}
        self.submit_calls = 0
        self.cancel_calls = 0

    async def submit(self, content: NotificationContent, trigger_at: datetime) -> str:
        self.submit_calls += 1
        if self.reject_if is not None and self.reject_if(content, trigger_at):
            raise SchedulerRejected(
                "scheduler refused the notification",
                trigger_at=trigger_at,
                operation="submit",
            )
        trigger_id = uuid.uuid4().hex[:12]
        self._pending[trigger_id] = PendingTrigger(
            id=trigger_id,
            title=content.title,
            body=content.body,
            trigger_at=trigger_at,
            series_id=content.series_id if self.keep_series_id else "",
        )
        logger.debug("Scheduled %s at %s: %s", trigger_id, trigger_at.isoformat(), content.title)
        return trigger_id

    async def cancel(self, trigger_id: str) -> None:
        self.cancel_calls += 1
        if trigger_id in self.fail_cancel_ids:
            raise SchedulerRejected(
                "scheduler refused the cancellation",
                trigger_id=trigger_id,
                operation="cancel",
            )
        self._pending.pop(trigger_id, None)

    async def list_pending(self) -> List[PendingTrigger]:
        return list(self._pending.values())

    async def cancel_all(self) -> None:
        self._pending.clear()

    def fire_due(self, now: datetime) -> List[PendingTrigger]:
        """Drop triggers due at or before ``now``, as the host would on firing."""
        due = [t for t in self._pending.values() if t.trigger_at <= now]
        for trigger in due:
            del self._pending[trigger.id]
        return due

    def __len__(self) -> int:
        return len(self._pending)
