"""Boundary contracts for the host notification service.

The engine only needs four scheduler calls and a permission prompt. Any
host (a desktop daemon, a mobile bridge, the in-memory fake used in tests)
plugs in by satisfying these protocols.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Protocol, runtime_checkable

from nourish.scheduling.models import NotificationContent, PendingTrigger


@runtime_checkable
class NotificationScheduler(Protocol):
    """Opaque store of future one-shot notifications."""

    async def submit(self, content: NotificationContent, trigger_at: datetime) -> str:
        """Schedule one notification; returns its id.

        Raises :class:`nourish.errors.SchedulerRejected` on refusal.
        """
        ...

    async def cancel(self, trigger_id: str) -> None:
        """Cancel one notification. Unknown ids are not an error."""
        ...

    async def list_pending(self) -> List[PendingTrigger]:
        ...

    async def cancel_all(self) -> None:
        ...


@runtime_checkable
class PermissionGate(Protocol):
    """Asks the host for permission to post notifications."""

    async def request_permission(self) -> bool:
        ...
