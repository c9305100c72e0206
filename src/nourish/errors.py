"""Typed exceptions for the nourish reminder engine.

Exception hierarchy::

    NourishError
    ├── PermissionDenied     — notification permission not granted
    ├── SchedulerRejected    — the notification scheduler refused one item
    └── InvalidWindow        — a meal time window is malformed (also ValueError)

Pure computation (offsets, occurrences, tagging) never raises. Only the
components that talk to the scheduler boundary can fail, and they fail per
item: the ledger turns ``SchedulerRejected`` into a ``SubmissionFailure`` on
the outcome instead of aborting the batch.

Usage::

    from nourish.errors import SchedulerRejected

    try:
        trigger_id = await scheduler.submit(content, when)
    except SchedulerRejected as exc:
        exc.log()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

__all__ = [
    "NourishError",
    "PermissionDenied",
    "SchedulerRejected",
    "InvalidWindow",
    "ErrorContext",
]


# ── Error context ─────────────────────────────────────────────

@dataclass
class ErrorContext:
    """Structured context attached to every nourish exception."""

    series: str = ""         # "meal:lunch" | "hydration"
    operation: str = ""      # "submit" | "cancel" | "permission" | "window"
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_log_dict(self) -> Dict[str, Any]:
        """Flatten to dict for structured logging."""
        d: Dict[str, Any] = {
            "series": self.series,
            "operation": self.operation,
            "timestamp": self.timestamp,
        }
        d.update(self.metadata)
        return d


# ── Base exception ────────────────────────────────────────────

class NourishError(Exception):
    """Base exception for all nourish errors."""

    def __init__(
        self,
        message: str = "",
        *,
        series: str = "",
        operation: str = "",
        context: Optional[ErrorContext] = None,
        **metadata: Any,
    ) -> None:
        self.reason = message
        self.context = context or ErrorContext(
            series=series,
            operation=operation,
            metadata=metadata,
        )
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []
        if self.context.series:
            parts.append(f"[{self.context.series}]")
        if self.context.operation:
            parts.append(f"[{self.context.operation}]")
        parts.append(self.reason)
        return " ".join(parts)

    def log(self, level: int = logging.WARNING) -> None:
        """Emit a structured log line for this error."""
        logger.log(
            level,
            "%s: %s | context=%s",
            type(self).__name__,
            self.reason,
            self.context.to_log_dict(),
            exc_info=(level >= logging.ERROR),
        )


# ── Typed exceptions ─────────────────────────────────────────

class PermissionDenied(NourishError):
    """Scheduling was attempted without notification permission.

    User-facing; never retried automatically.
    """

    def __init__(
        self,
        message: str = "Notifications permission is required to set reminders.",
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("operation", "permission")
        super().__init__(message, **kwargs)


class SchedulerRejected(NourishError):
    """The notification scheduler refused a single submit or cancel.

    Attributes
    ----------
    trigger_at:
        The instant that was being submitted, if any.
    trigger_id:
        The trigger that was being cancelled, if any.
    """

    def __init__(
        self,
        message: str = "Notification scheduler rejected the request",
        *,
        trigger_at: Optional[datetime] = None,
        trigger_id: str = "",
        **kwargs: Any,
    ) -> None:
        if trigger_at is not None:
            kwargs.setdefault("trigger_at", trigger_at.isoformat())
        if trigger_id:
            kwargs.setdefault("trigger_id", trigger_id)
        super().__init__(message, **kwargs)
        self.trigger_at = trigger_at
        self.trigger_id = trigger_id


class InvalidWindow(NourishError, ValueError):
    """A meal time window bound is outside ``[0, 1440)`` or unparseable."""

    def __init__(self, message: str = "Invalid time window", **kwargs: Any) -> None:
        kwargs.setdefault("operation", "window")
        super().__init__(message, **kwargs)
