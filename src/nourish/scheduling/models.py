"""Data models shared by the scheduling engine.

The notification scheduler is an untyped store: it only knows a title, a
body and a trigger instant (plus, on some hosts, an opaque ``series_id``).
:class:`SeriesKey` is the logical grouping the engine layers on top of it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from nourish.meals import MealKind

HYDRATION_SERIES_ID = "hydration"


# ── Series ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class SeriesKey:
    """Either ``meal(<MealKind>)`` or ``hydration``."""

    meal: Optional[MealKind] = None

    @classmethod
    def for_meal(cls, meal: Union[MealKind, str]) -> SeriesKey:
        return cls(meal=MealKind(meal))

    @classmethod
    def hydration(cls) -> SeriesKey:
        return cls(meal=None)

    @property
    def is_hydration(self) -> bool:
        return self.meal is None

    @property
    def series_id(self) -> str:
        """Stable string form, e.g. ``meal:lunch`` or ``hydration``."""
        if self.meal is None:
            return HYDRATION_SERIES_ID
        return f"meal:{self.meal.value}"

    @classmethod
    def parse(cls, series_id: Optional[str]) -> Optional[SeriesKey]:
        """Inverse of :attr:`series_id`; ``None`` when unrecognised."""
        value = (series_id or "").strip().lower()
        if value == HYDRATION_SERIES_ID:
            return cls.hydration()
        if value.startswith("meal:"):
            try:
                return cls.for_meal(value[5:])
            except ValueError:
                return None
        return None

    def __str__(self) -> str:
        return self.series_id


# ── Scheduler records ───────────────────────────────────────────


@dataclass(frozen=True)
class NotificationContent:
    """What the engine hands to the scheduler for one trigger."""

    title: str
    body: str
    series_id: str = ""


@dataclass(frozen=True)
class PendingTrigger:
    """A pending notification as listed by the scheduler."""

    id: str
    title: str
    body: str
    trigger_at: datetime
    series_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "trigger_at": self.trigger_at.isoformat(),
        }
        if self.series_id:
            d["series_id"] = self.series_id
        return d


# ── Outcomes ────────────────────────────────────────────────────


class OutcomeStatus(str, Enum):
    """Terminal result of a scheduling action."""

    SCHEDULED = "scheduled"
    EMPTY = "empty"                          # no future candidates, not an error
    PERMISSION_REQUIRED = "permission_required"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionFailure:
    """One candidate the scheduler refused."""

    instant: datetime
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"instant": self.instant.isoformat(), "reason": self.reason}


@dataclass(frozen=True)
class CancelFailure:
    """One pending trigger the scheduler refused to cancel."""

    trigger_id: str
    trigger_at: datetime
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trigger_id": self.trigger_id,
            "trigger_at": self.trigger_at.isoformat(),
            "reason": self.reason,
        }


@dataclass
class CancelReport:
    """Result of cancelling a series: how many went, and which were refused."""

    cancelled: int = 0
    failures: List[CancelFailure] = field(default_factory=list)


@dataclass
class ScheduleOutcome:
    """Summary of a ``replace_series`` call.

    ``scheduled_count`` always equals ``len(instants)``; partial submissions
    are reported here rather than rolled back. ``cancel_failures`` lists old
    triggers that are still pending because the scheduler refused to cancel
    them.
    """

    series: SeriesKey
    status: OutcomeStatus
    instants: List[datetime] = field(default_factory=list)
    failures: List[SubmissionFailure] = field(default_factory=list)
    reason: str = ""
    cancel_failures: List[CancelFailure] = field(default_factory=list)

    @property
    def scheduled_count(self) -> int:
        return len(self.instants)

    @property
    def ok(self) -> bool:
        return self.status in (OutcomeStatus.SCHEDULED, OutcomeStatus.EMPTY)

    @property
    def message(self) -> str:
        """User-facing summary; exactly one per terminal status."""
        if self.status == OutcomeStatus.SCHEDULED:
            times = "\n".join(i.strftime("%a %d %b %H:%M") for i in self.instants)
            noun = "reminder" if self.scheduled_count == 1 else "reminders"
            text = f"{self.scheduled_count} {noun} scheduled for {self._label()} at:\n\n{times}"
            if self.failures:
                text += f"\n\n{len(self.failures)} could not be scheduled."
            return text + self._cancel_note()
        if self.status == OutcomeStatus.EMPTY:
            return "No valid future reminders were found in this time range." + self._cancel_note()
        if self.status == OutcomeStatus.PERMISSION_REQUIRED:
            return "Permission required: notifications permission is required to set reminders."
        return f"Failed: {self.reason or 'unknown error'}" + self._cancel_note()

    def _cancel_note(self) -> str:
        if not self.cancel_failures:
            return ""
        count = len(self.cancel_failures)
        noun = "reminder" if count == 1 else "reminders"
        return f"\n\n{count} earlier {noun} could not be cancelled."

    def _label(self) -> str:
        if self.series.meal is None:
            return "hydration"
        return self.series.meal.label

    def to_dict(self) -> Dict[str, Any]:
        return {
            "series": self.series.series_id,
            "status": self.status.value,
            "scheduled_count": self.scheduled_count,
            "instants": [i.isoformat() for i in self.instants],
            "failures": [f.to_dict() for f in self.failures],
            "cancel_failures": [f.to_dict() for f in self.cancel_failures],
            "reason": self.reason,
            "message": self.message,
        }
