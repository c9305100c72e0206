"""Reminder ledger — replace-not-duplicate scheduling over an untyped store.

The ledger never caches the scheduler's pending set. Every operation lists
it, classifies each trigger with :class:`ReminderTagger`, and acts on the
matches:

- ``replace_series``: permission → cancel the series → submit candidates
- ``cancel_all_in_series``: cancel every trigger of the series (idempotent)
- ``query_series``: future triggers of the series, ascending (read-only)

All cancellations of a ``replace_series`` call finish before the first
submission. The store may still list old and new triggers side by side for
the length of one await; there is no atomic swap at the boundary. Callers
must not run two replaces for the same series concurrently (see
:class:`nourish.service.ReminderService` for the busy-flag discipline).
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, List, Optional

from nourish.errors import PermissionDenied, SchedulerRejected
from nourish.scheduling.models import (
    CancelFailure,
    CancelReport,
    OutcomeStatus,
    PendingTrigger,
    ScheduleOutcome,
    SeriesKey,
    SubmissionFailure,
)
from nourish.scheduling.tagging import ReminderTagger

if TYPE_CHECKING:
    from nourish.notify.base import NotificationScheduler, PermissionGate

logger = logging.getLogger(__name__)


class ReminderLedger:
    """Cancels, submits and lists reminder series on a notification scheduler."""

    def __init__(
        self,
        scheduler: NotificationScheduler,
        permission_gate: PermissionGate,
        tagger: Optional[ReminderTagger] = None,
    ) -> None:
        self.scheduler = scheduler
        self.permission_gate = permission_gate
        self.tagger = tagger or ReminderTagger()

    # ── Public API ──────────────────────────────────────────────

    async def replace_series(
        self,
        series: SeriesKey,
        now: datetime,
        candidates: Iterable[datetime],
    ) -> ScheduleOutcome:
        """Replace every pending trigger of ``series`` with ``candidates``.

        Returns a :class:`ScheduleOutcome`; per-item rejections are listed in
        ``failures`` and the already-performed cancellation is kept. Old
        triggers the scheduler would not cancel stay pending and are listed in
        ``cancel_failures``. If the pending set cannot be listed nothing is
        submitted and the outcome is FAILED.
        """
        if not await self.permission_gate.request_permission():
            err = PermissionDenied(series=series.series_id)
            err.log(logging.INFO)
            return ScheduleOutcome(
                series=series,
                status=OutcomeStatus.PERMISSION_REQUIRED,
                reason=err.reason,
            )

        try:
            report = await self._cancel_matching(series)
        except SchedulerRejected as exc:
            exc.context.series = series.series_id
            exc.log()
            return ScheduleOutcome(series=series, status=OutcomeStatus.FAILED, reason=exc.reason)
        cancelled = report.cancelled
        stuck = report.failures

        future = sorted({c for c in candidates if c > now})
        if not future:
            logger.info("No future reminders for %s (cancelled %d)", series, cancelled)
            return ScheduleOutcome(
                series=series,
                status=OutcomeStatus.EMPTY,
                cancel_failures=stuck,
            )

        content = self.tagger.content_for(series)
        scheduled: List[datetime] = []
        failures: List[SubmissionFailure] = []
        for instant in future:
            try:
                await self.scheduler.submit(content, instant)
            except SchedulerRejected as exc:
                exc.context.series = series.series_id
                exc.log()
                failures.append(SubmissionFailure(instant=instant, reason=exc.reason))
                continue
            scheduled.append(instant)

        logger.info(
            "Series %s: cancelled %d (%d refused), scheduled %d, rejected %d",
            series,
            cancelled,
            len(stuck),
            len(scheduled),
            len(failures),
        )
        if not scheduled:
            return ScheduleOutcome(
                series=series,
                status=OutcomeStatus.FAILED,
                failures=failures,
                reason=failures[0].reason,
                cancel_failures=stuck,
            )
        return ScheduleOutcome(
            series=series,
            status=OutcomeStatus.SCHEDULED,
            instants=scheduled,
            failures=failures,
            cancel_failures=stuck,
        )

    async def cancel_all_in_series(self, series: SeriesKey) -> int:
        """Cancel all pending triggers of ``series``; returns how many went.

        Refused cancellations are logged. Use :meth:`cancel_series_until`
        for the per-item report.
        """
        report = await self._cancel_matching(series)
        return report.cancelled

    async def cancel_series_until(
        self,
        series: SeriesKey,
        until: Optional[datetime] = None,
    ) -> CancelReport:
        """Cancel triggers of ``series`` due strictly before ``until`` (all when None)."""
        return await self._cancel_matching(series, until=until)

    async def query_series(self, series: SeriesKey, now: datetime) -> List[PendingTrigger]:
        """Pending triggers of ``series`` after ``now``, earliest first."""
        pending = await self.scheduler.list_pending()
        matches = [
            t for t in pending
            if t.trigger_at > now and self.tagger.belongs_to(t, series)
        ]
        return sorted(matches, key=lambda t: t.trigger_at)

    async def cancel_trigger(self, trigger_id: str) -> bool:
        """Cancel a single trigger by id. Returns False if the scheduler refused."""
        try:
            await self.scheduler.cancel(trigger_id)
        except SchedulerRejected as exc:
            exc.log()
            return False
        return True

    async def cancel_everything(self) -> None:
        await self.scheduler.cancel_all()
        logger.info("All pending reminders cancelled")

    async def pending_snapshot(self) -> List[PendingTrigger]:
        """Every pending trigger, classified or not, earliest first."""
        pending = await self.scheduler.list_pending()
        return sorted(pending, key=lambda t: t.trigger_at)

    # ── Internal ────────────────────────────────────────────────

    async def _cancel_matching(
        self,
        series: SeriesKey,
        *,
        until: Optional[datetime] = None,
    ) -> CancelReport:
        pending = await self.scheduler.list_pending()
        report = CancelReport()
        for trigger in pending:
            if not self.tagger.belongs_to(trigger, series):
                continue
            if until is not None and trigger.trigger_at >= until:
                continue
            try:
                await self.scheduler.cancel(trigger.id)
            except SchedulerRejected as exc:
                exc.context.series = series.series_id
                exc.log()
                report.failures.append(
                    CancelFailure(
                        trigger_id=trigger.id,
                        trigger_at=trigger.trigger_at,
                        reason=exc.reason,
                    )
                )
                continue
            report.cancelled += 1
        if report.cancelled:
            logger.debug("Cancelled %d pending triggers for %s", report.cancelled, series)
        return report
