"""nourish scheduling engine — offsets, occurrences, tagging and the ledger."""
from nourish.scheduling.hydration import HydrationScheduler, hydration_instants
from nourish.scheduling.ledger import ReminderLedger
from nourish.scheduling.models import (
    CancelFailure,
    CancelReport,
    NotificationContent,
    OutcomeStatus,
    PendingTrigger,
    ScheduleOutcome,
    SeriesKey,
    SubmissionFailure,
)
from nourish.scheduling.occurrence import next_occurrence, occurrence_on
from nourish.scheduling.offsets import OffsetSeries, reminder_offsets
from nourish.scheduling.planner import MealReminderPlanner
from nourish.scheduling.repeat import REPEAT_HORIZON_DAYS, expand_repeating
from nourish.scheduling.tagging import ReminderTagger

__all__ = [
    "HydrationScheduler",
    "hydration_instants",
    "ReminderLedger",
    "CancelFailure",
    "CancelReport",
    "NotificationContent",
    "OutcomeStatus",
    "PendingTrigger",
    "ScheduleOutcome",
    "SeriesKey",
    "SubmissionFailure",
    "next_occurrence",
    "occurrence_on",
    "OffsetSeries",
    "reminder_offsets",
    "MealReminderPlanner",
    "REPEAT_HORIZON_DAYS",
    "expand_repeating",
    "ReminderTagger",
]
