"""Series markers in notification text, and classification back to a series.

The scheduler has no grouping key, so a trigger's series is recovered from
what it round-trips:

1. ``series_id``, when the host scheduler keeps it (structured, exact).
2. Otherwise the title/body text, case-insensitively:

   - containing ``"hydration"`` → hydration, even if a meal label is also
     present ("Reminder: Lunch" + "...hydration..." is hydration);
   - else containing a meal's display label → that meal.

The text rule is a plain substring match, so a label appearing in unrelated
text also matches.
"""
from __future__ import annotations

import logging
from typing import Optional

from nourish.meals import MealKind
from nourish.scheduling.models import NotificationContent, PendingTrigger, SeriesKey

logger = logging.getLogger(__name__)

HYDRATION_KEYWORD = "hydration"

HYDRATION_TITLE = "Hydration Reminder"
HYDRATION_BODY = "This is your periodic water reminder. Stay hydrated!"


class ReminderTagger:
    """Maps series to notification content and pending triggers to series."""

    def __init__(self, *, trust_series_id: bool = True) -> None:
        self.trust_series_id = trust_series_id

    # ── Marking ─────────────────────────────────────────────────

    def content_for(self, series: SeriesKey) -> NotificationContent:
        if series.is_hydration:
            return NotificationContent(
                title=HYDRATION_TITLE,
                body=HYDRATION_BODY,
                series_id=series.series_id,
            )
        label = series.meal.label
        return NotificationContent(
            title=f"Reminder: {label}",
            body=f"It's time for your {label}!",
            series_id=series.series_id,
        )

    # ── Classification ──────────────────────────────────────────

    def classify(self, trigger: PendingTrigger) -> Optional[SeriesKey]:
        if self.trust_series_id and trigger.series_id:
            parsed = SeriesKey.parse(trigger.series_id)
            if parsed is not None:
                return parsed
            logger.debug("Unrecognised series_id %r on %s, using text", trigger.series_id, trigger.id)
        return self.classify_text(trigger.title, trigger.body)

    def classify_text(self, title: str, body: str) -> Optional[SeriesKey]:
        title_l = (title or "").lower()
        body_l = (body or "").lower()
        if HYDRATION_KEYWORD in title_l or HYDRATION_KEYWORD in body_l:
            return SeriesKey.hydration()
        for meal in MealKind:
            label = meal.label.lower()
            if label in title_l or label in body_l:
                return SeriesKey.for_meal(meal)
        return None

    def belongs_to(self, trigger: PendingTrigger, series: SeriesKey) -> bool:
        return self.classify(trigger) == series

    def meal_for_title(self, title: str) -> MealKind:
        """Meal a tapped notification should open; breakfast when none matches."""
        title_l = (title or "").lower()
        for meal in MealKind:
            if meal.label.lower() in title_l:
                return meal
        return MealKind.BREAKFAST
