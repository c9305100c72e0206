"""Meal kinds, time windows and per-meal settings.

A :class:`TimeWindow` is two minute-of-day bounds. The end may be
numerically before the start, in which case the window wraps past
midnight (``22:00–01:00``); :meth:`TimeWindow.normalized_end` returns the
end shifted by one day so callers can generate offsets over a single
increasing range.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Union

from nourish.errors import InvalidWindow

MINUTES_PER_DAY = 24 * 60

_HHMM_RE = re.compile(r"^\s*(\d{1,2})[:\.](\d{2})\s*$")


class MealKind(str, Enum):
    """The fixed set of meals a user is reminded about."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"

    @property
    def label(self) -> str:
        """Display label, also the text marker embedded in notifications."""
        return _LABELS[self]

    @classmethod
    def from_str(cls, value: str) -> MealKind:
        """Parse a meal key or label (case-insensitive)."""
        key = (value or "").strip().lower()
        for member in cls:
            if key in (member.value, member.label.lower()):
                return member
        raise ValueError(f"Unknown meal: {value!r}")


_LABELS: Dict[MealKind, str] = {
    MealKind.BREAKFAST: "Breakfast",
    MealKind.LUNCH: "Lunch",
    MealKind.DINNER: "Dinner",
}


def parse_hhmm(text: str) -> int:
    """Parse ``"HH:MM"`` (or ``"HH.MM"``) into a minute-of-day."""
    m = _HHMM_RE.match(text or "")
    if not m:
        raise InvalidWindow(f"Cannot parse time: {text!r} (expected HH:MM)")
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        raise InvalidWindow(f"Time out of range: {text!r}")
    return hour * 60 + minute


def format_minutes(minute_of_day: int) -> str:
    """Format a minute-of-day as ``HH:MM``."""
    minute_of_day %= MINUTES_PER_DAY
    return f"{minute_of_day // 60:02d}:{minute_of_day % 60:02d}"


@dataclass(frozen=True)
class TimeWindow:
    """Minute-of-day bounds for one meal.

    Both bounds must satisfy ``0 <= value < 1440``.
    """

    start_minute: int
    end_minute: int

    def __post_init__(self) -> None:
        for name in ("start_minute", "end_minute"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidWindow(f"{name} must be an int, got {value!r}")
            if not 0 <= value < MINUTES_PER_DAY:
                raise InvalidWindow(f"{name} out of range [0, 1440): {value}")

    @classmethod
    def from_hhmm(cls, start: str, end: str) -> TimeWindow:
        return cls(parse_hhmm(start), parse_hhmm(end))

    @property
    def wraps_midnight(self) -> bool:
        return self.end_minute < self.start_minute

    def normalized_end(self) -> int:
        """End bound on the same increasing scale as the start.

        Wrapping windows get the end pushed into the next day (``+1440``).
        """
        if self.wraps_midnight:
            return self.end_minute + MINUTES_PER_DAY
        return self.end_minute

    def contains_minute(self, minute_of_day: int) -> bool:
        if self.wraps_midnight:
            return minute_of_day >= self.start_minute or minute_of_day <= self.end_minute
        return self.start_minute <= minute_of_day <= self.end_minute

    def to_dict(self) -> Dict[str, str]:
        return {
            "start": format_minutes(self.start_minute),
            "end": format_minutes(self.end_minute),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TimeWindow:
        return cls.from_hhmm(str(data["start"]), str(data["end"]))

    def __str__(self) -> str:
        return f"{format_minutes(self.start_minute)}–{format_minutes(self.end_minute)}"


DEFAULT_WINDOWS: Dict[MealKind, TimeWindow] = {
    MealKind.BREAKFAST: TimeWindow(8 * 60, 10 * 60),
    MealKind.LUNCH: TimeWindow(12 * 60, 14 * 60),
    MealKind.DINNER: TimeWindow(19 * 60, 21 * 60),
}


@dataclass
class MealSettings:
    """Window and repeat flag for every meal."""

    windows: Dict[MealKind, TimeWindow] = field(
        default_factory=lambda: dict(DEFAULT_WINDOWS)
    )
    repeat: Dict[MealKind, bool] = field(
        default_factory=lambda: {meal: False for meal in MealKind}
    )

    def window_for(self, meal: Union[MealKind, str]) -> TimeWindow:
        return self.windows[MealKind(meal)]

    def repeat_for(self, meal: Union[MealKind, str]) -> bool:
        return self.repeat.get(MealKind(meal), False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            meal.value: {
                "window": self.windows[meal].to_dict(),
                "repeat": self.repeat.get(meal, False),
            }
            for meal in MealKind
        }
