"""Widening-interval reminder offsets inside a meal window.

The first reminder lands on the window start, then the gaps double::

    start, +30, +60, +120, +240, ...

so ``08:00–10:00`` yields ``08:00, 08:30, 09:30`` (the next one, 11:30,
falls outside the window).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List

FIRST_GAP_MINUTES = 30


@dataclass(frozen=True)
class OffsetSeries:
    """Lazy, restartable sequence of minute offsets.

    Iterating twice yields the same values; nothing is computed until
    iteration. An ``end`` before ``start`` yields nothing.
    """

    start: int
    end: int
    first_gap: int = FIRST_GAP_MINUTES

    def __iter__(self) -> Iterator[int]:
        t = self.start
        gap = self.first_gap
        while t <= self.end:
            yield t
            t += gap
            gap *= 2

    def to_list(self) -> List[int]:
        return list(self)


def reminder_offsets(start_minute: int, end_minute: int) -> OffsetSeries:
    """Offsets (minutes from midnight) for a window ``[start, end]``."""
    return OffsetSeries(start_minute, end_minute)
