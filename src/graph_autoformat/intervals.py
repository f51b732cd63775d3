"""Sweep-line interval structure for max-bottom-y queries over x-ranges.

Used by the y-pass (row placement) and by island collision resolution.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass


@dataclass(frozen=True)
class Interval:
    """A placed footprint: half-open x-range ``[x_start, x_end)`` ending at ``bottom_y``."""

    x_start: float
    x_end: float
    bottom_y: float


class IntervalStructure:
    """Intervals kept sorted by ``x_start``.

    A query scans from the left and stops at the first interval starting at or
    beyond the queried range, so only candidates that can overlap are checked.
    """

    def __init__(self, base_bottom_y: float = float("-inf")) -> None:
        self.base_bottom_y = base_bottom_y
        self._intervals: list[Interval] = []
        self._starts: list[float] = []

    def __len__(self) -> int:
        return len(self._intervals)

    def insert(self, x_start: float, x_end: float, bottom_y: float) -> None:
        # After any intervals with an equal start.
        i = bisect.bisect_right(self._starts, x_start)
        self._starts.insert(i, x_start)
        self._intervals.insert(i, Interval(x_start, x_end, bottom_y))

    def query_max_bottom_y(self, x_start: float, x_end: float) -> float:
        """Max ``bottom_y`` over intervals overlapping ``[x_start, x_end)``, else the base."""
        best = self.base_bottom_y
        for iv in self._intervals:
            if iv.x_start >= x_end:
                break
            if iv.x_end > x_start and iv.bottom_y > best:
                best = iv.bottom_y
        return best
