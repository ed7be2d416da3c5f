"""Minute-of-day interval primitives.

All intervals are half-open ``[start, end)`` minute offsets from midnight
scoped to a single calendar day (0..1440).  Nothing here crosses midnight.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from .config import MINUTES_PER_DAY

_TIME_12H_RE = re.compile(r"^(\d{1,2}):(\d{2})\s*(AM|PM)$", re.IGNORECASE)


class TimeRangeError(ValueError):
    """Raised when a gig's 12-hour clock time range cannot be parsed."""


@dataclass(frozen=True)
class Interval:
    """Half-open span of minutes within one day."""
    start: int
    end: int

    @property
    def minutes(self) -> int:
        return self.end - self.start

    def is_empty(self) -> bool:
        return self.end <= self.start

    def __str__(self) -> str:
        return f"{minutes_to_hm(self.start)}-{minutes_to_hm(self.end)}"


# ---------------------------------------------------------------------------
# Clock conversions
# ---------------------------------------------------------------------------

def parse_time_12h(text: str) -> int:
    """Parse ``"02:45 PM"`` into minutes from midnight (885).

    12:00 AM is midnight (0) and 12:00 PM is noon (720).
    """
    m = _TIME_12H_RE.match(text.strip())
    if not m:
        raise TimeRangeError(f"Bad time: {text}")
    hh = int(m.group(1))
    mm = int(m.group(2))
    if not 1 <= hh <= 12 or mm > 59:
        raise TimeRangeError(f"Bad time: {text}")

    if m.group(3).upper() == "AM":
        if hh == 12:
            hh = 0
    elif hh != 12:
        hh += 12
    return hh * 60 + mm


def parse_time_range(text: str) -> tuple[int, int]:
    """Parse ``"02:45 PM - 06:45 PM"`` into a (start, end) minute pair."""
    if not isinstance(text, str):
        raise TimeRangeError(f"Bad range: {text!r}")
    parts = [p.strip() for p in text.split("-")]
    if len(parts) != 2:
        raise TimeRangeError(f"Bad range: {text}")
    return parse_time_12h(parts[0]), parse_time_12h(parts[1])


def minutes_to_hm(minutes: int) -> str:
    """Format minutes from midnight as zero-padded ``HH:MM``."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def clamp(n: int, low: int, high: int) -> int:
    return max(low, min(high, n))


def clamp_to_day(start: int, end: int) -> Interval:
    """Build an interval with both ends pinned into [0, 1440]."""
    return Interval(clamp(start, 0, MINUTES_PER_DAY), clamp(end, 0, MINUTES_PER_DAY))


# ---------------------------------------------------------------------------
# Set operations
# ---------------------------------------------------------------------------

def merge_intervals(intervals: Iterable[Interval]) -> list[Interval]:
    """Collapse intervals into a sorted, disjoint cover.

    Empty or inverted intervals are dropped first.  Touching intervals
    (one ends exactly where the next starts) are merged.
    """
    ordered = sorted(
        (i for i in intervals if not i.is_empty()),
        key=lambda i: i.start,
    )

    merged: list[Interval] = []
    for interval in ordered:
        if merged and interval.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = Interval(last.start, max(last.end, interval.end))
        else:
            merged.append(interval)
    return merged


def subtract_intervals(
    available: Iterable[Interval],
    busy: list[Interval],
) -> list[Interval]:
    """Remove ``busy`` minutes from ``available``.

    Both inputs must already be merged (sorted and disjoint).  The result
    is sorted, disjoint, and never contains a zero-length interval.
    """
    free: list[Interval] = []
    for avail in available:
        cursor = avail.start
        for b in busy:
            if b.end <= cursor:
                continue
            if b.start >= avail.end:
                break
            if b.start > cursor:
                free.append(Interval(cursor, min(b.start, avail.end)))
            cursor = max(cursor, b.end)
            if cursor >= avail.end:
                break
        if cursor < avail.end:
            free.append(Interval(cursor, avail.end))
    return [i for i in free if not i.is_empty()]
