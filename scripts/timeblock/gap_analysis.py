"""Busy windows around gigs and the free morning window they leave.

Per day: each gig grows by the lead/trail buffers into a busy interval,
busy intervals merge, and the morning window runs from window-open until
the first busy interval that matters to the morning (or the fallback
cutoff when nothing does).
"""

from __future__ import annotations

from typing import Any

from .config import TimeblockConfig
from .intervals import (
    Interval,
    clamp,
    clamp_to_day,
    merge_intervals,
    parse_time_range,
    subtract_intervals,
)


def compute_busy_intervals(
    gigs: list[dict[str, Any]],
    config: TimeblockConfig,
) -> list[Interval]:
    """Merged busy intervals for one day's gigs.

    Raises TimeRangeError if any gig's ``time`` does not parse; a partial
    busy set could put a block on top of a real gig.
    """
    busy: list[Interval] = []
    for gig in gigs:
        start, end = parse_time_range(gig["time"])
        busy.append(clamp_to_day(start - config.lead_buffer, end + config.trail_buffer))
    return merge_intervals(busy)


def choose_morning_end(busy: list[Interval], config: TimeblockConfig) -> int:
    """Minute at which the morning window closes.

    The first busy interval that ends after window-open closes the window
    at its start, even when that start is at or before window-open (a gig
    that bridges the opening leaves no morning at all).
    """
    for b in busy:
        if b.end <= config.window_open:
            continue
        return clamp(b.start, 0, config.fallback_cutoff)
    return config.fallback_cutoff


def compute_free_intervals(
    busy: list[Interval],
    config: TimeblockConfig,
    morning_end: int | None = None,
) -> list[Interval]:
    """Free intervals inside the morning window, or [] if it is empty.

    ``morning_end`` defaults to ``choose_morning_end(busy, config)``.
    """
    if morning_end is None:
        morning_end = choose_morning_end(busy, config)
    if morning_end <= config.window_open:
        return []

    available = [Interval(config.window_open, morning_end)]
    return subtract_intervals(available, busy)
