"""Weekday projection and per-day planning.

Days advance by pure calendar arithmetic on ``date`` objects, so the
weekday of a YYYY-MM-DD never depends on the local wall-clock zone.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Mapping, Sequence

from .block_packer import ScheduledBlock, pack_blocks
from .config import TimeblockConfig
from .gap_analysis import choose_morning_end, compute_busy_intervals, compute_free_intervals
from .intervals import Interval


@dataclass
class DayPlan:
    """Intermediate and final results of planning one day."""
    day: date
    busy: list[Interval] = field(default_factory=list)
    morning_end: int = 0
    free: list[Interval] = field(default_factory=list)
    blocks: list[ScheduledBlock] = field(default_factory=list)


def is_included_weekday(day: date, config: TimeblockConfig) -> bool:
    return day.weekday() in config.weekdays


def project_days(anchor: date, config: TimeblockConfig) -> list[date]:
    """The included days among ``anchor`` and the following days-1 days."""
    days = (anchor + timedelta(days=offset) for offset in range(config.days))
    return [d for d in days if is_included_weekday(d, config)]


def plan_day(
    day: date,
    gigs: list[dict[str, Any]],
    config: TimeblockConfig,
) -> DayPlan:
    """Busy windows -> morning window -> free time -> placed blocks."""
    busy = compute_busy_intervals(gigs, config)
    morning_end = choose_morning_end(busy, config)
    free = compute_free_intervals(busy, config, morning_end)
    return DayPlan(
        day=day,
        busy=busy,
        morning_end=morning_end,
        free=free,
        blocks=pack_blocks(free, config.blocks, day, config.break_minutes),
    )


def plan_days(
    anchor: date,
    gigs_by_day: Mapping[date, list[dict[str, Any]]],
    config: TimeblockConfig,
) -> list[DayPlan]:
    """Plan every included day in the horizon, in day order.

    Raises TimeRangeError from the first day whose gigs have an
    unparseable time range; no plans are returned in that case.
    """
    return [
        plan_day(day, gigs_by_day.get(day, []), config)
        for day in project_days(anchor, config)
    ]


def plan_schedule(
    anchor: date,
    gigs_by_day: Mapping[date, list[dict[str, Any]]],
    config: TimeblockConfig,
) -> list[ScheduledBlock]:
    """All placed blocks for the horizon, in day then placement order."""
    return flatten_blocks(plan_days(anchor, gigs_by_day, config))


def flatten_blocks(plans: Sequence[DayPlan]) -> list[ScheduledBlock]:
    """Placed blocks of ``plans``, in day then placement order."""
    return [blk for plan in plans for blk in plan.blocks]
