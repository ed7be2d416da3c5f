"""Greedy first-fit placement of prioritised work blocks into free time."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Sequence

from .config import WorkBlock
from .intervals import Interval, minutes_to_hm


@dataclass(frozen=True)
class ScheduledBlock:
    """A work block placed on a specific day."""
    key: str
    title: str
    day: date
    start: int
    end: int

    @property
    def start_hm(self) -> str:
        return minutes_to_hm(self.start)

    @property
    def end_hm(self) -> str:
        return minutes_to_hm(self.end)

    def to_dict(self) -> dict[str, str]:
        return {
            "key": self.key,
            "title": self.title,
            "date": self.day.isoformat(),
            "start": self.start_hm,
            "end": self.end_hm,
        }


def _consume(
    free: tuple[Interval, ...],
    idx: int,
    used_until: int,
) -> tuple[Interval, ...]:
    """New free sequence with ``free[idx]`` trimmed to start at ``used_until``."""
    rest = Interval(used_until, free[idx].end)
    replacement = () if rest.is_empty() else (rest,)
    return free[:idx] + replacement + free[idx + 1:]


def pack_blocks(
    free: Sequence[Interval],
    blocks: Sequence[WorkBlock],
    day: date,
    break_minutes: int,
) -> list[ScheduledBlock]:
    """Place each block, in priority order, at the start of the first free
    interval long enough to hold it.

    A block that fits nowhere is skipped; lower-priority blocks are still
    tried.  Each placement consumes the block plus ``break_minutes`` from
    its interval.  Single pass, no backtracking.
    """
    remaining = tuple(free)
    placed: list[ScheduledBlock] = []

    for blk in blocks:
        for idx, interval in enumerate(remaining):
            if interval.minutes < blk.minutes:
                continue
            end = interval.start + blk.minutes
            placed.append(ScheduledBlock(blk.key, blk.title, day, interval.start, end))
            remaining = _consume(remaining, idx, end + break_minutes)
            break

    return placed
