#!/usr/bin/env python3
"""Generate the timeblocking calendar from the Sunset DJs gigs API.

Writes a "visual-only" subscribed calendar of morning focus blocks that
avoid every gig plus a buffer on each side.  The gigs themselves are not
included.

Operations performed:
    1. Resolve config (defaults, ~/.timeblock/config.json, env, flags)
    2. Fetch the gigs document and bucket gigs by day
    3. For each Mon-Fri day in the horizon, pack blocks into the morning
    4. Render the iCalendar text and write it atomically

Usage:
    python3 generate_timeblocking.py [--url URL] [--dj NAME] [--days N]
                                     [--today YYYY-MM-DD] [--output PATH]
                                     [--config PATH] [--json] [--verbose]

Exit codes:
    0  Success
    1  Fatal error (fetch failure, bad gig time, bad config, I/O failure)
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any, Optional, Sequence

from timeblock.config import ConfigError, load_config, _info
from timeblock.day_selector import DayPlan, flatten_blocks, plan_days
from timeblock.gig_fetch import GigFetchError, fetch_gigs, group_by_day
from timeblock.ics_writer import build_ics, default_dtstamp, write_ics
from timeblock.intervals import Interval, TimeRangeError, minutes_to_hm


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate the morning timeblocking calendar (.ics) from gigs",
    )
    parser.add_argument("--url", help="Gigs API URL (default: built from --dj)")
    parser.add_argument("--dj", help="DJ whose gigs to avoid (default: javi)")
    parser.add_argument("--days", type=int, help="Days to project forward (default: 7)")
    parser.add_argument(
        "--today",
        type=date.fromisoformat,
        help="Anchor day YYYY-MM-DD (default: the API's server_date)",
    )
    parser.add_argument("--output", "-o", help="Output .ics path (default: docs/timeblocking.ics)")
    parser.add_argument("--config", type=Path, help="JSON config file (default: ~/.timeblock/config.json)")
    parser.add_argument("--json", action="store_true", help="Also print planned blocks as JSON to stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show tracebacks on failure")
    return parser.parse_args(argv)


def _describe(intervals: list[Interval]) -> str:
    return ", ".join(str(i) for i in intervals) or "none"


def _log_day(plan: DayPlan, window_open: int) -> None:
    label = f"{plan.day.isoformat()} ({plan.day.strftime('%a')})"
    if plan.morning_end <= window_open:
        _info(f"{label}: busy {_describe(plan.busy)} -> no morning window")
        return
    _info(
        f"{label}: window {minutes_to_hm(window_open)}-{minutes_to_hm(plan.morning_end)}, "
        f"free {_describe(plan.free)}"
    )
    for blk in plan.blocks:
        _info(f"    {blk.start_hm}-{blk.end_hm}  {blk.title}")


def run(args: argparse.Namespace) -> int:
    cli_overrides: dict[str, Any] = {
        "gigs_url": args.url,
        "dj": args.dj,
        "days": args.days,
        "output_path": args.output,
    }
    config = load_config(path=args.config, cli_overrides=cli_overrides)

    url = config.resolved_gigs_url()
    _info(f"Fetching gigs: {url}")
    feed = fetch_gigs(url)

    anchor = args.today or feed.server_date
    if anchor is None:
        raise GigFetchError("Gigs document has no usable server_date; pass --today")

    gigs_by_day = group_by_day(feed.gigs)
    _info(f"Anchor day: {anchor.isoformat()} ({anchor.strftime('%A')}), {len(feed.gigs)} gigs")

    plans = plan_days(anchor, gigs_by_day, config)
    for plan in plans:
        _log_day(plan, config.window_open)

    blocks = flatten_blocks(plans)
    ics = build_ics(blocks, config, default_dtstamp(anchor))
    write_ics(config.output_path, ics)

    if args.json:
        json.dump([blk.to_dict() for blk in blocks], sys.stdout, indent=2, ensure_ascii=False)
        sys.stdout.write("\n")

    _info(f"Generated {len(blocks)} events into {config.output_path}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point. Diagnostics go to stderr; --json output to stdout."""
    args = _parse_args(argv)
    try:
        return run(args)
    except (GigFetchError, TimeRangeError, ConfigError, OSError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
