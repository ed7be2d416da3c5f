"""iCalendar rendering for the subscribed timeblocking calendar.

The output is "visual only": opaque, confirmed events with no alarms,
bound to one named time zone.  Rendering is deterministic so republishing
unchanged input yields a byte-identical file.
"""

from __future__ import annotations

import os
import tempfile
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Sequence

from .block_packer import ScheduledBlock
from .config import TimeblockConfig
from .id_gen import make_block_uid

CRLF = "\r\n"


def escape_text(text: str) -> str:
    """Escape a TEXT property value (RFC 5545 section 3.3.11)."""
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def format_local(day: date, minutes: int) -> str:
    """``YYYYMMDDTHHMM00`` for a day-scoped local time."""
    return f"{day.strftime('%Y%m%d')}T{minutes // 60:02d}{minutes % 60:02d}00"


def format_dtstamp(stamp: datetime) -> str:
    """UTC ``YYYYMMDDTHHMMSSZ``; naive datetimes are taken as UTC."""
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def default_dtstamp(anchor: date) -> datetime:
    """Midnight UTC of the anchor day, so reruns stamp identically."""
    return datetime.combine(anchor, time.min, tzinfo=timezone.utc)


def build_ics(
    blocks: Sequence[ScheduledBlock],
    config: TimeblockConfig,
    dtstamp: datetime,
) -> str:
    """Render placed blocks as a VCALENDAR document."""
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{config.prodid}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        f"X-WR-CALNAME:{escape_text(config.calendar_name)}",
        f"X-WR-TIMEZONE:{config.tzid}",
    ]

    stamp = format_dtstamp(dtstamp)
    for blk in blocks:
        lines += [
            "BEGIN:VEVENT",
            f"UID:{make_block_uid(blk, config.dj, config.uid_domain)}",
            f"DTSTAMP:{stamp}",
            f"SUMMARY:{escape_text(blk.title)}",
            f"DTSTART;TZID={config.tzid}:{format_local(blk.day, blk.start)}",
            f"DTEND;TZID={config.tzid}:{format_local(blk.day, blk.end)}",
            "STATUS:CONFIRMED",
            "TRANSP:OPAQUE",
            "END:VEVENT",
        ]

    lines.append("END:VCALENDAR")
    return CRLF.join(lines) + CRLF


def write_ics(path: Path, content: str) -> None:
    """Atomically write the calendar (create parent dirs as needed)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
