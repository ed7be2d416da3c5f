"""Stable UID generation for placed blocks.

Subscribed calendars match events by UID, so the same block on the same
day at the same time must always get the same UID.  Anything derived from
the run (timestamps, list positions) is kept out of it.
"""

from __future__ import annotations

import re

from .block_packer import ScheduledBlock

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9._-]+")


def _slug(text: str) -> str:
    return _UNSAFE_RE.sub("-", text).strip("-") or "x"


def make_block_uid(block: ScheduledBlock, dj: str, domain: str) -> str:
    """Generate a UID for a placed block.

    Format: ``tb-<dj>-<key>-<YYYY-MM-DD>-<HHMM>@<domain>``
    (e.g. ``"tb-javi-music-2025-02-04-0830@javibeat"``).
    """
    hhmm = block.start_hm.replace(":", "")
    return f"tb-{_slug(dj)}-{_slug(block.key)}-{block.day.isoformat()}-{hhmm}@{domain}"
