"""Gigs API fetch and grouping of gigs by calendar day.

The API returns ``{"server_date": "YYYY-MM-DD", "gigs": [...]}`` where each
gig carries at least ``date`` (YYYY-MM-DD) and ``time``
(``"HH:MM AM/PM - HH:MM AM/PM"``).  Other gig fields are passed through
untouched.
"""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from .config import _warn

FETCH_TIMEOUT_SECONDS = 30

# Characters of an error response body quoted in GigFetchError
_BODY_SNIPPET_CHARS = 300


class GigFetchError(RuntimeError):
    """Raised when the gigs document cannot be fetched or understood."""


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class GigFeed:
    """Parsed gigs document."""
    server_date: date | None = None
    gigs: list[dict[str, Any]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def fetch_gigs(url: str, timeout: float = FETCH_TIMEOUT_SECONDS) -> GigFeed:
    """Fetch and parse the gigs document at ``url``.

    Raises GigFetchError on transport errors, non-2xx responses, and
    bodies that are not a JSON object.
    """
    return parse_feed(_fetch_json(url, timeout))


def parse_feed(data: Any) -> GigFeed:
    """Turn a decoded gigs document into a GigFeed.

    A missing or non-list ``gigs`` is treated as no gigs.  A missing or
    malformed ``server_date`` leaves ``server_date`` as None.
    """
    if not isinstance(data, dict):
        raise GigFetchError(f"Expected a JSON object, got {type(data).__name__}")

    feed = GigFeed()
    raw_date = data.get("server_date")
    if raw_date is not None:
        feed.server_date = _parse_ymd(raw_date)
        if feed.server_date is None:
            _warn(f"Ignoring malformed server_date: {raw_date!r}")

    gigs = data.get("gigs")
    if isinstance(gigs, list):
        feed.gigs = [g for g in gigs if isinstance(g, dict)]
    return feed


def group_by_day(gigs: list[dict[str, Any]]) -> dict[date, list[dict[str, Any]]]:
    """Bucket gigs by their ``date``.

    Gigs without a usable ``date``, or without a non-empty ``time``
    string, are skipped.  The time range itself (blank included) is
    validated later, where a bad one aborts the run.
    """
    by_day: dict[date, list[dict[str, Any]]] = {}
    for gig in gigs:
        day = _parse_ymd(gig.get("date"))
        time_range = gig.get("time")
        if day is None or not isinstance(time_range, str) or not time_range:
            _warn(f"Skipping gig without usable date/time: {gig.get('date')!r} {time_range!r}")
            continue
        by_day.setdefault(day, []).append(gig)
    return by_day


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

def _fetch_json(url: str, timeout: float) -> Any:
    request = urllib.request.Request(url, headers={"Accept": "application/json"})
    try:
        with urllib.request.urlopen(request, timeout=timeout) as resp:
            body = resp.read().decode("utf-8", errors="replace")
            status = resp.status
    except urllib.error.HTTPError as exc:
        body = exc.read().decode("utf-8", errors="replace") if exc.fp else ""
        raise GigFetchError(f"HTTP {exc.code}: {body[:_BODY_SNIPPET_CHARS]}") from exc
    except (urllib.error.URLError, TimeoutError, OSError) as exc:
        raise GigFetchError(f"Could not reach {url}: {exc}") from exc

    if not 200 <= status < 300:
        raise GigFetchError(f"HTTP {status}: {body[:_BODY_SNIPPET_CHARS]}")

    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise GigFetchError(f"Invalid JSON from {url}: {exc}") from exc


def _parse_ymd(value: Any) -> date | None:
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None
