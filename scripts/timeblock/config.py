"""Shared configuration, defaults, logging, and JSON utilities.

Every tunable the planner uses lives on ``TimeblockConfig`` so tests can
inject their own values instead of patching module constants.
"""

from __future__ import annotations

import json
import os
import re
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Optional
from urllib.parse import quote

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

CONFIG_PATH = Path.home() / ".timeblock" / "config.json"
DEFAULT_OUTPUT_PATH = Path("docs") / "timeblocking.ics"

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MINUTES_PER_DAY = 1440

DEFAULT_DJ = "javi"
GIGS_URL_TEMPLATE = "https://sunsetdjsnew-production.up.railway.app/api/gigs/?dj={dj}"

DEFAULT_TZID = "Asia/Dubai"
DEFAULT_CALENDAR_NAME = "Timeblocking"
DEFAULT_PRODID = "-//JaviBeat//Timeblocking//EN"
DEFAULT_UID_DOMAIN = "javibeat"

# Breakfast runs until the window opens; no afternoon blocks after the cutoff
DEFAULT_WINDOW_OPEN = "08:30"
DEFAULT_FALLBACK_CUTOFF = "13:00"

DEFAULT_LEAD_BUFFER_MINUTES = 60
DEFAULT_TRAIL_BUFFER_MINUTES = 60
DEFAULT_BREAK_MINUTES = 15
DEFAULT_DAYS = 7

# Monday=0 ... Sunday=6 (date.weekday())
DEFAULT_WEEKDAYS = frozenset({0, 1, 2, 3, 4})

_HM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


class ConfigError(ValueError):
    """Raised when a configuration value cannot be used."""


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def _info(msg: str) -> None:
    """Print progress info to stderr."""
    print(f"  {msg}", file=sys.stderr)


def _warn(msg: str) -> None:
    """Print a warning to stderr."""
    print(f"  WARN: {msg}", file=sys.stderr)


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------

def load_json(path: Path) -> Optional[dict[str, Any]]:
    """Read and parse a JSON file, returning None on any failure."""
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return None
    return data if isinstance(data, dict) else None


# ---------------------------------------------------------------------------
# Config types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WorkBlock:
    """A prioritised, fixed-duration unit of work to place each day."""
    key: str
    title: str
    minutes: int


DEFAULT_BLOCKS: tuple[WorkBlock, ...] = (
    WorkBlock("music", "Música (escuchar/descargar)", 30),
    WorkBlock("nibango", "Nibango (deep work)", 90),
    WorkBlock("youtube", "YouTube (vídeo viernes)", 60),
)


def hm_to_minutes(hm: str) -> int:
    """Convert a 24h ``HH:MM`` string to minutes from midnight."""
    m = _HM_RE.match(hm.strip()) if isinstance(hm, str) else None
    if not m:
        raise ConfigError(f"Bad HH:MM time: {hm!r}")
    hh, mm = int(m.group(1)), int(m.group(2))
    if hh > 24 or mm > 59 or (hh == 24 and mm != 0):
        raise ConfigError(f"Bad HH:MM time: {hm!r}")
    return hh * 60 + mm


@dataclass(frozen=True)
class TimeblockConfig:
    """Everything the planner and the calendar writer need to know.

    ``blocks`` order is the priority order.  Times of day are minutes from
    midnight.
    """
    blocks: tuple[WorkBlock, ...] = DEFAULT_BLOCKS
    lead_buffer: int = DEFAULT_LEAD_BUFFER_MINUTES
    trail_buffer: int = DEFAULT_TRAIL_BUFFER_MINUTES
    window_open: int = field(default_factory=lambda: hm_to_minutes(DEFAULT_WINDOW_OPEN))
    fallback_cutoff: int = field(default_factory=lambda: hm_to_minutes(DEFAULT_FALLBACK_CUTOFF))
    break_minutes: int = DEFAULT_BREAK_MINUTES
    weekdays: frozenset[int] = DEFAULT_WEEKDAYS
    days: int = DEFAULT_DAYS
    dj: str = DEFAULT_DJ
    gigs_url: str = ""
    tzid: str = DEFAULT_TZID
    calendar_name: str = DEFAULT_CALENDAR_NAME
    prodid: str = DEFAULT_PRODID
    uid_domain: str = DEFAULT_UID_DOMAIN
    output_path: Path = DEFAULT_OUTPUT_PATH

    def resolved_gigs_url(self) -> str:
        """The explicit gigs URL, or the default API URL for ``dj``."""
        if self.gigs_url:
            return self.gigs_url
        return GIGS_URL_TEMPLATE.format(dj=quote(self.dj, safe=""))

    def validate(self) -> "TimeblockConfig":
        """Raise ConfigError if any value would make planning meaningless."""
        if not self.blocks:
            raise ConfigError("At least one work block is required")
        keys = [b.key for b in self.blocks]
        if len(set(keys)) != len(keys):
            raise ConfigError(f"Duplicate block keys: {keys}")
        for blk in self.blocks:
            if not blk.key or not blk.title:
                raise ConfigError(f"Block needs a key and a title: {blk!r}")
            if blk.minutes <= 0:
                raise ConfigError(f"Block {blk.key!r} must last at least one minute")
        for name in ("lead_buffer", "trail_buffer", "break_minutes"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")
        if not 0 <= self.window_open <= self.fallback_cutoff <= MINUTES_PER_DAY:
            raise ConfigError("Window open must not be after the fallback cutoff")
        if self.days < 0:
            raise ConfigError("days must not be negative")
        if not self.weekdays <= set(range(7)):
            raise ConfigError(f"Weekdays must be 0 (Mon) .. 6 (Sun): {sorted(self.weekdays)}")
        return self


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------

def _parse_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def _parse_blocks(raw: Any) -> tuple[WorkBlock, ...]:
    if not isinstance(raw, list):
        raise ConfigError("blocks must be a list of {key, title, minutes}")
    blocks: list[WorkBlock] = []
    for item in raw:
        if not isinstance(item, dict):
            raise ConfigError(f"Bad block entry: {item!r}")
        blocks.append(WorkBlock(
            key=str(item.get("key", "")),
            title=str(item.get("title", "")),
            minutes=_parse_int(item.get("minutes"), "block minutes"),
        ))
    return tuple(blocks)


def apply_overrides(
    config: TimeblockConfig,
    overrides: Mapping[str, Any],
) -> TimeblockConfig:
    """Return a copy of ``config`` with recognised keys from ``overrides``.

    Accepts the JSON config-file vocabulary: window times as ``HH:MM``
    strings, weekdays as a list of ints, blocks as a list of dicts.
    Unknown keys are ignored with a warning.
    """
    changes: dict[str, Any] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        if key == "blocks":
            changes["blocks"] = _parse_blocks(value)
        elif key in ("window_open", "fallback_cutoff"):
            changes[key] = hm_to_minutes(value) if isinstance(value, str) else _parse_int(value, key)
        elif key in ("lead_buffer", "trail_buffer", "break_minutes", "days"):
            changes[key] = _parse_int(value, key)
        elif key == "weekdays":
            if not isinstance(value, list):
                raise ConfigError("weekdays must be a list of integers")
            changes["weekdays"] = frozenset(_parse_int(v, "weekday") for v in value)
        elif key == "output_path":
            if not isinstance(value, (str, Path)):
                raise ConfigError(f"output_path must be a path string, got {value!r}")
            changes["output_path"] = Path(value)
        elif key in ("dj", "gigs_url", "tzid", "calendar_name", "prodid", "uid_domain"):
            if not isinstance(value, str):
                raise ConfigError(f"{key} must be a string, got {value!r}")
            changes[key] = value
        else:
            _warn(f"Ignoring unknown config key: {key}")
    return replace(config, **changes)


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Collect overrides from DJ, GIGS_URL, and DAYS environment variables."""
    env = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    if env.get("DJ"):
        overrides["dj"] = env["DJ"]
    if env.get("GIGS_URL"):
        overrides["gigs_url"] = env["GIGS_URL"]
    if env.get("DAYS"):
        overrides["days"] = env["DAYS"]
    return overrides


def load_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> TimeblockConfig:
    """Build the effective config: defaults < JSON file < env < CLI flags.

    A missing or unreadable config file is not an error.
    """
    config = TimeblockConfig()

    file_data = load_json(path or CONFIG_PATH)
    if file_data:
        config = apply_overrides(config, file_data)

    config = apply_overrides(config, env_overrides(environ))

    if cli_overrides:
        config = apply_overrides(config, cli_overrides)

    return config.validate()
