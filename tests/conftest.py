"""
Pytest configuration and fixtures for the timeblocking generator tests.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

# Add scripts/ to path so we can import timeblock and the entry script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "scripts"))

from timeblock.config import TimeblockConfig  # noqa: E402


# Known weekdays (February 2025)
TUESDAY = date(2025, 2, 4)
SATURDAY = date(2025, 2, 8)
MONDAY = date(2025, 2, 10)


@pytest.fixture
def config():
    """Default config (08:30 open, 13:00 cutoff, 60/60 buffers, 15m break)."""
    return TimeblockConfig()


@pytest.fixture
def one_day_config():
    """Default config restricted to the anchor day only."""
    return TimeblockConfig(days=1)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove env overrides so tests see built-in defaults."""
    for name in ("DJ", "GIGS_URL", "DAYS"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def gig(day: date, time_range: str, **extra) -> dict:
    """Build a minimal gig dict as returned by the gigs API."""
    g = {"date": day.isoformat(), "time": time_range, "venue": "Test Beach Club"}
    g.update(extra)
    return g
