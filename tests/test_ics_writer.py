"""Tests for iCalendar rendering, stable UIDs, and file writing."""

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

from timeblock.block_packer import ScheduledBlock
from timeblock.day_selector import plan_schedule
from timeblock.ics_writer import (
    build_ics,
    default_dtstamp,
    escape_text,
    format_dtstamp,
    format_local,
    write_ics,
)
from timeblock.id_gen import make_block_uid

from conftest import TUESDAY, gig

STAMP = default_dtstamp(TUESDAY)


def _block(**overrides):
    fields = dict(key="music", title="Música (escuchar/descargar)", day=TUESDAY, start=510, end=540)
    fields.update(overrides)
    return ScheduledBlock(**fields)


class TestUid:
    def test_format(self):
        assert make_block_uid(_block(), "javi", "javibeat") == "tb-javi-music-2025-02-04-0830@javibeat"

    def test_unique_across_key_day_start(self):
        uids = {
            make_block_uid(_block(), "javi", "d"),
            make_block_uid(_block(key="nibango"), "javi", "d"),
            make_block_uid(_block(day=TUESDAY + timedelta(days=1)), "javi", "d"),
            make_block_uid(_block(start=555, end=585), "javi", "d"),
        }
        assert len(uids) == 4

    def test_title_does_not_affect_uid(self):
        assert make_block_uid(_block(title="Other"), "javi", "d") == make_block_uid(_block(), "javi", "d")

    def test_unsafe_characters_slugged(self):
        assert make_block_uid(_block(key="deep work"), "dj x", "d") == "tb-dj-x-deep-work-2025-02-04-0830@d"


class TestFormatting:
    def test_format_local(self):
        assert format_local(date(2025, 2, 4), 555) == "20250204T091500"

    def test_default_dtstamp_is_anchor_midnight_utc(self):
        assert format_dtstamp(STAMP) == "20250204T000000Z"

    def test_dtstamp_converted_to_utc(self):
        dubai = timezone(timedelta(hours=4))
        assert format_dtstamp(datetime(2025, 2, 4, 8, 30, tzinfo=dubai)) == "20250204T043000Z"

    def test_naive_dtstamp_taken_as_utc(self):
        assert format_dtstamp(datetime(2025, 2, 4, 8, 30)) == "20250204T083000Z"

    def test_escape_text(self):
        assert escape_text("a,b;c\\d\ne") == "a\\,b\\;c\\\\d\\ne"
        assert escape_text("Nibango (deep work)") == "Nibango (deep work)"


class TestBuildIcs:
    def test_empty_calendar(self, config):
        ics = build_ics([], config, STAMP)
        assert ics == (
            "BEGIN:VCALENDAR\r\n"
            "VERSION:2.0\r\n"
            "PRODID:-//JaviBeat//Timeblocking//EN\r\n"
            "CALSCALE:GREGORIAN\r\n"
            "METHOD:PUBLISH\r\n"
            "X-WR-CALNAME:Timeblocking\r\n"
            "X-WR-TIMEZONE:Asia/Dubai\r\n"
            "END:VCALENDAR\r\n"
        )

    def test_event_fields_in_order(self, config):
        ics = build_ics([_block()], config, STAMP)
        lines = ics.split("\r\n")
        start = lines.index("BEGIN:VEVENT")
        assert lines[start:start + 9] == [
            "BEGIN:VEVENT",
            "UID:tb-javi-music-2025-02-04-0830@javibeat",
            "DTSTAMP:20250204T000000Z",
            "SUMMARY:Música (escuchar/descargar)",
            "DTSTART;TZID=Asia/Dubai:20250204T083000",
            "DTEND;TZID=Asia/Dubai:20250204T090000",
            "STATUS:CONFIRMED",
            "TRANSP:OPAQUE",
            "END:VEVENT",
        ]
        assert ics.endswith("END:VCALENDAR\r\n")

    def test_config_drives_header_and_zone(self, config):
        cfg = replace(config, tzid="Europe/Madrid", calendar_name="Focus", prodid="-//X//Y//EN")
        ics = build_ics([_block()], cfg, STAMP)
        assert "PRODID:-//X//Y//EN\r\n" in ics
        assert "X-WR-CALNAME:Focus\r\n" in ics
        assert "DTSTART;TZID=Europe/Madrid:20250204T083000\r\n" in ics

    def test_regeneration_is_byte_identical(self, config):
        gigs = {TUESDAY: [gig(TUESDAY, "10:00 AM - 02:00 PM")]}
        first = build_ics(plan_schedule(TUESDAY, gigs, config), config, default_dtstamp(TUESDAY))
        second = build_ics(plan_schedule(TUESDAY, gigs, config), config, default_dtstamp(TUESDAY))
        assert first.encode("utf-8") == second.encode("utf-8")
        uids = [line for line in first.split("\r\n") if line.startswith("UID:")]
        assert len(uids) == len(set(uids)) > 0


class TestWriteIcs:
    def test_creates_parent_dirs_and_keeps_crlf(self, tmp_path, config):
        out = tmp_path / "docs" / "timeblocking.ics"
        content = build_ics([_block()], config, STAMP)
        write_ics(out, content)
        assert out.read_bytes() == content.encode("utf-8")
        assert b"\r\n" in out.read_bytes()

    def test_overwrites_and_leaves_no_temp_files(self, tmp_path):
        out = tmp_path / "cal.ics"
        out.write_text("old")
        write_ics(out, "new\r\n")
        assert out.read_bytes() == b"new\r\n"
        assert [p.name for p in tmp_path.iterdir()] == ["cal.ics"]
