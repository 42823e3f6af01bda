"""Tests for timestamp helpers."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from continuum.timeutil import format_duration, generate_id, minutes_between, parse_iso, to_iso


class TestTimeutil:
    def test_iso_round_trip(self):
        ts = datetime(2026, 3, 1, 9, 30, 15, 123000, tzinfo=timezone.utc)
        assert to_iso(ts) == "2026-03-01T09:30:15.123Z"
        assert parse_iso(to_iso(ts)) == ts

    def test_naive_timestamps_are_utc(self):
        assert parse_iso("2026-03-01T09:30:00").tzinfo is not None

    def test_minutes_between_rounds_half_up(self):
        start = datetime(2026, 3, 1, tzinfo=timezone.utc)
        assert minutes_between(start, start + timedelta(seconds=29)) == 0
        assert minutes_between(start, start + timedelta(seconds=30)) == 1
        assert minutes_between(start, start + timedelta(minutes=2, seconds=30)) == 3

    def test_format_duration(self):
        assert format_duration(0) == "0 min"
        assert format_duration(59) == "59 min"
        assert format_duration(60) == "1h 0m"
        assert format_duration(135) == "2h 15m"
        assert format_duration(12.5) == "13 min"
        assert format_duration(89.5) == "1h 30m"

    def test_generate_id(self):
        assert re.fullmatch(r"review-\d{13}-\d{3}", generate_id("review"))
