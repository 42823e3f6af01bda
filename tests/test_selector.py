"""Tests for continuity restoration at session start."""

from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import FakeClock, write_doc
from continuum.config import ContinuumConfig
from continuum.continuity.selector import (
    ContinuitySelector,
    RestorationPayload,
    is_new_day,
    latest_continuity_write,
    render_report,
)

LEDGER_TEXT = "## Goal\nShip the importer\n\n- [x] parse\n- [->] validate\n- [ ] load\n"
HANDOFF_TEXT = "---\noutcome: SUCCEEDED\n---\n## Summary\nParser landed.\n\n## Next Steps\n- validate\n"


@pytest.fixture
def selector(config: ContinuumConfig, clock: FakeClock) -> ContinuitySelector:
    return ContinuitySelector(config, clock)


def add_ledger(config: ContinuumConfig, clock: FakeClock, age: timedelta, name="CONTINUITY_CLAUDE-auth.md"):
    return write_doc(config.ledger_dir / name, LEDGER_TEXT, clock() - age)


def add_handoff(config: ContinuumConfig, clock: FakeClock, age: timedelta, name="task-01.md"):
    return write_doc(config.handoff_dir / "auth" / name, HANDOFF_TEXT, clock() - age)


class TestIsNewDay:
    def test_unknown_previous_start(self, clock: FakeClock):
        assert is_new_day(None, clock())

    def test_same_day(self, clock: FakeClock):
        assert not is_new_day(clock() - timedelta(hours=3), clock())

    def test_previous_day(self, clock: FakeClock):
        assert is_new_day(clock() - timedelta(days=1), clock())


class TestSelect:
    def test_same_day_with_ledger_skips_handoff(self, selector, config, clock):
        add_ledger(config, clock, timedelta(hours=2))
        add_handoff(config, clock, timedelta(hours=1))

        result = selector.select(clock() - timedelta(minutes=30))
        payload = result.value
        assert payload.ledger is not None
        assert payload.ledger.excerpt.goal == "Ship the importer"
        assert payload.handoff is None
        assert not result.degraded

    def test_no_ledger_loads_recent_handoff(self, selector, config, clock):
        add_handoff(config, clock, timedelta(days=3))

        payload = selector.select(clock() - timedelta(minutes=30)).value
        assert payload.ledger is None
        assert payload.handoff is not None
        assert payload.handoff.excerpt.outcome == "SUCCEEDED"
        assert payload.handoff.excerpt.next_step_count == 1

    def test_stale_handoff_is_not_loaded(self, selector, config, clock):
        add_handoff(config, clock, timedelta(days=10))

        payload = selector.select(clock() - timedelta(days=2)).value
        assert payload.fresh_start

    def test_new_day_loads_both(self, selector, config, clock):
        add_ledger(config, clock, timedelta(hours=2))
        add_handoff(config, clock, timedelta(hours=20))

        payload = selector.select(clock() - timedelta(days=1)).value
        assert payload.ledger is not None
        assert payload.handoff is not None

    def test_first_session_counts_as_new_day(self, selector, config, clock):
        add_ledger(config, clock, timedelta(hours=2))
        add_handoff(config, clock, timedelta(hours=1))

        payload = selector.select(None).value
        assert payload.ledger is not None
        assert payload.handoff is not None

    def test_ledger_older_than_ceiling_falls_back_to_handoff(self, selector, config, clock):
        add_ledger(config, clock, timedelta(hours=25))
        add_handoff(config, clock, timedelta(hours=26))

        payload = selector.select(clock() - timedelta(minutes=5)).value
        assert payload.ledger is None
        assert payload.handoff is not None

    def test_freshest_ledger_wins(self, selector, config, clock):
        add_ledger(config, clock, timedelta(hours=5), name="CONTINUITY_CLAUDE-old.md")
        add_ledger(config, clock, timedelta(hours=1), name="CONTINUITY_CLAUDE-new.md")

        payload = selector.select(clock()).value
        assert payload.ledger.path.name == "CONTINUITY_CLAUDE-new.md"
        assert payload.ledger.age == timedelta(hours=1)

    def test_newest_handoff_wins(self, selector, config, clock):
        add_handoff(config, clock, timedelta(days=2), name="task-01.md")
        add_handoff(config, clock, timedelta(days=1), name="task-02.md")

        payload = selector.select(None).value
        assert payload.handoff.path.name == "task-02.md"

    def test_ledger_pattern_is_respected(self, selector, config, clock):
        write_doc(config.ledger_dir / "scratch.md", LEDGER_TEXT, clock() - timedelta(minutes=1))

        assert selector.select(clock()).value.ledger is None

    def test_ledger_toggle_off(self, config, clock):
        config.continuity.auto_load_ledger = False
        add_ledger(config, clock, timedelta(hours=1))
        add_handoff(config, clock, timedelta(hours=2))

        payload = ContinuitySelector(config, clock).select(clock()).value
        assert payload.ledger is None
        assert payload.handoff is not None

    def test_handoff_toggle_off(self, config, clock):
        config.continuity.auto_load_handoff = False
        add_handoff(config, clock, timedelta(hours=2))

        assert ContinuitySelector(config, clock).select(None).value.fresh_start

    def test_unreadable_ledger_degrades(self, selector, config, clock):
        path = config.ledger_dir / "CONTINUITY_CLAUDE-bad.md"
        path.parent.mkdir(parents=True)
        path.write_bytes(b"\xff\xfe\xfa not utf-8")
        add_handoff(config, clock, timedelta(hours=1))

        result = selector.select(clock())
        assert result.degraded
        assert result.value.ledger is None
        # No ledger loaded, so the handoff is considered even on the same day
        assert result.value.handoff is not None

    def test_missing_directories(self, selector, clock):
        result = selector.select(clock())
        assert result.value.fresh_start
        assert not result.degraded


class TestLatestContinuityWrite:
    def test_newest_across_both_dirs(self, config, clock):
        add_ledger(config, clock, timedelta(hours=3))
        handoff = add_handoff(config, clock, timedelta(minutes=10))
        assert latest_continuity_write(config).path == handoff

    def test_none(self, config):
        assert latest_continuity_write(config) is None


class TestRenderReport:
    def test_fresh_start(self):
        assert "Starting fresh" in render_report(RestorationPayload())

    def test_ledger_and_handoff(self, selector, config, clock):
        add_ledger(config, clock, timedelta(hours=2))
        add_handoff(config, clock, timedelta(hours=1))
        report = render_report(selector.select(None).value)
        assert "Goal: Ship the importer" in report
        assert "Now: validate" in report
        assert "1 done, 1 remaining" in report
        assert "Outcome: SUCCEEDED (n/a complete)" in report
        assert "Summary: Parser landed." in report
