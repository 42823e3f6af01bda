"""Tests for ledger/handoff excerpt parsing."""

from __future__ import annotations

from continuum.continuity.excerpts import (
    EXCERPT_LIMIT,
    NO_FOCUS,
    NO_GOAL,
    NO_SUMMARY,
    parse_document,
    parse_handoff,
    parse_ledger,
)

LEDGER = """\
# Continuity Ledger: auth

## Goal
Migrate the auth service to OAuth2

## State
- [x] Write token exchange
- [x] Add refresh flow
- [->] Wire up logout
- [ ] Update docs
- [ ] Remove legacy sessions
- [ ] Load test
"""

HANDOFF = """\
---
outcome: PARTIAL_PLUS
---
# Handoff: auth migration

## Summary
Token exchange and refresh are done.
Logout still pending.

Second paragraph is not part of the excerpt.

## Next Steps
1. Wire up logout
2. Update docs
- Load test

## Notes
- not a next step
"""


class TestParseDocument:
    def test_sections_are_lowercased(self):
        doc = parse_document("# Title\n## Next Steps\n- a\n")
        assert doc.section("next steps") == ["- a"]

    def test_first_section_wins(self):
        doc = parse_document("## Goal\nfirst\n## Goal\nsecond\n")
        assert doc.section("goal") == ["first"]

    def test_frontmatter_metadata(self):
        doc = parse_document("---\noutcome: FAILED\n---\nbody\n")
        assert doc.metadata == {"outcome": "FAILED"}
        assert [line for line in doc.lines if line.strip()] == ["body"]

    def test_malformed_frontmatter_falls_back_to_raw_text(self):
        doc = parse_document("---\ngoal: [unclosed\n---\n## Goal\nShip it\n")
        assert doc.metadata == {}
        assert doc.section("goal") == ["Ship it"]


class TestParseLedger:
    def test_markers(self):
        ex = parse_ledger(LEDGER)
        assert ex.goal == "Migrate the auth service to OAuth2"
        assert ex.completed_count == 2
        assert ex.remaining_count == 3
        assert ex.current_focus == "Wire up logout"

    def test_now_line(self):
        ex = parse_ledger("## State\n- Done: setup\n- Now: Fix flaky test\n- [ ] ship\n")
        assert ex.current_focus == "Fix flaky test"
        assert ex.remaining_count == 1

    def test_bold_now_line(self):
        ex = parse_ledger("**Now:** Profile the importer\n")
        assert ex.current_focus == "Profile the importer"

    def test_goal_from_frontmatter(self):
        ex = parse_ledger("---\ngoal: Ship v2\n---\n## Goal\nignored\n")
        assert ex.goal == "Ship v2"

    def test_missing_markers_use_placeholders(self):
        ex = parse_ledger("just some notes\n")
        assert ex.goal is None
        assert ex.current_focus is None
        assert ex.goal_text == NO_GOAL
        assert ex.focus_text == NO_FOCUS
        assert ex.completed_count == 0
        assert ex.remaining_count == 0

    def test_goal_is_clipped(self):
        ex = parse_ledger("## Goal\n" + "word " * 200 + "\n")
        assert len(ex.goal) == EXCERPT_LIMIT
        assert ex.goal.endswith("...")


class TestParseHandoff:
    def test_markers(self):
        ex = parse_handoff(HANDOFF)
        assert ex.outcome == "PARTIAL"
        assert ex.summary == "Token exchange and refresh are done. Logout still pending."
        assert ex.next_step_count == 3
        assert ex.completion_percent is None

    def test_outcome_line(self):
        ex = parse_handoff("# Handoff\n**Outcome:** SUCCEEDED\n")
        assert ex.outcome == "SUCCEEDED"

    def test_unrecognized_outcome(self):
        assert parse_handoff("Outcome: maybe\n").outcome == "UNKNOWN"
        assert parse_handoff("no outcome at all\n").outcome == "UNKNOWN"

    def test_status_frontmatter(self):
        assert parse_handoff("---\nstatus: failure\n---\n").outcome == "FAILED"

    def test_completion_line(self):
        assert parse_handoff("Progress: 80% complete\n").completion_percent == 80
        assert parse_handoff("Completion: 45%\n").completion_percent == 45

    def test_completion_frontmatter_clamped(self):
        assert parse_handoff("---\ncompletion: 150\n---\n").completion_percent == 100
        assert parse_handoff('---\ncompletion: "75%"\n---\n').completion_percent == 75

    def test_what_was_done_section(self):
        ex = parse_handoff("## What Was Done\nBuilt the parser.\n")
        assert ex.summary == "Built the parser."

    def test_missing_summary_placeholder(self):
        ex = parse_handoff("# Handoff\n")
        assert ex.summary is None
        assert ex.summary_text == NO_SUMMARY
        assert ex.next_step_count == 0
