"""Continuity restoration: choose which ledger/handoff to reload at session start.

Two independently gated stages:

1. Ledger: freshest ledger under ``ledger_max_age_hours``.
2. Handoff: only considered when the previous session started on another
   calendar day, or when stage 1 loaded nothing. The newest handoff is taken
   with no ceiling and then dropped if older than ``handoff_max_age_days``.

A same-day session with a live ledger never re-surfaces a handoff.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING

from continuum.continuity.excerpts import HandoffExcerpt, LedgerExcerpt, parse_handoff, parse_ledger
from continuum.continuity.freshness import find_fresh, find_newest
from continuum.errors import BestEffort
from continuum.storage import DocumentInfo
from continuum.timeutil import Clock, format_duration, utcnow

if TYPE_CHECKING:
    from continuum.config import ContinuumConfig

logger = logging.getLogger(__name__)


@dataclass
class LoadedLedger:
    path: Path
    age: timedelta
    excerpt: LedgerExcerpt


@dataclass
class LoadedHandoff:
    path: Path
    age: timedelta
    excerpt: HandoffExcerpt


@dataclass
class RestorationPayload:
    """What was restored. Neither part present means a fresh start."""

    ledger: LoadedLedger | None = None
    handoff: LoadedHandoff | None = None

    @property
    def fresh_start(self) -> bool:
        return self.ledger is None and self.handoff is None


def is_new_day(previous_start: datetime | None, now: datetime) -> bool:
    """True when ``previous_start`` falls on another local calendar day (or is unknown)."""
    if previous_start is None:
        return True
    return previous_start.astimezone().date() != now.astimezone().date()


class ContinuitySelector:
    """Selects the restoration payload from the ledger and handoff directories."""

    def __init__(self, config: ContinuumConfig, clock: Clock | None = None) -> None:
        self.config = config
        self._clock = clock or utcnow

    def select(self, previous_session_start: datetime | None = None) -> BestEffort[RestorationPayload]:
        now = self._clock()
        settings = self.config.continuity
        payload = RestorationPayload()
        errors: list[str] = []

        if settings.auto_load_ledger:
            payload.ledger = self._load_ledger(now, errors)

        if settings.auto_load_handoff and (
            is_new_day(previous_session_start, now) or payload.ledger is None
        ):
            payload.handoff = self._load_handoff(now, errors)

        if payload.fresh_start:
            logger.info("No continuity documents to restore, fresh start")
        return BestEffort(payload, errors)

    def _load_ledger(self, now: datetime, errors: list[str]) -> LoadedLedger | None:
        settings = self.config.continuity
        matches = find_fresh(
            self.config.ledger_dir,
            settings.ledger_pattern,
            timedelta(hours=settings.ledger_max_age_hours),
            limit=1,
            now=now,
        )
        if not matches:
            return None
        doc = matches[0]
        text = _read_text(doc, errors)
        if text is None:
            return None
        logger.info("Restoring ledger %s", doc.path.name)
        return LoadedLedger(doc.path, doc.age(now), parse_ledger(text))

    def _load_handoff(self, now: datetime, errors: list[str]) -> LoadedHandoff | None:
        settings = self.config.continuity
        doc = find_newest(self.config.handoff_dir, settings.handoff_pattern)
        if doc is None:
            return None
        if doc.age(now) > timedelta(days=settings.handoff_max_age_days):
            logger.info("Newest handoff %s is stale, skipping", doc.path.name)
            return None
        text = _read_text(doc, errors)
        if text is None:
            return None
        logger.info("Restoring handoff %s", doc.path.name)
        return LoadedHandoff(doc.path, doc.age(now), parse_handoff(text))


def _read_text(doc: DocumentInfo, errors: list[str]) -> str | None:
    try:
        return doc.path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read %s: %s", doc.path, e)
        errors.append(f"unreadable {doc.path.name}: {e}")
        return None


def latest_continuity_write(config: ContinuumConfig) -> DocumentInfo | None:
    """Newest ledger or handoff document, regardless of age."""
    candidates = [
        find_newest(config.ledger_dir, config.continuity.ledger_pattern),
        find_newest(config.handoff_dir, config.continuity.handoff_pattern),
    ]
    candidates = [c for c in candidates if c is not None]
    return max(candidates, key=lambda doc: doc.modified) if candidates else None


def _age_text(age: timedelta) -> str:
    return format_duration(max(age.total_seconds(), 0) / 60) + " ago"


def render_report(payload: RestorationPayload) -> str:
    """Human-readable restoration report for the session start console."""
    if payload.fresh_start:
        return "No recent ledger or handoff found. Starting fresh."

    lines: list[str] = []
    if payload.ledger:
        ledger = payload.ledger
        ex = ledger.excerpt
        lines += [
            f"Ledger: {ledger.path.name} (updated {_age_text(ledger.age)})",
            f"  Goal: {ex.goal_text}",
            f"  Now: {ex.focus_text}",
            f"  Progress: {ex.completed_count} done, {ex.remaining_count} remaining",
        ]
    if payload.handoff:
        handoff = payload.handoff
        ex = handoff.excerpt
        completion = f"{ex.completion_percent}%" if ex.completion_percent is not None else "n/a"
        if lines:
            lines.append("")
        lines += [
            f"Handoff: {handoff.path.name} (written {_age_text(handoff.age)})",
            f"  Outcome: {ex.outcome} ({completion} complete)",
            f"  Summary: {ex.summary_text}",
            f"  Next steps: {ex.next_step_count}",
        ]
    return "\n".join(lines)
