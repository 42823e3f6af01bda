"""Session start/end bookkeeping with a bounded rolling history."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from continuum.errors import BestEffort
from continuum.storage import JsonDocumentStore
from continuum.timeutil import Clock, generate_id, minutes_between, parse_iso, to_iso, utcnow

logger = logging.getLogger(__name__)

MAX_SESSIONS = 50


def _ts(value: str | None) -> datetime | None:
    return parse_iso(value) if value else None


def _iso(value: datetime | None) -> str | None:
    return to_iso(value) if value else None


@dataclass
class SessionRecord:
    id: str | None
    started_at: datetime
    ended_at: datetime
    duration_minutes: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "start": to_iso(self.started_at),
            "end": to_iso(self.ended_at),
            "duration_minutes": self.duration_minutes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionRecord:
        return cls(
            id=data.get("id"),
            started_at=parse_iso(data["start"]),
            ended_at=parse_iso(data["end"]),
            duration_minutes=int(data.get("duration_minutes", 0)),
        )


@dataclass
class SessionState:
    current_session_id: str | None = None
    last_session_start: datetime | None = None
    last_session_end: datetime | None = None
    sessions: list[SessionRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_session_id": self.current_session_id,
            "last_session_start": _iso(self.last_session_start),
            "last_session_end": _iso(self.last_session_end),
            "sessions": [s.to_dict() for s in self.sessions],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionState:
        return cls(
            current_session_id=data.get("current_session_id"),
            last_session_start=_ts(data.get("last_session_start")),
            last_session_end=_ts(data.get("last_session_end")),
            sessions=[SessionRecord.from_dict(s) for s in data.get("sessions", [])],
        )


class SessionTracker:
    """Records session start/end into a small JSON state file."""

    def __init__(self, path: Path, clock: Clock | None = None) -> None:
        self._store = JsonDocumentStore(path)
        self._clock = clock or utcnow

    def load(self) -> BestEffort[SessionState]:
        loaded = self._store.load()
        if loaded.value is None:
            return BestEffort(SessionState(), loaded.errors)
        try:
            return BestEffort(SessionState.from_dict(loaded.value))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Malformed session state, starting over: %s", e)
            return BestEffort(SessionState(), [f"malformed session state: {e}"])

    def start(self) -> SessionState:
        state = self.load().value
        state.current_session_id = generate_id("session")
        state.last_session_start = self._clock()
        self._store.save(state.to_dict())
        logger.info("Session %s started", state.current_session_id)
        return state

    def end(self) -> SessionRecord | None:
        """Close the current session. Without an open session there is nothing to close."""
        state = self.load().value
        if state.current_session_id is None or state.last_session_start is None:
            logger.info("Session end without an open session, skipping")
            return None
        now = self._clock()
        record = SessionRecord(
            id=state.current_session_id,
            started_at=state.last_session_start,
            ended_at=now,
            duration_minutes=minutes_between(state.last_session_start, now),
        )
        state.sessions.append(record)
        # Drop oldest beyond the cap
        state.sessions = state.sessions[-MAX_SESSIONS:]
        state.current_session_id = None
        state.last_session_end = now
        self._store.save(state.to_dict())
        logger.info("Session %s ended after %d min", record.id, record.duration_minutes)
        return record
