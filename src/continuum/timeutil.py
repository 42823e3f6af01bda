"""Timestamps, durations and id generation shared by the stores."""

from __future__ import annotations

import math
import random
import time
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, rounded half-up."""
    return round_half_up((end - start).total_seconds() / 60)


def format_duration(minutes: float) -> str:
    minutes = round_half_up(minutes)
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m"


def generate_id(prefix: str) -> str:
    """Non-cryptographic token: epoch milliseconds plus a 3-digit random suffix."""
    return f"{prefix}-{time.time_ns() // 1_000_000}-{random.randint(0, 999):03d}"
