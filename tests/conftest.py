"""Shared fixtures: a controllable clock and a project rooted in tmp_path."""

from __future__ import annotations

import os
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from continuum.config import ContinuumConfig

# Local noon keeps "same calendar day" arithmetic away from midnight
LOCAL_NOON = datetime.now().astimezone().replace(hour=12, minute=0, second=0, microsecond=0)


class FakeClock:
    def __init__(self, now: datetime = LOCAL_NOON) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def write_doc(path: Path, text: str, modified: datetime) -> Path:
    """Write a document and set its modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    ts = modified.timestamp()
    os.utime(path, (ts, ts))
    return path


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config(tmp_path: Path) -> ContinuumConfig:
    return ContinuumConfig(root=tmp_path)
