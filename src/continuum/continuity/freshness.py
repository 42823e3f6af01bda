"""Pick the freshest documents from a directory under an age ceiling."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

from continuum.storage import DocumentInfo, list_documents
from continuum.timeutil import utcnow


def find_fresh(
    directory: Path,
    pattern: str,
    max_age: timedelta,
    *,
    limit: int | None = None,
    now: datetime | None = None,
) -> list[DocumentInfo]:
    """Documents younger than ``max_age``, freshest first, at most ``limit``."""
    now = now or utcnow()
    fresh = [doc for doc in list_documents(directory, pattern) if doc.age(now) < max_age]
    fresh.sort(key=lambda doc: doc.modified, reverse=True)
    if limit is not None:
        fresh = fresh[:limit]
    return fresh


def find_newest(directory: Path, pattern: str) -> DocumentInfo | None:
    """The most recently modified document, regardless of age."""
    docs = list_documents(directory, pattern)
    if not docs:
        return None
    return max(docs, key=lambda doc: doc.modified)
