"""Persisted collections: whole-document JSON records and document directories.

Every save rewrites the full document. There is no locking, so two processes
writing the same file race and the last writer wins.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from continuum.errors import BestEffort, StorageError

logger = logging.getLogger(__name__)


class JsonDocumentStore:
    """Load/save a single JSON object document."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> BestEffort[dict | None]:
        """Read the document. Missing, unreadable or corrupt files load as None."""
        if not self.path.exists():
            return BestEffort(None)
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Failed to read %s: %s", self.path, e)
            return BestEffort(None, [f"unreadable {self.path.name}: {e}"])
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: top-level value is not an object", self.path)
            return BestEffort(None, [f"malformed {self.path.name}: not an object"])
        return BestEffort(data)

    def save(self, document: dict) -> None:
        """Replace the document on disk, creating parent directories."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(document, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
            )
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(self.path, f"write failed: {e}") from e
        logger.debug("Saved %s", self.path)


@dataclass(frozen=True)
class DocumentInfo:
    """A document file and its last modification time (UTC)."""

    path: Path
    modified: datetime

    def age(self, now: datetime):
        return now - self.modified


def list_documents(directory: Path, pattern: str) -> list[DocumentInfo]:
    """Enumerate files matching ``pattern`` (``**`` recurses). Absent dir ⇒ []."""
    if not directory.is_dir():
        return []
    docs = []
    for path in directory.glob(pattern):
        try:
            if not path.is_file():
                continue
            mtime = path.stat().st_mtime
        except OSError as e:
            logger.debug("Skipping %s: %s", path, e)
            continue
        docs.append(DocumentInfo(path, datetime.fromtimestamp(mtime, tz=timezone.utc)))
    return docs
