"""Error taxonomy and best-effort results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


class ContinuumError(Exception):
    """Base exception for all continuum errors."""


class ValidationError(ContinuumError):
    """Raised on bad caller input, e.g. a missing required field."""


class NotFoundError(ValidationError):
    """Raised when a queue id is not in the pending set."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Task {item_id} not found in queue")


class StorageError(ContinuumError):
    """Raised when a persisted collection cannot be read or written."""

    def __init__(self, path: object, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


@dataclass
class BestEffort(Generic[T]):
    """A value produced by an operation allowed to degrade instead of failing.

    ``errors`` lists what went wrong on the way; the value is then the
    fallback the caller asked for.
    """

    value: T
    errors: list[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.errors)
