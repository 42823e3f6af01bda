"""Review queue records and their on-disk (camelCase JSON) representation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from continuum.timeutil import parse_iso, to_iso

STORE_VERSION = "2026-v1.0"

PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}
PRIORITIES = tuple(PRIORITY_RANK)

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"


def priority_rank(priority: str) -> int:
    # Unknown priorities from hand-edited files sort last
    return PRIORITY_RANK.get(priority, len(PRIORITY_RANK))


@dataclass
class QueueItem:
    """A task waiting for a human decision."""

    id: str
    task: str
    created_at: datetime
    priority: str = "medium"
    type: str = "general"
    confidence_score: int = 50
    plan_file: str | None = None
    uncertainty_reasons: list[str] = field(default_factory=list)
    blocked_tasks: list[str] = field(default_factory=list)
    estimated_review_time: str = "15 min"
    status: str = PENDING

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "priority": self.priority,
            "type": self.type,
            "task": self.task,
            "confidenceScore": self.confidence_score,
            "createdAt": to_iso(self.created_at),
            "planFile": self.plan_file,
            "uncertaintyReasons": list(self.uncertainty_reasons),
            "blockedTasks": list(self.blocked_tasks),
            "estimatedReviewTime": self.estimated_review_time,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QueueItem:
        return cls(
            id=data["id"],
            task=data.get("task", ""),
            created_at=parse_iso(data["createdAt"]),
            priority=data.get("priority", "medium"),
            type=data.get("type", "general"),
            confidence_score=int(data.get("confidenceScore", 50)),
            plan_file=data.get("planFile"),
            uncertainty_reasons=list(data.get("uncertaintyReasons") or []),
            blocked_tasks=list(data.get("blockedTasks") or []),
            estimated_review_time=data.get("estimatedReviewTime", "15 min"),
            status=data.get("status", PENDING),
        )


@dataclass
class HistoryEntry:
    """A decided queue item. Only ever removed by retention cleanup."""

    item: QueueItem
    status: str
    decided_at: datetime | None
    wait_time_minutes: int = 0
    notes: str | None = None
    rejection_reason: str | None = None

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def timestamp(self) -> datetime:
        """Decision time, falling back to creation time."""
        return self.decided_at or self.item.created_at

    def to_dict(self) -> dict[str, Any]:
        data = self.item.to_dict()
        data["status"] = self.status
        decided = to_iso(self.decided_at) if self.decided_at else None
        if self.status == APPROVED:
            data["approvedAt"] = decided
            data["waitTimeMinutes"] = self.wait_time_minutes
            data["notes"] = self.notes
        else:
            data["rejectedAt"] = decided
            data["waitTimeMinutes"] = self.wait_time_minutes
            data["rejectionReason"] = self.rejection_reason
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        item = QueueItem.from_dict({**data, "status": PENDING})
        decided = data.get("approvedAt") or data.get("rejectedAt")
        return cls(
            item=item,
            status=data.get("status", APPROVED),
            decided_at=parse_iso(decided) if decided else None,
            wait_time_minutes=int(data.get("waitTimeMinutes") or 0),
            notes=data.get("notes"),
            rejection_reason=data.get("rejectionReason"),
        )


@dataclass
class QueueStatistics:
    total_queued: int = 0
    total_approved: int = 0
    total_rejected: int = 0
    average_wait_time_minutes: float = 0
    longest_wait_time_minutes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalQueued": self.total_queued,
            "totalApproved": self.total_approved,
            "totalRejected": self.total_rejected,
            "averageWaitTimeMinutes": self.average_wait_time_minutes,
            "longestWaitTimeMinutes": self.longest_wait_time_minutes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QueueStatistics:
        return cls(
            total_queued=int(data.get("totalQueued", 0)),
            total_approved=int(data.get("totalApproved", 0)),
            total_rejected=int(data.get("totalRejected", 0)),
            average_wait_time_minutes=data.get("averageWaitTimeMinutes", 0),
            longest_wait_time_minutes=int(data.get("longestWaitTimeMinutes", 0)),
        )


@dataclass
class ReviewQueueStore:
    """The whole persisted queue: pending set, statistics and history."""

    version: str = STORE_VERSION
    last_updated: datetime | None = None
    pending: list[QueueItem] = field(default_factory=list)
    statistics: QueueStatistics = field(default_factory=QueueStatistics)
    history: list[HistoryEntry] = field(default_factory=list)

    def find(self, item_id: str) -> int | None:
        for index, item in enumerate(self.pending):
            if item.id == item_id:
                return index
        return None

    def sort_pending(self) -> None:
        # list.sort is stable, so equal priorities keep insertion order
        self.pending.sort(key=lambda item: priority_rank(item.priority))

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "lastUpdated": to_iso(self.last_updated) if self.last_updated else None,
            "queue": [item.to_dict() for item in self.pending],
            "statistics": self.statistics.to_dict(),
            "history": [entry.to_dict() for entry in self.history],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReviewQueueStore:
        last_updated = data.get("lastUpdated")
        return cls(
            version=data.get("version", STORE_VERSION),
            last_updated=parse_iso(last_updated) if last_updated else None,
            pending=[QueueItem.from_dict(d) for d in data.get("queue", [])],
            statistics=QueueStatistics.from_dict(data.get("statistics") or {}),
            history=[HistoryEntry.from_dict(d) for d in data.get("history", [])],
        )


@dataclass
class StatsReport:
    """Statistics plus figures derived from the current pending set."""

    statistics: QueueStatistics
    pending_count: int
    approval_rate: float
    by_priority: dict[str, int]
    by_type: dict[str, int]
