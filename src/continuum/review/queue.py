"""Review queue engine: priority-ordered pending set, history and statistics.

Every operation reloads the whole store, mutates it in memory and writes the
whole store back. Invariants kept after each operation:

- pending is sorted by priority rank (high < medium < low), stable within rank
- totalQueued == totalApproved + totalRejected + len(pending)
- averageWaitTimeMinutes is the mean wait of approved history entries
- rejections never touch the wait-time statistics
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta
from pathlib import Path

from continuum.errors import BestEffort, NotFoundError, StorageError, ValidationError
from continuum.review.models import (
    APPROVED,
    PRIORITIES,
    PRIORITY_RANK,
    REJECTED,
    HistoryEntry,
    QueueItem,
    ReviewQueueStore,
    StatsReport,
)
from continuum.storage import JsonDocumentStore
from continuum.timeutil import Clock, generate_id, minutes_between, utcnow

logger = logging.getLogger(__name__)


class ReviewQueue:
    """Human-in-the-loop approval queue backed by a single JSON document."""

    def __init__(self, path: Path, clock: Clock | None = None) -> None:
        self._store = JsonDocumentStore(path)
        self._clock = clock or utcnow

    @property
    def path(self) -> Path:
        return self._store.path

    def now(self) -> datetime:
        return self._clock()

    # ── Persistence ───────────────────────────────────────────

    def load(self) -> BestEffort[ReviewQueueStore]:
        """Load the store; a missing or corrupt file yields an empty store."""
        loaded = self._store.load()
        if loaded.value is None:
            return BestEffort(ReviewQueueStore(), loaded.errors)
        try:
            return BestEffort(ReviewQueueStore.from_dict(loaded.value))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Malformed review queue %s: %s", self.path, e)
            return BestEffort(ReviewQueueStore(), [f"malformed review queue: {e}"])

    def save(self, store: ReviewQueueStore) -> None:
        store.last_updated = self._clock()
        self._store.save(store.to_dict())

    def _load_for_write(self) -> ReviewQueueStore:
        # A degraded load would overwrite whatever is on disk with an empty queue
        loaded = self.load()
        if loaded.degraded:
            raise StorageError(self.path, "; ".join(loaded.errors) + " (refusing to overwrite)")
        return loaded.value

    # ── Commands ──────────────────────────────────────────────

    def add(
        self,
        task: str,
        type: str = "general",
        priority: str = "medium",
        confidence_score: int = 50,
        plan_file: str | None = None,
        uncertainty_reasons: list[str] | None = None,
        blocked_tasks: list[str] | None = None,
        estimated_review_time: str = "15 min",
    ) -> QueueItem:
        """Queue a task for review and re-sort the pending set by priority."""
        if not task or not task.strip():
            raise ValidationError("Task description is required")
        priority = (priority or "medium").lower()
        if priority not in PRIORITY_RANK:
            raise ValidationError(
                f"Unknown priority '{priority}' (expected one of: {', '.join(PRIORITIES)})"
            )
        if not 0 <= confidence_score <= 100:
            raise ValidationError(f"Confidence score must be 0-100, got {confidence_score}")

        store = self._load_for_write()
        item = QueueItem(
            id=generate_id("review"),
            task=task,
            created_at=self._clock(),
            priority=priority,
            type=(type or "general").lower(),
            confidence_score=confidence_score,
            plan_file=plan_file,
            uncertainty_reasons=list(uncertainty_reasons or []),
            blocked_tasks=list(blocked_tasks or []),
            estimated_review_time=estimated_review_time,
        )
        store.pending.append(item)
        store.statistics.total_queued += 1
        store.sort_pending()
        self.save(store)
        logger.info("Queued %s (%s, %s)", item.id, item.priority, item.type)
        return item

    def approve(self, item_id: str, notes: str | None = None) -> HistoryEntry:
        store = self._load_for_write()
        entry = self._decide(store, item_id, APPROVED)
        entry.notes = notes

        stats = store.statistics
        stats.total_approved += 1
        waits = [h.wait_time_minutes for h in store.history if h.status == APPROVED]
        stats.average_wait_time_minutes = sum(waits) / len(waits)
        stats.longest_wait_time_minutes = max(stats.longest_wait_time_minutes, entry.wait_time_minutes)

        self.save(store)
        logger.info("Approved %s after %d min", item_id, entry.wait_time_minutes)
        return entry

    def reject(self, item_id: str, reason: str | None = None) -> HistoryEntry:
        store = self._load_for_write()
        entry = self._decide(store, item_id, REJECTED)
        entry.rejection_reason = reason
        store.statistics.total_rejected += 1
        self.save(store)
        logger.info("Rejected %s after %d min", item_id, entry.wait_time_minutes)
        return entry

    def _decide(self, store: ReviewQueueStore, item_id: str, status: str) -> HistoryEntry:
        """Move a pending item to history. Raises before any mutation if absent."""
        index = store.find(item_id)
        if index is None:
            raise NotFoundError(item_id)
        item = store.pending.pop(index)
        now = self._clock()
        entry = HistoryEntry(
            item=item,
            status=status,
            decided_at=now,
            wait_time_minutes=minutes_between(item.created_at, now),
        )
        store.history.append(entry)
        return entry

    def list(self) -> list[QueueItem]:
        """Pending items in stored (priority) order."""
        return self.load().value.pending

    def stats(self) -> StatsReport:
        store = self.load().value
        stats = store.statistics
        rate = stats.total_approved / stats.total_queued if stats.total_queued else 0.0
        by_priority = Counter(item.priority for item in store.pending)
        by_type = Counter(item.type for item in store.pending)
        return StatsReport(
            statistics=stats,
            pending_count=len(store.pending),
            approval_rate=rate,
            by_priority={p: by_priority[p] for p in PRIORITIES if by_priority[p]},
            by_type=dict(by_type),
        )

    def clean_history(self, max_age_days: int = 30) -> int:
        """Drop history entries decided more than ``max_age_days`` ago. Returns count removed."""
        store = self._load_for_write()
        cutoff = self._clock() - timedelta(days=max_age_days)
        before = len(store.history)
        store.history = [entry for entry in store.history if entry.timestamp > cutoff]
        removed = before - len(store.history)
        self.save(store)
        logger.info("Cleaned %d history entries older than %d days", removed, max_age_days)
        return removed
