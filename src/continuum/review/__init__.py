"""Human review queue: pending set, decision history, wait-time statistics."""

from continuum.review.models import HistoryEntry, QueueItem, QueueStatistics, ReviewQueueStore
from continuum.review.queue import ReviewQueue

__all__ = ["HistoryEntry", "QueueItem", "QueueStatistics", "ReviewQueue", "ReviewQueueStore"]
