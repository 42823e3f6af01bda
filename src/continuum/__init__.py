"""continuum: review queue and session continuity for agent workflows.

Layout (relative to the project root):
    thoughts/
    ├── ledgers/CONTINUITY_*.md        # Live per-session ledger, refreshed in place
    └── shared/
        ├── handoffs/<session>/*.md    # Immutable end-of-session snapshots
        └── review-queue.json          # Pending set + history + statistics
    .continuum/
    ├── session-state.json             # Session start/end bookkeeping (50 records)
    └── versions/                      # Pre-edit backups
"""

__version__ = "0.1.0"
