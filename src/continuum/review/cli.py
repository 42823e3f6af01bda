"""Review queue command surface.

Usage: continuum-review <command> [options]   (or python -m continuum review ...)

Exit code 0 on success or help, 1 on unknown id, invalid input, storage
failure or unknown command.
"""

from __future__ import annotations

import logging
import sys

from continuum.config import ContinuumConfig, load_config
from continuum.errors import ContinuumError, ValidationError
from continuum.log import setup_logging
from continuum.review.models import QueueItem
from continuum.review.queue import ReviewQueue
from continuum.timeutil import format_duration, minutes_between, round_half_up

logger = logging.getLogger(__name__)

_RULE = "-" * 59

HELP_TEXT = """\
Review Queue

Usage: continuum-review <command> [options]

Commands:
  add <task>              Add task to review queue
    --type <type>         Task type (security/architecture/infrastructure/general)
    --priority <priority> Priority level (high/medium/low)
    --confidence <score>  Confidence score (0-100)
    --plan <file>         Path to plan file
    --reasons <reasons>   Uncertainty reasons (comma-separated)
    --blocks <tasks>      Tasks blocked by this review (comma-separated)
    --estimate <time>     Estimated review time (default: 15 min)

  approve <id> [notes]    Approve queued task
  reject <id> [reason]    Reject queued task
  list                    List all queued tasks
  stats                   Show queue statistics
  clean [days]            Remove history older than N days (default: 30)
  help                    Show this help message
"""

_ADD_OPTIONS = {
    "--type": "type",
    "--priority": "priority",
    "--confidence": "confidence_score",
    "--plan": "plan_file",
    "--reasons": "uncertainty_reasons",
    "--blocks": "blocked_tasks",
    "--estimate": "estimated_review_time",
}


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_add_args(args: list[str]) -> dict:
    """Turn ``<task> [--opt value]...`` into ReviewQueue.add keyword arguments."""
    if not args or args[0].startswith("--"):
        raise ValidationError("Task description is required")
    options: dict = {"task": args[0]}
    rest = args[1:]
    for i in range(0, len(rest), 2):
        flag = rest[i]
        if flag not in _ADD_OPTIONS:
            raise ValidationError(f"Unknown option: {flag}")
        if i + 1 >= len(rest):
            raise ValidationError(f"Missing value for {flag}")
        key, value = _ADD_OPTIONS[flag], rest[i + 1]
        if key == "confidence_score":
            try:
                options[key] = int(value)
            except ValueError:
                raise ValidationError(f"Confidence must be an integer, got '{value}'") from None
        elif key in ("uncertainty_reasons", "blocked_tasks"):
            options[key] = _split_csv(value)
        else:
            options[key] = value
    return options


# ── Commands ──────────────────────────────────────────────


def cmd_add(queue: ReviewQueue, args: list[str]) -> None:
    item = queue.add(**parse_add_args(args))
    print("✓ Task added to review queue")
    print(f"  ID: {item.id}")
    print(f"  Priority: {item.priority.upper()}")
    print(f"  Type: {item.type}")
    print(f"  Confidence: {item.confidence_score}%")
    if item.plan_file:
        print(f"  Plan: {item.plan_file}")
    print()
    print(f"Current queue size: {len(queue.list())} tasks")


def _require_id(args: list[str]) -> str:
    if not args:
        raise ValidationError("Task id is required")
    return args[0]


def cmd_approve(queue: ReviewQueue, args: list[str]) -> None:
    item_id = _require_id(args)
    entry = queue.approve(item_id, " ".join(args[1:]) or None)
    print(f"✓ Task {item_id} APPROVED")
    print(f"  Task: {entry.item.task}")
    print(f"  Wait time: {format_duration(entry.wait_time_minutes)}")
    if entry.notes:
        print(f"  Notes: {entry.notes}")
    if entry.item.plan_file:
        print(f"  Plan: {entry.item.plan_file}")
    print()
    print("Ready for execution.")


def cmd_reject(queue: ReviewQueue, args: list[str]) -> None:
    item_id = _require_id(args)
    entry = queue.reject(item_id, " ".join(args[1:]) or None)
    print(f"✗ Task {item_id} REJECTED")
    print(f"  Task: {entry.item.task}")
    print(f"  Wait time: {format_duration(entry.wait_time_minutes)}")
    if entry.rejection_reason:
        print(f"  Reason: {entry.rejection_reason}")
    print()
    print("Task will not be executed.")


def _print_item(item: QueueItem, waiting: int) -> None:
    print(f"[{item.priority.upper()}] {item.task}")
    print(f"  ID: {item.id}")
    print(f"  Type: {item.type}")
    print(f"  Confidence: {item.confidence_score}%")
    print(f"  Waiting: {format_duration(waiting)}")
    print(f"  Estimated review: {item.estimated_review_time}")
    if item.uncertainty_reasons:
        print("  Uncertainty reasons:")
        for reason in item.uncertainty_reasons:
            print(f"    - {reason}")
    if item.plan_file:
        print(f"  Plan: {item.plan_file}")
    if item.blocked_tasks:
        print(f"  Blocks: {', '.join(item.blocked_tasks)}")
    print()
    print("  Actions:")
    print(f"    approve: continuum-review approve {item.id} [notes]")
    print(f"    reject:  continuum-review reject {item.id} [reason]")


def cmd_list(queue: ReviewQueue, args: list[str]) -> None:
    items = queue.list()
    if not items:
        print("HUMAN REVIEW QUEUE - EMPTY")
        print()
        print("✓ No tasks waiting for review")
        return

    print("HUMAN REVIEW QUEUE")
    print(f"{len(items)} task(s) waiting for your review")
    print()
    now = queue.now()
    for index, item in enumerate(items):
        _print_item(item, minutes_between(item.created_at, now))
        if index < len(items) - 1:
            print()
            print(_RULE)
            print()


def cmd_stats(queue: ReviewQueue, args: list[str]) -> None:
    report = queue.stats()
    stats = report.statistics
    print("REVIEW QUEUE STATISTICS")
    print()
    print("Current Queue:")
    print(f"  Tasks pending: {report.pending_count}")
    print()
    print("All-Time Statistics:")
    print(f"  Total approved: {stats.total_approved}")
    print(f"  Total rejected: {stats.total_rejected}")
    print(f"  Total queued: {stats.total_queued}")
    print()
    print("Wait Times:")
    print(f"  Average: {format_duration(stats.average_wait_time_minutes)}")
    print(f"  Longest: {format_duration(stats.longest_wait_time_minutes)}")
    print()
    if stats.total_queued:
        print("Approval Rate:")
        print(f"  {round_half_up(report.approval_rate * 100)}% approved")
        print()
    if report.by_priority:
        print("Current Queue by Priority:")
        for priority, count in report.by_priority.items():
            print(f"  {priority.capitalize()}: {count}")
        print()
    if report.by_type:
        print("Current Queue by Type:")
        for type_name, count in report.by_type.items():
            print(f"  - {type_name}: {count}")
        print()


def cmd_clean(queue: ReviewQueue, args: list[str], default_days: int = 30) -> None:
    days = default_days
    if args:
        try:
            days = int(args[0])
        except ValueError:
            raise ValidationError(f"Days must be an integer, got '{args[0]}'") from None
    removed = queue.clean_history(days)
    print(f"✓ Cleaned {removed} old items from history")
    print(f"  History now contains: {len(queue.load().value.history)} items")


COMMANDS = {
    "add": cmd_add,
    "approve": cmd_approve,
    "reject": cmd_reject,
    "list": cmd_list,
    "stats": cmd_stats,
}


def run(argv: list[str], config: ContinuumConfig, queue: ReviewQueue | None = None) -> int:
    """Dispatch one review command. Returns the process exit code."""
    if not argv or argv[0] in ("help", "--help", "-h"):
        print(HELP_TEXT)
        return 0

    command, args = argv[0], argv[1:]
    queue = queue or ReviewQueue(config.queue_file)
    try:
        if command == "clean":
            cmd_clean(queue, args, config.review.history_retention_days)
        elif command in COMMANDS:
            COMMANDS[command](queue, args)
        else:
            print(f"Unknown command: {command}", file=sys.stderr)
            print('Run with "help" for usage information', file=sys.stderr)
            return 1
    except ContinuumError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> None:
    config = load_config()
    setup_logging(config.log_level)
    sys.exit(run(sys.argv[1:] if argv is None else argv, config))


if __name__ == "__main__":
    main()
