"""Hook handlers, one per lifecycle point.

Only ``pre_compact`` can block: compaction is refused unless a ledger or
handoff was written within the compaction window.
"""

from __future__ import annotations

import glob
import logging
import subprocess
from datetime import timedelta
from pathlib import Path

from continuum.config import ContinuumConfig
from continuum.continuity.freshness import find_fresh
from continuum.continuity.selector import ContinuitySelector, latest_continuity_write, render_report
from continuum.hooks.events import ALLOW, BLOCK, HookEvent, HookResult
from continuum.session import SessionTracker
from continuum.timeutil import Clock, format_duration, utcnow

logger = logging.getLogger(__name__)

DESTRUCTIVE_OPERATIONS = {"write", "edit", "delete"}
VALIDATOR_TIMEOUT = 120  # seconds


def _resolve_target(event: HookEvent, config: ContinuumConfig) -> Path | None:
    if not event.file_path:
        return None
    return config.resolve(Path(event.file_path))


def _is_within(path: Path, directory: Path) -> bool:
    try:
        path.resolve().relative_to(directory.resolve())
        return True
    except ValueError:
        return False


_BACKUP_STAMP = "%Y%m%dT%H%M%S%f"
_BACKUP_STAMP_GLOB = "[0-9]" * 8 + "T" + "[0-9]" * 12


def backup_name(path: Path, root: Path | None = None) -> str:
    """Flatten ``path`` (relative to ``root`` when inside it) into a backup file stem."""
    path = path.resolve()
    if root is not None and _is_within(path, root):
        rel = path.relative_to(root.resolve())
    else:
        rel = Path(*path.parts[1:])
    return "__".join([*rel.parent.parts, path.stem])


def backup_file(
    path: Path,
    versions_dir: Path,
    keep: int,
    clock: Clock = utcnow,
    root: Path | None = None,
) -> Path:
    """Copy ``path`` into ``versions_dir``, keeping at most ``keep`` copies per file."""
    versions_dir.mkdir(parents=True, exist_ok=True)
    name = backup_name(path, root)
    ts = clock().strftime(_BACKUP_STAMP)
    dest = versions_dir / f"{name}-{ts}{path.suffix}"
    dest.write_bytes(path.read_bytes())
    # Cleanup old versions for this file
    old = sorted(versions_dir.glob(f"{glob.escape(name)}-{_BACKUP_STAMP_GLOB}{path.suffix}"))
    for f in old[:-keep]:
        f.unlink()
    return dest


def pre_edit(event: HookEvent, config: ContinuumConfig, clock: Clock = utcnow) -> HookResult:
    """Before a destructive edit: back up the target and nudge toward a live ledger."""
    lines: list[str] = []
    target = _resolve_target(event, config)

    if (
        config.hooks.backup_before_edit
        and target is not None
        and event.operation in DESTRUCTIVE_OPERATIONS
        and target.is_file()
    ):
        dest = backup_file(target, config.versions_dir, config.hooks.backup_keep, clock, config.root)
        logger.info("Backed up %s to %s", target, dest)
        lines.append(f"Backed up {target.name} before {event.operation}")

    ledgers = find_fresh(
        config.ledger_dir,
        config.continuity.ledger_pattern,
        timedelta(hours=config.continuity.ledger_max_age_hours),
        limit=1,
        now=clock(),
    )
    if not ledgers:
        lines.append(f"No active ledger in {config.continuity.ledger_dir}; consider starting one.")
    return HookResult(ALLOW, "\n".join(lines))


def _run_validator(command: list[str], target: Path) -> tuple[bool, str]:
    try:
        proc = subprocess.run(
            [*command, str(target)],
            capture_output=True,
            text=True,
            timeout=VALIDATOR_TIMEOUT,
        )
    except FileNotFoundError:
        return False, f"validator not found: {command[0]}"
    except subprocess.TimeoutExpired:
        return False, f"validator timed out after {VALIDATOR_TIMEOUT}s"
    output = (proc.stdout + proc.stderr).strip()
    return proc.returncode == 0, output


def post_write(event: HookEvent, config: ContinuumConfig, clock: Clock = utcnow) -> HookResult:
    """After a file write: acknowledge continuity documents, validate source files."""
    target = _resolve_target(event, config)
    if target is None:
        return HookResult(ALLOW)

    if _is_within(target, config.ledger_dir) or _is_within(target, config.handoff_dir):
        logger.info("Continuity document written: %s", target)
        return HookResult(ALLOW, f"Continuity document saved: {target.name}")

    command = config.hooks.validator_command
    if not command or target.suffix not in config.hooks.validate_suffixes or not target.is_file():
        return HookResult(ALLOW)

    passed, output = _run_validator(command, target)
    if passed:
        return HookResult(ALLOW, f"✓ {target.name} passed validation")
    logger.warning("Validation failed for %s", target)
    detail = "\n".join(output.splitlines()[:20])
    return HookResult(ALLOW, f"✗ {target.name} failed validation\n{detail}".rstrip())


def pre_compact(event: HookEvent, config: ContinuumConfig, clock: Clock = utcnow) -> HookResult:
    """Refuse compaction unless a continuity document is recent enough."""
    window = timedelta(minutes=config.continuity.compaction_window_minutes)
    window_text = format_duration(config.continuity.compaction_window_minutes)
    latest = latest_continuity_write(config)
    if latest is not None:
        age = latest.age(clock())
        if age < window:
            return HookResult(
                ALLOW,
                f"Continuity saved: {latest.path.name} "
                f"({format_duration(max(age.total_seconds(), 0) / 60)} ago)",
            )
        detail = f"newest is {latest.path.name}, {format_duration(age.total_seconds() / 60)} old"
    else:
        detail = "no ledger or handoff found"

    logger.warning("Blocking compaction: %s", detail)
    return HookResult(
        BLOCK,
        f"Compaction blocked: no ledger or handoff written in the last {window_text} ({detail}).\n"
        "Update the continuity ledger or write a handoff, then retry.",
    )


def session_start(event: HookEvent, config: ContinuumConfig, clock: Clock = utcnow) -> HookResult:
    """Restore continuity against the previous session start, then record this one."""
    tracker = SessionTracker(config.session_path, clock)
    previous_start = tracker.load().value.last_session_start

    selected = ContinuitySelector(config, clock).select(previous_start)
    tracker.start()

    report = render_report(selected.value)
    if selected.degraded:
        report += "\n(some continuity documents could not be read: " + "; ".join(selected.errors) + ")"
    return HookResult(ALLOW, report)


def session_end(event: HookEvent, config: ContinuumConfig, clock: Clock = utcnow) -> HookResult:
    record = SessionTracker(config.session_path, clock).end()
    if record is None:
        return HookResult(ALLOW)
    return HookResult(ALLOW, f"Session ended after {format_duration(record.duration_minutes)}")


HANDLERS = {
    "pre-edit": pre_edit,
    "post-write": post_write,
    "pre-compact": pre_compact,
    "session-start": session_start,
    "session-end": session_end,
}
