"""Hook entry point.

Usage (host runtime hook):
    continuum-hook <event>        # or: python -m continuum hook <event>

Reads the host's JSON payload from stdin, prints the report to stdout and
exits 0. The one exception is a blocked compaction, which exits 2 with the
reason on stderr. Failures inside a handler are logged and never propagate.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from continuum.config import ContinuumConfig, load_config
from continuum.hooks.events import ALLOW, HookEvent, HookResult, normalize_event, parse_payload
from continuum.hooks.handlers import HANDLERS
from continuum.log import setup_logging
from continuum.timeutil import Clock, utcnow

logger = logging.getLogger(__name__)


def run_hook(
    event_name: str,
    payload: dict[str, Any],
    config: ContinuumConfig,
    clock: Clock = utcnow,
) -> HookResult:
    """Dispatch one hook invocation. Never raises."""
    event = normalize_event(event_name or str(payload.get("hook_event_name", "")))
    if event is None:
        logger.warning("Unknown hook event: %s", event_name)
        return HookResult(ALLOW)
    try:
        return HANDLERS[event](HookEvent.from_payload(event, payload), config, clock)
    except Exception as e:
        logger.exception("Hook %s failed: %s", event, e)
        return HookResult(ALLOW)


def _read_stdin() -> str:
    if sys.stdin.isatty():
        return ""
    return sys.stdin.buffer.read().decode("utf-8", errors="replace")


def main(argv: list[str] | None = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    try:
        config = load_config()
    except Exception as e:
        print(f"continuum: config unavailable ({e})", file=sys.stderr)
        sys.exit(0)
    setup_logging(config.log_level)

    payload = parse_payload(_read_stdin())
    result = run_hook(args[0] if args else "", payload, config)

    if result.blocked:
        print(result.report, file=sys.stderr)
    elif result.report:
        print(result.report)
    sys.exit(result.exit_code)


if __name__ == "__main__":
    main()
