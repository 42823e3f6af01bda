"""Hook payloads from the host runtime and the decisions returned to it."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Literal

logger = logging.getLogger(__name__)

ALLOW = "allow"
BLOCK = "block"

# Exit code the host treats as "blocked, show stderr to the agent"
BLOCK_EXIT_CODE = 2

EVENT_ALIASES = {
    "pre-edit": "pre-edit",
    "pretooluse": "pre-edit",
    "post-write": "post-write",
    "posttooluse": "post-write",
    "pre-compact": "pre-compact",
    "precompact": "pre-compact",
    "session-start": "session-start",
    "sessionstart": "session-start",
    "session-end": "session-end",
    "sessionend": "session-end",
    "stop": "session-end",
}

_TOOL_OPERATIONS = {
    "write": "write",
    "edit": "edit",
    "multiedit": "edit",
    "notebookedit": "edit",
    "delete": "delete",
}


def normalize_event(name: str) -> str | None:
    return EVENT_ALIASES.get(name.strip().lower().replace("_", "-"))


@dataclass
class HookEvent:
    """What the host tells us: which tool acted, on which file, doing what."""

    event: str
    tool_name: str = ""
    file_path: str | None = None
    operation: str = "unknown"

    @classmethod
    def from_payload(cls, event: str, payload: dict[str, Any]) -> HookEvent:
        tool_name = str(payload.get("tool_name") or "")
        tool_input = payload.get("tool_input") or {}
        file_path = payload.get("file_path")
        if file_path is None and isinstance(tool_input, dict):
            file_path = tool_input.get("file_path") or tool_input.get("notebook_path")
        operation = payload.get("operation") or _TOOL_OPERATIONS.get(tool_name.lower(), "unknown")
        return cls(
            event=event,
            tool_name=tool_name,
            file_path=str(file_path) if file_path else None,
            operation=str(operation).lower(),
        )


def parse_payload(raw: str) -> dict[str, Any]:
    """Decode the host's JSON payload. Anything unusable becomes an empty payload."""
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring malformed hook payload: %s", e)
        return {}
    return data if isinstance(data, dict) else {}


@dataclass
class HookResult:
    decision: Literal["allow", "block"] = ALLOW
    report: str = ""

    @property
    def blocked(self) -> bool:
        return self.decision == BLOCK

    @property
    def exit_code(self) -> int:
        return BLOCK_EXIT_CODE if self.blocked else 0
