"""Bounded excerpts from ledger and handoff documents.

Documents are free-form markdown with optional YAML frontmatter. Only a fixed
set of markers is recognized; a missing marker leaves its field as None.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import frontmatter

logger = logging.getLogger(__name__)

EXCERPT_LIMIT = 200

NO_GOAL = "(no goal recorded)"
NO_FOCUS = "(no current focus recorded)"
NO_SUMMARY = "(no summary recorded)"

OUTCOMES = ("SUCCEEDED", "PARTIAL", "FAILED", "UNKNOWN")
_OUTCOME_ALIASES = {
    "SUCCEEDED": "SUCCEEDED",
    "SUCCEED": "SUCCEEDED",
    "SUCCESS": "SUCCEEDED",
    "SUCCESSFUL": "SUCCEEDED",
    "PARTIAL": "PARTIAL",
    "PARTIAL_PLUS": "PARTIAL",
    "PARTIAL_MINUS": "PARTIAL",
    "FAILED": "FAILED",
    "FAIL": "FAILED",
    "FAILURE": "FAILED",
}

_HEADER = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")
_DONE_ITEM = re.compile(r"^\s*[-*]\s+\[[xX]\]")
_OPEN_ITEM = re.compile(r"^\s*[-*]\s+\[ \]")
_FOCUS_ITEM = re.compile(r"^\s*[-*]\s+\[->\]\s*(.+)$")
_NOW_LINE = re.compile(r"^\s*(?:[-*]\s+)?\**now\**\s*:\s*\**\s*(.+)$", re.IGNORECASE)
_OUTCOME_LINE = re.compile(r"^\s*(?:[-*]\s+)?\**outcome\**\s*:\s*\**\s*([A-Za-z_]+)", re.IGNORECASE)
_PERCENT_COMPLETE = re.compile(r"(\d{1,3})\s*%\s*complete", re.IGNORECASE)
_COMPLETION_LINE = re.compile(r"completion\**\s*:\s*\**\s*(\d{1,3})\s*%?", re.IGNORECASE)
_LIST_ITEM = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+\S")
_LIST_MARKER = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+(?:\[[ xX>-]*\]\s*)?")


@dataclass
class LedgerExcerpt:
    goal: str | None = None
    completed_count: int = 0
    current_focus: str | None = None
    remaining_count: int = 0

    @property
    def goal_text(self) -> str:
        return self.goal or NO_GOAL

    @property
    def focus_text(self) -> str:
        return self.current_focus or NO_FOCUS


@dataclass
class HandoffExcerpt:
    outcome: str = "UNKNOWN"
    completion_percent: int | None = None
    summary: str | None = None
    next_step_count: int = 0

    @property
    def summary_text(self) -> str:
        return self.summary or NO_SUMMARY


@dataclass
class ParsedDocument:
    """Frontmatter metadata, body lines, and ``#``-headed sections."""

    metadata: dict
    lines: list[str]
    sections: dict[str, list[str]]

    def section(self, *titles: str) -> list[str] | None:
        for title in titles:
            if title in self.sections:
                return self.sections[title]
        return None


def parse_document(text: str) -> ParsedDocument:
    try:
        post = frontmatter.loads(text)
        metadata, body = dict(post.metadata), post.content
    except Exception as e:
        logger.debug("Frontmatter parse failed, using raw text: %s", e)
        metadata, body = {}, text

    lines = body.splitlines()
    sections: dict[str, list[str]] = {}
    current: list[str] | None = None
    for line in lines:
        match = _HEADER.match(line)
        if match:
            title = match.group(2).strip().rstrip(":").lower()
            # First occurrence of a title wins
            current = [] if title in sections else sections.setdefault(title, [])
            continue
        if current is not None:
            current.append(line)
    return ParsedDocument(metadata=metadata, lines=lines, sections=sections)


def _clip(text: str, limit: int = EXCERPT_LIMIT) -> str:
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def _first_line(lines: list[str] | None) -> str | None:
    for line in lines or []:
        stripped = _LIST_MARKER.sub("", line).strip()
        if stripped:
            return _clip(stripped)
    return None


def _first_paragraph(lines: list[str] | None) -> str | None:
    paragraph: list[str] = []
    for line in lines or []:
        if line.strip():
            paragraph.append(line.strip())
        elif paragraph:
            break
    return _clip(" ".join(paragraph)) if paragraph else None


def _normalize_outcome(value: object) -> str:
    if value is None:
        return "UNKNOWN"
    key = str(value).strip().upper().replace("-", "_").replace(" ", "_")
    return _OUTCOME_ALIASES.get(key, "UNKNOWN")


def _percent(value: object) -> int | None:
    match = re.search(r"\d{1,3}", str(value))
    if not match:
        return None
    return max(0, min(100, int(match.group())))


def parse_ledger(text: str) -> LedgerExcerpt:
    doc = parse_document(text)
    excerpt = LedgerExcerpt()

    goal = doc.metadata.get("goal")
    excerpt.goal = _clip(str(goal)) if goal else _first_line(doc.section("goal"))

    for line in doc.lines:
        if _DONE_ITEM.match(line):
            excerpt.completed_count += 1
        elif _OPEN_ITEM.match(line):
            excerpt.remaining_count += 1
        if excerpt.current_focus is None:
            match = _FOCUS_ITEM.match(line) or _NOW_LINE.match(line)
            if match:
                excerpt.current_focus = _clip(match.group(1).strip())

    if excerpt.current_focus is None:
        excerpt.current_focus = _first_line(doc.section("current focus", "now"))
    return excerpt


def parse_handoff(text: str) -> HandoffExcerpt:
    doc = parse_document(text)
    excerpt = HandoffExcerpt()

    outcome = doc.metadata.get("outcome", doc.metadata.get("status"))
    if outcome is None:
        for line in doc.lines:
            match = _OUTCOME_LINE.match(line)
            if match:
                outcome = match.group(1)
                break
    excerpt.outcome = _normalize_outcome(outcome)

    if "completion" in doc.metadata:
        excerpt.completion_percent = _percent(doc.metadata["completion"])
    else:
        for line in doc.lines:
            match = _PERCENT_COMPLETE.search(line) or _COMPLETION_LINE.search(line)
            if match:
                excerpt.completion_percent = _percent(match.group(1))
                break

    excerpt.summary = _first_paragraph(doc.section("summary", "what was done", "task summary"))
    next_steps = doc.section("next steps", "next")
    excerpt.next_step_count = sum(1 for line in next_steps or [] if _LIST_ITEM.match(line))
    return excerpt
