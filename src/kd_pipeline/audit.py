"""Audit side channel for dropped documents.

Extractors and the heuristic gate report why a document produced no record by
appending events to an ``AuditTrail`` handed to them explicitly. Each worker
owns its own trail, so concurrent documents never share mutable state; the
coordinator appends finished trails to the line-oriented audit file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

REQUIRED = "required"
HEURISTIC = "heuristic"


@dataclass(frozen=True)
class AuditEvent:
    """One audit line: a tag and a human-readable message."""

    tag: str
    message: str

    def line(self) -> str:
        return f"[{self.tag}] {self.message}"


@dataclass
class AuditTrail:
    """Ordered, append-only list of audit events for one document."""

    source: str = ""
    events: list[AuditEvent] = field(default_factory=list)

    def record(self, tag: str, message: str) -> None:
        event = AuditEvent(tag=tag, message=message)
        self.events.append(event)
        logger.info("%s (%s)", event.line(), self.source)

    def required(self, message: str) -> None:
        self.record(REQUIRED, message)

    def heuristic(self, message: str) -> None:
        self.record(HEURISTIC, message)

    def lines(self) -> list[str]:
        return [event.line() for event in self.events]


def append_audit_lines(path: Path, events: Iterable[AuditEvent]) -> int:
    """Append events to the audit log file, one line each.

    Returns:
        Number of lines written.
    """

    lines = [event.line() for event in events]
    if not lines:
        return 0
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        for line in lines:
            handle.write(line)
            handle.write("\n")
    return len(lines)
