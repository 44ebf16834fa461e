"""Heuristic gate deciding which structurally valid records are worth keeping.

The checks run in a fixed order and stop at the first rejection, so a record is
audited at most once. Each check can be disabled through :class:`GateConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from kd_pipeline.audit import AuditTrail
from kd_pipeline.config import GateConfig
from kd_pipeline.maybe import Absent, Maybe, Present
from kd_pipeline.models import PageRecord


@dataclass(frozen=True)
class HeuristicCheck:
    """One acceptance predicate and the reason logged when it fails."""

    name: str
    accepts: Callable[[PageRecord], bool]
    reason: str


def has_content(record: PageRecord) -> bool:
    """A record with nothing but a headword and a meaning is noise."""

    return any(
        (
            record.components,
            record.component_parts,
            record.onyomi.is_present(),
            record.translation_mnemonic,
            record.onyomi_mnemonic,
            record.description,
            record.kunyomi,
            record.jukugo,
        )
    )


def is_single_glyph(record: PageRecord) -> bool:
    return len(record.character) == 1


def has_usage(record: PageRecord) -> bool:
    """Without any reading or vocabulary the page describes a radical."""

    return record.onyomi.is_present() or bool(record.kunyomi) or bool(record.jukugo)


CONTENT_CHECK = HeuristicCheck("content", has_content, "no content beyond headword and meaning")
SINGLE_GLYPH_CHECK = HeuristicCheck(
    "single_glyph", is_single_glyph, "headword is not a single character"
)
USAGE_CHECK = HeuristicCheck("usage", has_usage, "no onyomi, kunyomi or jukugo (radical only)")


def enabled_checks(config: GateConfig) -> tuple[HeuristicCheck, ...]:
    """Checks switched on in ``config``, in evaluation order."""

    toggles = (
        (config.require_content, CONTENT_CHECK),
        (config.require_single_glyph, SINGLE_GLYPH_CHECK),
        (config.require_usage, USAGE_CHECK),
    )
    return tuple(check for enabled, check in toggles if enabled)


def apply_gate(
    record: PageRecord,
    audit: AuditTrail,
    checks: tuple[HeuristicCheck, ...] = (CONTENT_CHECK, SINGLE_GLYPH_CHECK, USAGE_CHECK),
) -> Maybe[PageRecord]:
    """Run ``checks`` in order and return ``Absent`` at the first failure.

    The failing check writes one ``[heuristic]`` audit event naming the record;
    later checks are not evaluated.
    """

    for check in checks:
        if not check.accepts(record):
            audit.heuristic(f"{record.label()}: rejected by {check.name} check, {check.reason}")
            return Absent()
    return Present(record)
