"""Record builder: runs the field extractors against one page in a fixed order.

Required fields are threaded through ``Maybe.assign`` so the first missing one
turns the whole record into ``Absent``; optional fields with a sensible empty
default are added afterwards with ``map``. Later fields may read earlier ones,
which is why the order below is fixed (Kunyomi words need the headword).
"""

from __future__ import annotations

from typing import Any

from kd_pipeline.audit import AuditTrail
from kd_pipeline.config import GlyphAlphabet
from kd_pipeline.document.query import PageDocument
from kd_pipeline.extract import fields
from kd_pipeline.extract.entries import get_jukugo, get_kunyomi
from kd_pipeline.maybe import Maybe, Present


def _require(
    audit: AuditTrail, page: PageDocument, record: dict[str, Any], key: str, found: Maybe[Any]
) -> Maybe[Any]:
    known = ", ".join(f"{name}={value}" for name, value in record.items())
    return found.on_absent_effect(
        lambda: audit.required(f"{page.source}: missing {key} ({known or 'nothing extracted'})")
    )


def build_page_record(
    page: PageDocument, alphabet: GlyphAlphabet, audit: AuditTrail
) -> Maybe[dict[str, Any]]:
    """Extract a candidate page record.

    Args:
        page: Parsed page to read.
        alphabet: Characters excluded from Jukugo glyph dependencies.
        audit: Trail receiving ``[required]`` events for missing fields.

    Returns:
        ``Present`` of a complete, insertion-ordered record dict, or ``Absent``
        when a required field is missing. A partial record is never returned.
    """

    return (
        Present({})
        .assign("index", lambda _: fields.get_page_index(page, audit))
        .assign(
            "translation",
            lambda record: _require(
                audit, page, record, "translation", fields.get_translation(page)
            ),
        )
        .assign(
            "character",
            lambda record: _require(audit, page, record, "character", fields.get_character(page)),
        )
        .assign(
            "stars",
            lambda record: _require(audit, page, record, "stars", fields.get_stars(page)),
        )
        .map(lambda record: {**record, "components": fields.get_components(page)})
        .map(lambda record: {**record, "component_parts": fields.get_component_parts(page)})
        .map(lambda record: {**record, "onyomi": fields.get_onyomi(page)})
        .map(
            lambda record: {**record, "translation_mnemonic": fields.get_translation_mnemonic(page)}
        )
        .map(lambda record: {**record, "onyomi_mnemonic": fields.get_onyomi_mnemonic(page)})
        .map(lambda record: {**record, "description": fields.get_description(page)})
        .map(lambda record: {**record, "kunyomi": get_kunyomi(page, record["character"])})
        .map(lambda record: {**record, "jukugo": get_jukugo(page, alphabet)})
    )
