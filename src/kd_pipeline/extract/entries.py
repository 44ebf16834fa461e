"""Kunyomi and Jukugo table row extractors.

Both tables share one first-cell layout: optional particle ``span`` elements
around a ``.kanji_character`` span holding the reading (Kunyomi) or the word and
its reading (Jukugo). The second cell holds the definition and the row's star
glyphs give its usefulness rating.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Any, Mapping

from kd_pipeline.config import GlyphAlphabet
from kd_pipeline.document.query import Node, PageDocument
from kd_pipeline.extract.fields import STAR_GLYPH, count_stars, first_text_at, table_under_heading
from kd_pipeline.maybe import Absent, Maybe, Present, from_text

PARTICLE_CLASS = "particles"
ASTERISK_RE = re.compile(r"[*＊]")
READING_OPEN_RE = re.compile(r"[(（]")
READING_CLOSE_RE = re.compile(r"[)）]")


@dataclass(frozen=True)
class RowParts:
    """Decomposed first cell of an entry row."""

    prefix: str
    core: str
    suffix: str


def _has_particle_class(page: PageDocument, span: Node) -> bool:
    return PARTICLE_CLASS in page.query.attribute(span, "class").get_or_else("").split()


def _squash(text: str) -> str:
    return "".join(text.split())


def split_row_parts(page: PageDocument, cell: Node) -> Maybe[RowParts]:
    """Split a first cell into particle prefix, core token and particle suffix.

    The suffix is only taken from the last span when there are at least two
    spans, so a lone particle span is never both prefix and suffix. Without a
    ``.kanji_character`` span the core falls back to the cell text with the
    decorations removed. A cell without core content yields ``Absent``.
    """

    spans = page.search("span", cell)
    prefix = ""
    suffix = ""
    if spans and _has_particle_class(page, spans[0]):
        prefix = page.text(spans[0])
    if len(spans) >= 2 and _has_particle_class(page, spans[-1]):
        suffix = page.text(spans[-1])

    def fallback() -> Maybe[str]:
        text = page.text(cell).replace(STAR_GLYPH, "").strip()
        return from_text(text.removeprefix(prefix.strip()).removesuffix(suffix.strip()))

    return (
        first_text_at(page, ".kanji_character", cell)
        .or_else(fallback)
        .and_then(lambda core: from_text(_squash(core)))
        .map(lambda core: RowParts(prefix=_squash(prefix), core=core, suffix=_squash(suffix)))
    )


def _row_cells(page: PageDocument, row: Node) -> Maybe[tuple[Node, Node]]:
    cells = page.search("td", row)
    return Present((cells[0], cells[1])) if len(cells) >= 2 else Absent()


def _definition(page: PageDocument, cell: Node) -> Maybe[str]:
    return from_text(page.text(cell))


def carve_tail(token: str) -> str:
    """Return the okurigana after the asterisk marker, or ``""`` without one."""

    parts = ASTERISK_RE.split(token)
    return parts[-1] if len(parts) == 2 else ""


def kunyomi_from_row(page: PageDocument, row: Node, character: str) -> Maybe[dict[str, Any]]:
    """Build one Kunyomi sub-record from a table row.

    ``たか*い`` under ``高`` gives word ``高い`` and pronunciation ``たかい``.
    """

    stars = count_stars(page.text(row))
    return _row_cells(page, row).and_then(
        lambda cells: Present({})
        .assign("parts", lambda _: split_row_parts(page, cells[0]))
        .assign("definition", lambda _: _definition(page, cells[1]))
        .map(
            lambda found: {
                "word": character + carve_tail(found["parts"].core),
                "prefix": found["parts"].prefix,
                "suffix": found["parts"].suffix,
                "pronunciation": ASTERISK_RE.sub("", found["parts"].core),
                "definition": found["definition"],
                "stars": stars,
            }
        )
    )


def glyph_dependencies(word: str, alphabet: GlyphAlphabet) -> tuple[str, ...]:
    """Glyphs of ``word`` outside ``alphabet``, in order of first appearance."""

    seen: dict[str, None] = {}
    for char in word:
        if not alphabet.excludes(char):
            seen.setdefault(char, None)
    return tuple(seen)


def split_reading(core: str) -> tuple[str, str]:
    """Split ``日本(にほん)`` into ``("日本", "にほん")``.

    Without parentheses the whole token is both word and reading, which is how
    kana-only compounds are written.
    """

    parts = READING_OPEN_RE.split(core, maxsplit=1)
    if len(parts) == 1:
        return core, core
    return parts[0], READING_CLOSE_RE.sub("", parts[1])


def jukugo_from_row(
    page: PageDocument, row: Node, alphabet: GlyphAlphabet
) -> Maybe[dict[str, Any]]:
    """Build one Jukugo sub-record from a table row."""

    stars = count_stars(page.text(row))

    def build(found: Mapping[str, Any]) -> dict[str, Any]:
        parts: RowParts = found["parts"]
        word, pronunciation = split_reading(parts.core)
        return {
            "word": word,
            "prefix": parts.prefix,
            "suffix": parts.suffix,
            "kanjis": glyph_dependencies(word, alphabet),
            "pronunciation": pronunciation,
            "definition": found["definition"],
            "stars": stars,
        }

    return _row_cells(page, row).and_then(
        lambda cells: Present({})
        .assign("parts", lambda _: split_row_parts(page, cells[0]))
        .assign("definition", lambda _: _definition(page, cells[1]))
        .map(build)
    )


def _table_rows(page: PageDocument, heading: str) -> list[Node]:
    return (
        table_under_heading(page, heading)
        .map(lambda table: list(page.search("tr", table)))
        .get_or_else([])
    )


def get_kunyomi(page: PageDocument, character: str) -> tuple[dict[str, Any], ...]:
    """Every usable Kunyomi row; rows without content are skipped."""

    entries = (kunyomi_from_row(page, row, character) for row in _table_rows(page, "Kunyomi"))
    return tuple(entry.value for entry in entries if isinstance(entry, Present))


def get_jukugo(page: PageDocument, alphabet: GlyphAlphabet) -> tuple[dict[str, Any], ...]:
    """Every usable Jukugo row; rows without content are skipped."""

    entries = (jukugo_from_row(page, row, alphabet) for row in _table_rows(page, "Jukugo"))
    return tuple(entry.value for entry in entries if isinstance(entry, Present))
