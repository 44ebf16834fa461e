"""Page-level field extractors.

Each extractor reads one field from a :class:`PageDocument` and returns either a
``Maybe`` (the field may be missing) or a plain value when an empty default is
meaningful. Selectors target the KanjiDamage page markup.
"""

from __future__ import annotations

import re

from kd_pipeline.audit import AuditTrail
from kd_pipeline.document.query import Node, PageDocument
from kd_pipeline.maybe import Absent, Maybe, Present, from_text, head
from kd_pipeline.models import Component, KanjiComponent, RadicalComponent

INDEX_SELECTOR = ".navigation-header > .text-centered"
CHARACTER_SELECTOR = "h1 > .kanji_character"
TRANSLATION_SELECTOR = "h1 > .translation"
STARS_SELECTOR = "h1 .usefulness-stars"
COMPONENTS_SELECTOR = ".row.navigation-header + .row > .span8"
COMPONENT_LINK_SELECTOR = 'a[href*="/kanji/"]'
DESCRIPTION_SELECTOR = ".description"

INDEX_RE = re.compile(r"Number\s+(\d+)")
WHITESPACE_RE = re.compile(r"\s+")
STAR_GLYPH = "★"


def text_at(page: PageDocument, selector: str, root: Node | None = None) -> Maybe[str]:
    """Return the cleaned concatenated text of every node matching ``selector``."""

    nodes = page.search(selector, root)
    return from_text("".join(page.text(node) for node in nodes))


def first_text_at(page: PageDocument, selector: str, root: Node | None = None) -> Maybe[str]:
    """Return the cleaned text of the first node matching ``selector``."""

    return head(page.search(selector, root)).and_then(lambda node: from_text(page.text(node)))


def str_to_int(text: str) -> Maybe[int]:
    return Present(int(text)) if text.isdecimal() and str(int(text)) == text else Absent()


def count_stars(text: str) -> int:
    return text.count(STAR_GLYPH)


def get_page_index(page: PageDocument, audit: AuditTrail) -> Maybe[int]:
    """Extract the page number from the navigation header ("Number 42").

    A missing header or pattern is audited as a missing required field.
    """

    return (
        text_at(page, INDEX_SELECTOR)
        .and_then(lambda text: head(INDEX_RE.findall(text)))
        .and_then(str_to_int)
        .on_absent_effect(
            lambda: audit.required(f"{page.source}: no page index in navigation header")
        )
    )


def get_character(page: PageDocument) -> Maybe[str]:
    return text_at(page, CHARACTER_SELECTOR)


def get_translation(page: PageDocument) -> Maybe[str]:
    return text_at(page, TRANSLATION_SELECTOR)


def get_stars(page: PageDocument) -> Maybe[int]:
    """Count star glyphs in the title's usefulness region; zero is a valid count."""

    return head(page.search(STARS_SELECTOR)).map(lambda node: count_stars(page.text(node)))


def _collapse(text: str) -> str:
    return WHITESPACE_RE.sub(" ", text)


def get_components(page: PageDocument) -> str:
    """Return the component description, without the repeated page title.

    The region starts with a verbatim copy of the ``h1`` text, so the title is
    removed as a literal prefix after whitespace is collapsed on both sides.
    """

    prefix = (
        head(page.search("h1"))
        .map(lambda node: _collapse(page.text(node)).strip())
        .get_or_else("")
    )
    return (
        text_at(page, COMPONENTS_SELECTOR)
        .map(lambda text: _collapse(text).removeprefix(prefix).strip())
        .get_or_else("")
    )


def get_component_parts(page: PageDocument) -> tuple[Component, ...]:
    """Return linked components in document order.

    Links carrying the ``radical`` class are radicals; every other link to a
    kanji page is a kanji.
    """

    parts: list[Component] = []
    for region in page.search(COMPONENTS_SELECTOR):
        for link in page.search(COMPONENT_LINK_SELECTOR, region):
            glyph = page.text(link).strip()
            if not glyph:
                continue
            classes = page.query.attribute(link, "class").get_or_else("").split()
            if "radical" in classes:
                parts.append(RadicalComponent(glyph=glyph))
            else:
                parts.append(KanjiComponent(glyph=glyph))
    return tuple(parts)


def get_description(page: PageDocument) -> str:
    return text_at(page, DESCRIPTION_SELECTOR).get_or_else("")


def table_under_heading(page: PageDocument, heading: str) -> Maybe[Node]:
    """Find the table placed two sibling steps after the first ``h2`` labelled ``heading``.

    The step between heading and table is the whitespace text node the page
    markup always contains; any other layout yields ``Absent``.
    """

    query = page.query
    return (
        head([node for node in page.search("h2") if query.text(node) == heading])
        .and_then(query.next_sibling)
        .and_then(query.next_sibling)
        .and_then(lambda node: Present(node) if query.name(node) == "table" else Absent())
    )


def get_onyomi(page: PageDocument) -> Maybe[str]:
    return table_under_heading(page, "Onyomi").and_then(
        lambda table: first_text_at(page, "td", table)
    )


def mnemonic_at_heading(page: PageDocument, heading: str) -> Maybe[str]:
    """Second column of the first row of the table under ``heading``."""

    return (
        table_under_heading(page, heading)
        .and_then(lambda table: head(page.search("tr", table)))
        .and_then(lambda row: first_text_at(page, "td + td", row))
    )


def _first_mnemonic(page: PageDocument, headings: tuple[str, ...]) -> str:
    result: Maybe[str] = Absent()
    for heading in headings:
        result = result.or_else(lambda heading=heading: mnemonic_at_heading(page, heading))
    return result.or_else(lambda: text_at(page, DESCRIPTION_SELECTOR)).get_or_else("")


def get_translation_mnemonic(page: PageDocument) -> str:
    return _first_mnemonic(page, ("Mnemonic", "Onyomi"))


def get_onyomi_mnemonic(page: PageDocument) -> str:
    return _first_mnemonic(page, ("Onyomi", "Mnemonic"))
