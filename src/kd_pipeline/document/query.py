"""Document query capability consumed by the field extractors.

Extractors never touch the HTML parser directly; they go through a
``DocumentQuery`` so the parsing backend stays replaceable. The default
implementation wraps BeautifulSoup CSS selection.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, Sequence

from bs4 import BeautifulSoup, NavigableString, ParserRejectedMarkup, Tag

from kd_pipeline.maybe import Absent, Maybe, Present

Node = Any

# Failures that make a cached page unusable as a whole.
DOCUMENT_READ_ERRORS = (OSError, UnicodeDecodeError, ParserRejectedMarkup)


class DocumentQuery(Protocol):
    """Read-only query operations over a parsed document tree."""

    def search(self, root: Node, selector: str) -> Sequence[Node]:
        """Return nodes below ``root`` matching ``selector`` in document order."""

    def text(self, node: Node) -> str:
        """Return the concatenated text of ``node``."""

    def attribute(self, node: Node, name: str) -> Maybe[str]:
        """Return an attribute value; multi-valued attributes are space-joined."""

    def next_sibling(self, node: Node) -> Maybe[Node]:
        """Return the next raw sibling, including text nodes."""

    def name(self, node: Node) -> str:
        """Return the element tag name, or an empty string for text nodes."""


class SoupQuery:
    """``DocumentQuery`` backed by BeautifulSoup's ``select``."""

    def search(self, root: Node, selector: str) -> Sequence[Node]:
        return root.select(selector)

    def text(self, node: Node) -> str:
        if isinstance(node, NavigableString):
            return str(node)
        return node.get_text()

    def attribute(self, node: Node, name: str) -> Maybe[str]:
        if not isinstance(node, Tag):
            return Absent()
        value = node.get(name)
        if value is None:
            return Absent()
        if isinstance(value, list):
            value = " ".join(value)
        return Present(value)

    def next_sibling(self, node: Node) -> Maybe[Node]:
        sibling = node.next_sibling
        return Absent() if sibling is None else Present(sibling)

    def name(self, node: Node) -> str:
        return node.name if isinstance(node, Tag) else ""


@dataclass(frozen=True)
class PageDocument:
    """A parsed page bundled with its query capability and source identifier."""

    root: Node
    query: DocumentQuery
    source: str

    def search(self, selector: str, root: Node | None = None) -> Sequence[Node]:
        return self.query.search(self.root if root is None else root, selector)

    def text(self, node: Node) -> str:
        return self.query.text(node)


def parse_html(html: str, source: str = "<string>") -> PageDocument:
    """Parse an HTML string into a ``PageDocument``."""

    return PageDocument(root=BeautifulSoup(html, "html.parser"), query=SoupQuery(), source=source)


def load_html(path: Path) -> PageDocument:
    """Read and parse one cached HTML page.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not valid UTF-8.
        ParserRejectedMarkup: If the HTML parser gives up on the markup.
    """

    return parse_html(path.read_text(encoding="utf-8"), source=str(path))
