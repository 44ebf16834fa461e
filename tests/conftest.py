"""Shared HTML page builders for extraction tests."""

from __future__ import annotations

from typing import Callable, Sequence

import pytest

from kd_pipeline.document.query import PageDocument, parse_html


def build_page_html(
    *,
    index_text: str | None = "Number 42",
    character: str | None = "水",
    translation: str | None = "water",
    stars: str | None = "",
    components: str = "",
    sections: Sequence[tuple[str, str]] = (),
    description: str = "",
) -> str:
    """Render a page laid out like a cached KanjiDamage kanji page.

    ``sections`` holds ``(heading, rows_html)`` pairs rendered as an ``h2``
    followed by a newline and a table, the layout the table locator expects.
    ``None`` omits the corresponding element entirely.
    """

    header = f'<div class="span4 text-centered">{index_text}</div>' if index_text is not None else ""
    title_parts = []
    if character is not None:
        title_parts.append(f'<span class="kanji_character">{character}</span>')
    if translation is not None:
        title_parts.append(f'<span class="translation">{translation}</span>')
    if stars is not None:
        title_parts.append(f'<span class="usefulness-stars">{stars}</span>')
    title = "\n  ".join(title_parts)
    body_sections = "\n".join(
        f"<h2>{heading}</h2>\n<table>{rows}</table>" for heading, rows in sections
    )
    description_html = f'<div class="description">{description}</div>' if description else ""
    return f"""<html>
<body>
<div class="row navigation-header">
  <div class="span2">Prev</div>
  {header}
</div>
<div class="row">
  <div class="span8">
<h1>
  {title}
</h1>
{components}
  </div>
</div>
{description_html}
{body_sections}
</body>
</html>
"""


@pytest.fixture
def page_html() -> Callable[..., str]:
    """The :func:`build_page_html` renderer, for tests that write page files."""

    return build_page_html


@pytest.fixture
def make_page() -> Callable[..., PageDocument]:
    """Factory fixture returning parsed pages built by :func:`build_page_html`."""

    def factory(source: str = "test.html", **kwargs) -> PageDocument:
        return parse_html(build_page_html(**kwargs), source=source)

    return factory
