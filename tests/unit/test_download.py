"""Unit tests for the HTML cache downloader."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from kd_pipeline.download import BASE_URL, INDEX_URL, adjusted_name, download_pages, kanji_hrefs


@dataclass
class FakeResponse:
    url: str
    text: str

    def raise_for_status(self) -> None:
        return None


@dataclass
class FakeSession:
    pages: dict[str, FakeResponse]
    requested: list[str] = field(default_factory=list)

    def get(self, url: str, timeout: float) -> FakeResponse:
        self.requested.append(url)
        return self.pages[url]


INDEX_HTML = """
<table>
  <tr><td><a href="/kanji/1-one">一</a></td><td><a href="/kanji/2-two">二</a></td></tr>
  <tr><td><a href="/kanji/1-one">一</a></td><td><a href="/about">about</a></td></tr>
</table>
<table><tr><td><a href="/kanji/99-extra">x</a></td></tr></table>
"""


def test_adjusted_name_pads_page_number() -> None:
    assert adjusted_name("42-water.html") == "0042-water.html"
    assert adjusted_name("7-%E6%B0%B4") == "0007.html"
    assert adjusted_name("1234-big") == "1234-big.html"


def test_kanji_hrefs_reads_first_table_in_order() -> None:
    assert kanji_hrefs(INDEX_HTML) == ["/kanji/1", "/kanji/2"]
    assert kanji_hrefs("<p>no table</p>") == []


def test_download_pages_skips_cached_pages(tmp_path: Path) -> None:
    (tmp_path / "0001-one.html").write_text("<html>one</html>", encoding="utf-8")
    session = FakeSession(
        pages={
            INDEX_URL: FakeResponse(INDEX_URL, INDEX_HTML),
            f"{BASE_URL}/kanji/2": FakeResponse(f"{BASE_URL}/kanji/2-two", "<html>二</html>"),
        }
    )

    written = download_pages(tmp_path, session=session, pause=0)

    assert session.requested == [INDEX_URL, f"{BASE_URL}/kanji/2"]
    assert written == [tmp_path / "0002-two.html"]
    assert written[0].read_text(encoding="utf-8") == "<html>二</html>"
