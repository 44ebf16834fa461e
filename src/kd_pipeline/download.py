"""Populate the HTML cache with KanjiDamage kanji pages.

Only pages whose numeric id is not cached yet are fetched. Delete the cache
directory contents to download everything again.
"""

from __future__ import annotations

import logging
from pathlib import Path
import re
import time
from typing import Iterable
from urllib.parse import urlparse

from bs4 import BeautifulSoup
import requests

logger = logging.getLogger(__name__)

BASE_URL = "http://www.kanjidamage.com"
INDEX_URL = f"{BASE_URL}/kanji"
KANJI_HREF_RE = re.compile(r"/kanji/\d+")
REQUEST_TIMEOUT = 30
PAUSE_SECONDS = 0.1


def adjusted_name(name: str) -> str:
    """Normalize a page file name so a directory listing sorts by page number.

    ``"42-water.html"`` becomes ``"0042-water.html"``; percent-encoded tails
    (``"7-%E6%B0%B4"``) are dropped.
    """

    head, *rest = name.split("-")
    padded = "-".join([head.rjust(4, "0"), *rest])
    stem = padded.split("-%")[0]
    return stem.removesuffix(".html") + ".html"


def cached_page_paths(save_dir: Path) -> set[str]:
    """``/kanji/<n>`` paths already present in ``save_dir``."""

    saved: set[str] = set()
    for path in save_dir.iterdir():
        number = path.name.split("-")[0].split(".")[0]
        if number.isdecimal():
            saved.add(f"/kanji/{int(number)}")
    return saved


def kanji_hrefs(index_html: str) -> list[str]:
    """``/kanji/<n>`` paths linked from the first table of the index page, in order."""

    soup = BeautifulSoup(index_html, "html.parser")
    table = soup.find("table")
    if table is None:
        return []
    hrefs: list[str] = []
    for anchor in table.select("a[href]"):
        match = KANJI_HREF_RE.search(anchor["href"])
        if match and match.group(0) not in hrefs:
            hrefs.append(match.group(0))
    return hrefs


def _file_name(response: requests.Response, href: str) -> str:
    name = Path(urlparse(response.url).path).name or href.rsplit("/", 1)[-1]
    return adjusted_name(name)


def download_pages(
    save_dir: Path,
    session: requests.Session | None = None,
    hrefs: Iterable[str] | None = None,
    pause: float = PAUSE_SECONDS,
) -> list[Path]:
    """Download missing kanji pages into ``save_dir``.

    Args:
        save_dir: HTML cache directory, created when missing.
        session: HTTP session; a new one is created when omitted.
        hrefs: Page paths to consider; defaults to those linked from the index.
        pause: Delay between requests, to stay polite with the site.

    Returns:
        Paths of the files written during this call.

    Raises:
        requests.HTTPError: If the index or a page request fails.
    """

    save_dir.mkdir(parents=True, exist_ok=True)
    session = session or requests.Session()

    if hrefs is None:
        response = session.get(INDEX_URL, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        hrefs = kanji_hrefs(response.text)

    saved = cached_page_paths(save_dir)
    missing = [href for href in hrefs if href not in saved]
    logger.info("Downloading %d pages...", len(missing))

    written: list[Path] = []
    for href in missing:
        time.sleep(pause)
        url = f"{BASE_URL}{href}"
        logger.info("Visiting %s", url)
        response = session.get(url, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        path = save_dir / _file_name(response, href)
        path.write_text(response.text, encoding="utf-8")
        written.append(path)
    return written
