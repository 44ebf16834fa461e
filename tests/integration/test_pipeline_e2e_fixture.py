"""Integration tests running the pipeline and CLI over a fixture HTML cache."""

from __future__ import annotations

from pathlib import Path

import pytest

from kd_pipeline.cli import main
from kd_pipeline.config import GateConfig, PipelineConfig
from kd_pipeline.io.json_io import read_records_json
from kd_pipeline.maybe import Absent, Present
from kd_pipeline.pipeline import ACCEPTED, INCOMPLETE, REJECTED, UNREADABLE, run_pipeline
from kd_pipeline.validation import StructuralDefectError

ONYOMI = ("Onyomi", "<tr><td>ゲン</td><td>story</td></tr>")


@pytest.fixture
def html_cache(tmp_path: Path, page_html) -> Path:
    html_dir = tmp_path / "html"
    html_dir.mkdir()
    water_sections = [
        ("Kunyomi", '<tr><td><span class="kanji_character">みず</span></td><td>water</td></tr>'),
        ("Jukugo", "<tr><td>日本(にほん)</td><td>Japan</td></tr>"),
    ]
    pages = {
        "0001-sun.html": page_html(
            index_text="Number 2", character="日", translation="sun", sections=[ONYOMI]
        ),
        "0002-water.html": page_html(index_text="Number 1", sections=water_sections),
        "0003-tree.html": page_html(
            index_text="Number 2", character="木", translation="tree", sections=[ONYOMI]
        ),
        "0004-radical.html": page_html(
            index_text="Number 5",
            character="氵",
            translation="water radical",
            description="drops",
        ),
        "0006-noindex.html": page_html(index_text=None),
    }
    for name, html in pages.items():
        (html_dir / name).write_text(html, encoding="utf-8")
    (html_dir / "0005-broken.html").write_bytes(b"\xff\xfe\xfa not utf-8")
    (html_dir / "0007-malformed.html").write_text(
        "<html><![bogus junk]> <body></body></html>", encoding="utf-8"
    )
    (html_dir / "notes.txt").write_text("ignored", encoding="utf-8")
    return tmp_path


def test_pipeline_sorts_records_and_audits_dropped_pages(html_cache: Path) -> None:
    config = PipelineConfig(cache_dir=html_cache, workers=3)

    result = run_pipeline(config, audit_path=config.audit_path)

    assert [(record.index, record.character) for record in result.records] == [
        (1, "水"),
        (2, "日"),
        (2, "木"),
    ]
    assert [result.count(status) for status in (ACCEPTED, REJECTED, INCOMPLETE, UNREADABLE)] == [
        3,
        1,
        1,
        2,
    ]
    assert result.duplicate_indexes == (2,)
    assert result.missing_indexes == ()

    audit_lines = config.audit_path.read_text(encoding="utf-8").splitlines()
    assert len(audit_lines) == 4
    assert sum(line.startswith("[required] ") for line in audit_lines) == 3
    assert any(
        line.startswith("[heuristic] #5 氵 (water radical): rejected by usage check")
        for line in audit_lines
    )
    assert any("0005-broken.html: unreadable document" in line for line in audit_lines)
    assert any("0007-malformed.html: unreadable document" in line for line in audit_lines)


def test_pipeline_gate_toggles_keep_radicals(html_cache: Path) -> None:
    config = PipelineConfig(cache_dir=html_cache, workers=1, gate=GateConfig(require_usage=False))

    result = run_pipeline(config)

    assert [record.character for record in result.records] == ["水", "日", "木", "氵"]
    assert result.missing_indexes == (3, 4)


def test_pipeline_requires_html_directory(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="HTML cache directory not found"):
        run_pipeline(PipelineConfig(cache_dir=tmp_path))


def test_cli_extract_then_export(html_cache: Path, capsys) -> None:
    assert main(["--cache-dir", str(html_cache), "extract", "--workers", "2"]) == 0
    assert main(["--cache-dir", str(html_cache), "export"]) == 0

    output = capsys.readouterr().out
    assert "Wrote 3 records" in output
    assert "WARNING: Duplicated index values (1): 2" in output
    assert [record.character for record in read_records_json(html_cache / "data.json")] == [
        "水",
        "日",
        "木",
    ]
    assert "# Extraction Report" in (html_cache / "report.md").read_text(encoding="utf-8")
    assert len((html_cache / "audit.log").read_text(encoding="utf-8").splitlines()) == 4
    vocabs = (html_cache / "vocabs.csv").read_text(encoding="utf-8").splitlines()
    assert [line.split(",")[0] for line in vocabs] == ["水", "日本"]


def test_cli_export_without_cache_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit, match="Data cache not found"):
        main(["--cache-dir", str(tmp_path), "export"])


def _mistyped_record(page, alphabet, audit):
    return Present(
        {
            "index": 1,
            "translation": "water",
            "character": "水",
            "stars": "5",
            "components": "",
            "component_parts": (),
            "onyomi": Absent(),
            "translation_mnemonic": "",
            "onyomi_mnemonic": "",
            "description": "",
            "kunyomi": (),
            "jukugo": (),
        }
    )


def test_structural_defect_aborts_pipeline(html_cache: Path, monkeypatch) -> None:
    monkeypatch.setattr("kd_pipeline.pipeline.build_page_record", _mistyped_record)

    with pytest.raises(StructuralDefectError, match="Expected stars to be int"):
        run_pipeline(PipelineConfig(cache_dir=html_cache, workers=2))


def test_cli_extract_exits_on_structural_defect(html_cache: Path, monkeypatch) -> None:
    monkeypatch.setattr("kd_pipeline.pipeline.build_page_record", _mistyped_record)

    with pytest.raises(SystemExit, match="Expected stars to be int"):
        main(["--cache-dir", str(html_cache), "extract", "--workers", "2"])
    assert not (html_cache / "data.json").exists()
