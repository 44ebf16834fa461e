"""Explicit configuration passed to the pipeline components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_EXCLUDED_RANGES: tuple[tuple[int, int], ...] = (
    (0x0000, 0x007F),  # ASCII
    (0x3000, 0x303F),  # CJK symbols and punctuation
    (0x3040, 0x309F),  # hiragana
    (0x30A0, 0x30FF),  # katakana
    (0x31F0, 0x31FF),  # katakana phonetic extensions
    (0xFF00, 0xFFEF),  # halfwidth and fullwidth forms
)
DEFAULT_EXCLUDED_CHARS = frozenset("・…〜～")


@dataclass(frozen=True)
class GlyphAlphabet:
    """Characters that never count as a glyph dependency of a compound word."""

    ranges: tuple[tuple[int, int], ...] = DEFAULT_EXCLUDED_RANGES
    chars: frozenset[str] = DEFAULT_EXCLUDED_CHARS

    def excludes(self, char: str) -> bool:
        if char in self.chars or char.isspace():
            return True
        point = ord(char)
        return any(start <= point <= end for start, end in self.ranges)


@dataclass(frozen=True)
class GateConfig:
    """Toggles for the heuristic gate checks."""

    require_content: bool = True
    require_single_glyph: bool = True
    require_usage: bool = True


@dataclass(frozen=True)
class PipelineConfig:
    """Paths and run options for one extraction/export run.

    Every artifact lives under ``cache_dir`` unless overridden; HTML pages are
    expected in ``cache_dir / "html"``.
    """

    cache_dir: Path = Path("cache")
    workers: int = 8
    gate: GateConfig = field(default_factory=GateConfig)
    alphabet: GlyphAlphabet = field(default_factory=GlyphAlphabet)

    @property
    def html_dir(self) -> Path:
        return self.cache_dir / "html"

    @property
    def data_path(self) -> Path:
        return self.cache_dir / "data.json"

    @property
    def audit_path(self) -> Path:
        return self.cache_dir / "audit.log"

    @property
    def report_path(self) -> Path:
        return self.cache_dir / "report.md"

    @property
    def meanings_csv_path(self) -> Path:
        return self.cache_dir / "meanings.csv"

    @property
    def onyomis_csv_path(self) -> Path:
        return self.cache_dir / "onyomis.csv"

    @property
    def vocabs_csv_path(self) -> Path:
        return self.cache_dir / "vocabs.csv"
