"""Typed records produced by the extraction pipeline.

The builder assembles plain dict records field by field; once a record passes
structural validation it is converted into these frozen dataclasses so every
later stage (heuristics, JSON cache, CSV export) works on an immutable value
with a stable field set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from kd_pipeline.maybe import Maybe


@dataclass(frozen=True)
class KanjiComponent:
    """A component that is itself a taught kanji."""

    glyph: str


@dataclass(frozen=True)
class RadicalComponent:
    """A component that is only a radical."""

    glyph: str


Component = Union[KanjiComponent, RadicalComponent]


@dataclass(frozen=True)
class KunyomiEntry:
    """Native-reading vocabulary row from the Kunyomi table.

    ``word`` is the headword followed by the okurigana carved from the reading,
    while ``prefix``/``suffix`` hold particle decorations shown around it.
    """

    word: str
    prefix: str
    suffix: str
    pronunciation: str
    definition: str
    stars: int

    def to_json(self) -> dict[str, Any]:
        return {
            "word": self.word,
            "prefix": self.prefix,
            "suffix": self.suffix,
            "pronunciation": self.pronunciation,
            "definition": self.definition,
            "stars": self.stars,
        }


@dataclass(frozen=True)
class JukugoEntry:
    """Compound-word row from the Jukugo table.

    ``kanjis`` lists the glyphs of ``word`` that are neither kana, ASCII nor
    punctuation, in order of first appearance.
    """

    word: str
    prefix: str
    suffix: str
    kanjis: tuple[str, ...]
    pronunciation: str
    definition: str
    stars: int

    def to_json(self) -> dict[str, Any]:
        return {
            "word": self.word,
            "prefix": self.prefix,
            "suffix": self.suffix,
            "kanjis": list(self.kanjis),
            "pronunciation": self.pronunciation,
            "definition": self.definition,
            "stars": self.stars,
        }


@dataclass(frozen=True)
class PageRecord:
    """One accepted KanjiDamage page.

    ``components`` is the freeform component description shown under the title
    and the only component view written to the data cache. ``component_parts``
    holds the linked components found in the same region while the page is
    extracted and gated; it is empty for records read back from the cache and
    takes no part in equality.
    """

    index: int
    character: str
    translation: str
    stars: int
    components: str
    onyomi: Maybe[str]
    translation_mnemonic: str
    onyomi_mnemonic: str
    description: str
    kunyomi: tuple[KunyomiEntry, ...]
    jukugo: tuple[JukugoEntry, ...]
    component_parts: tuple[Component, ...] = field(default=(), compare=False)

    @classmethod
    def from_mapping(cls, record: Mapping[str, Any]) -> PageRecord:
        """Build a typed record from a structurally valid builder mapping.

        Sub-records may be mappings (fresh from the builder or JSON) or already
        typed entries. Cached mappings carry no ``component_parts``.
        """

        return cls(
            index=record["index"],
            character=record["character"],
            translation=record["translation"],
            stars=record["stars"],
            components=record["components"],
            onyomi=record["onyomi"],
            translation_mnemonic=record["translation_mnemonic"],
            onyomi_mnemonic=record["onyomi_mnemonic"],
            description=record["description"],
            kunyomi=tuple(
                item if isinstance(item, KunyomiEntry) else KunyomiEntry(**item)
                for item in record["kunyomi"]
            ),
            jukugo=tuple(
                item
                if isinstance(item, JukugoEntry)
                else JukugoEntry(**{**item, "kanjis": tuple(item["kanjis"])})
                for item in record["jukugo"]
            ),
            component_parts=tuple(record.get("component_parts", ())),
        )

    def label(self) -> str:
        """Short identification used in audit lines."""

        return f"#{self.index} {self.character} ({self.translation})"

    def to_json(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "character": self.character,
            "translation": self.translation,
            "stars": self.stars,
            "components": self.components,
            "onyomi": self.onyomi.to_json(),
            "translation_mnemonic": self.translation_mnemonic,
            "onyomi_mnemonic": self.onyomi_mnemonic,
            "description": self.description,
            "kunyomi": [item.to_json() for item in self.kunyomi],
            "jukugo": [item.to_json() for item in self.jukugo],
        }
