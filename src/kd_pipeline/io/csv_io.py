"""Anki flashcard CSV export.

Three note files are produced: kanji meanings, kanji onyomi and vocabulary
(Kunyomi and Jukugo). Each note carries a single card, so the ``index`` column
fixes the learning order across all three files: a meaning comes
``SEPARATION`` positions before its onyomi, which comes ``SEPARATION`` before
the vocabulary using it. Compounds wait for their latest taught kanji and are
pushed back further for every kanji KanjiDamage does not teach.
"""

from __future__ import annotations

import csv
from dataclasses import astuple, dataclass, fields, replace
from pathlib import Path
from typing import Sequence, TypeVar, Union

from kd_pipeline.models import JukugoEntry, KunyomiEntry, PageRecord

SEPARATION = 20
UNTAUGHT_KANJI_PENALTY = 50

KD_SEARCH = "http://www.kanjidamage.com/kanji/search?q={kanji}"
JISHO_SEARCH = "https://jisho.org/search/{kanji}%23kanji"


@dataclass(frozen=True)
class MeaningNote:
    kanji: str
    index: int
    meaning: str
    components: str
    mnemonic: str
    description: str
    link: str
    stars: int


@dataclass(frozen=True)
class OnyomiNote:
    kanji: str
    index: int
    meaning: str
    components: str
    onyomi: str
    mnemonic: str
    description: str
    link: str
    stars: int


@dataclass(frozen=True)
class VocabularyNote:
    word: str
    prefix: str
    suffix: str
    index: int
    pronunciation: str
    definition: str
    links: str
    non_kd_kanjis: str
    stars: int


Note = Union[MeaningNote, OnyomiNote, VocabularyNote]
N = TypeVar("N", MeaningNote, OnyomiNote, VocabularyNote)


@dataclass(frozen=True)
class AnkiNotes:
    """Ordered notes ready to be written, one list per CSV file."""

    meanings: tuple[MeaningNote, ...]
    onyomis: tuple[OnyomiNote, ...]
    vocabs: tuple[VocabularyNote, ...]


def link_to_kd(kanji: str) -> str:
    return f'<a href="{KD_SEARCH.format(kanji=kanji)}">kanjidamage: {kanji}</a>'


def link_to_jisho(kanji: str, message: str) -> str:
    return f'<a href="{JISHO_SEARCH.format(kanji=kanji)}">{message}</a>'


def meaning_note(record: PageRecord, position: dict[str, int]) -> MeaningNote:
    return MeaningNote(
        kanji=record.character,
        index=position[record.character] - SEPARATION,
        meaning=record.translation,
        components=record.components,
        mnemonic=record.translation_mnemonic,
        description=record.description,
        link=link_to_kd(record.character),
        stars=record.stars,
    )


def onyomi_note(record: PageRecord, onyomi: str, position: dict[str, int]) -> OnyomiNote:
    return OnyomiNote(
        kanji=record.character,
        index=position[record.character],
        meaning=record.translation,
        components=record.components,
        onyomi=onyomi,
        mnemonic=record.onyomi_mnemonic,
        description=record.description,
        link=link_to_kd(record.character),
        stars=record.stars,
    )


def kunyomi_note(
    entry: KunyomiEntry, record: PageRecord, position: dict[str, int]
) -> VocabularyNote:
    return VocabularyNote(
        word=entry.word,
        prefix=entry.prefix,
        suffix=entry.suffix,
        index=position[record.character] + SEPARATION,
        pronunciation=entry.pronunciation,
        definition=entry.definition,
        links=link_to_kd(record.character),
        non_kd_kanjis="",
        stars=entry.stars,
    )


def jukugo_note(entry: JukugoEntry, position: dict[str, int]) -> VocabularyNote:
    """Vocabulary note for a compound.

    A compound made only of untaught kanji is placed after the last taught one.
    """

    taught = [kanji for kanji in entry.kanjis if kanji in position]
    untaught = [kanji for kanji in entry.kanjis if kanji not in position]
    latest = max((position[kanji] for kanji in taught), default=len(position))
    return VocabularyNote(
        word=entry.word,
        prefix=entry.prefix,
        suffix=entry.suffix,
        index=latest + SEPARATION + UNTAUGHT_KANJI_PENALTY * len(untaught),
        pronunciation=entry.pronunciation,
        definition=entry.definition,
        links="".join(link_to_kd(kanji) for kanji in taught),
        non_kd_kanjis="".join(
            link_to_jisho(kanji, f"Find {kanji} on jisho (it's not taught on KanjiDamage)")
            for kanji in untaught
        ),
        stars=entry.stars,
    )


def _unique_by(notes: Sequence[N], attribute: str) -> list[N]:
    seen: set[str] = set()
    unique: list[N] = []
    for note in notes:
        key = getattr(note, attribute)
        if key in seen:
            continue
        seen.add(key)
        unique.append(note)
    return unique


def build_notes(records: Sequence[PageRecord]) -> AnkiNotes:
    """Build de-duplicated notes with consecutive indexes in learning order.

    Args:
        records: Accepted records, already sorted by page index.

    Returns:
        Notes whose indexes are renumbered ``0..n-1`` across all three lists.
    """

    position: dict[str, int] = {}
    for record in records:
        position.setdefault(record.character, len(position))

    meanings = _unique_by([meaning_note(record, position) for record in records], "kanji")
    onyomis = _unique_by(
        [
            onyomi_note(record, record.onyomi.get_or_else(""), position)
            for record in records
            if record.onyomi.is_present()
        ],
        "kanji",
    )
    vocabs = _unique_by(
        [
            note
            for record in records
            for note in [
                *(kunyomi_note(entry, record, position) for entry in record.kunyomi),
                *(jukugo_note(entry, position) for entry in record.jukugo),
            ]
        ],
        "word",
    )

    ordered: list[Note] = [*meanings, *onyomis, *vocabs]
    ranked = sorted(range(len(ordered)), key=lambda idx: (ordered[idx].index, idx))
    renumbered: dict[int, Note] = {
        idx: replace(ordered[idx], index=rank) for rank, idx in enumerate(ranked)
    }
    final = [renumbered[idx] for idx in range(len(ordered))]

    def by_index(notes: list[N]) -> tuple[N, ...]:
        return tuple(sorted(notes, key=lambda note: note.index))

    return AnkiNotes(
        meanings=by_index(final[: len(meanings)]),
        onyomis=by_index(final[len(meanings) : len(meanings) + len(onyomis)]),
        vocabs=by_index(final[len(meanings) + len(onyomis) :]),
    )


def write_notes_csv(notes: Sequence[Note], output_path: Path, include_header: bool = False) -> None:
    """Write notes in field order; Anki imports headerless files by default.

    Args:
        notes: Notes of a single type.
        output_path: Destination CSV file path.
        include_header: Whether to include a header row of field names.
    """

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        if include_header and notes:
            writer.writerow([item.name for item in fields(notes[0])])
        for note in notes:
            writer.writerow(astuple(note))


def export_anki_csv(
    records: Sequence[PageRecord],
    meanings_path: Path,
    onyomis_path: Path,
    vocabs_path: Path,
    include_header: bool = False,
) -> AnkiNotes:
    """Build notes from ``records`` and write the three CSV files."""

    notes = build_notes(records)
    write_notes_csv(notes.meanings, meanings_path, include_header=include_header)
    write_notes_csv(notes.onyomis, onyomis_path, include_header=include_header)
    write_notes_csv(notes.vocabs, vocabs_path, include_header=include_header)
    return notes
