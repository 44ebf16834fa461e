"""Unit tests for structural record validation and index continuity."""

from __future__ import annotations

from typing import Any

import pytest

from kd_pipeline.maybe import Absent, Present
from kd_pipeline.models import KanjiComponent, KunyomiEntry, PageRecord
from kd_pipeline.validation import (
    CACHED_PAGE_SHAPE,
    JUKUGO_SHAPE,
    PAGE_SHAPE,
    StructuralDefectError,
    duplicate_indexes,
    missing_indexes,
    shape_violations,
    validate_page_mapping,
)


def _mapping(**overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "index": 42,
        "translation": "water",
        "character": "水",
        "stars": 5,
        "components": "丶 + 丨",
        "component_parts": (KanjiComponent("丨"),),
        "onyomi": Present("スイ"),
        "translation_mnemonic": "",
        "onyomi_mnemonic": "",
        "description": "",
        "kunyomi": (
            {
                "word": "水",
                "prefix": "",
                "suffix": "",
                "pronunciation": "みず",
                "definition": "water",
                "stars": 5,
            },
        ),
        "jukugo": (),
    }
    record.update(overrides)
    return record


def test_valid_mapping_converts_to_typed_record() -> None:
    record = validate_page_mapping(_mapping())

    assert isinstance(record, PageRecord)
    assert record.kunyomi == (KunyomiEntry("水", "", "", "みず", "water", 5),)
    assert record.label() == "#42 水 (water)"


def test_valid_mapping_has_no_violations() -> None:
    assert shape_violations(_mapping(), PAGE_SHAPE) == []
    assert validate_page_mapping(_mapping()) == validate_page_mapping(_mapping())


def test_bool_is_not_an_int() -> None:
    errors = shape_violations(_mapping(stars=True), PAGE_SHAPE)

    assert errors == ["Expected stars to be int but got bool True"]


def test_optional_field_requires_maybe_with_matching_value() -> None:
    assert shape_violations(_mapping(onyomi=Absent()), PAGE_SHAPE) == []
    assert shape_violations(_mapping(onyomi="スイ"), PAGE_SHAPE) == [
        "Expected onyomi to be a Maybe but got str"
    ]
    assert shape_violations(_mapping(onyomi=Present(3)), PAGE_SHAPE) == [
        "Expected onyomi to be Maybe[str] but got Maybe[int]"
    ]


def test_missing_and_unexpected_fields_are_reported() -> None:
    record = _mapping(extra="x")
    del record["description"]

    errors = shape_violations(record, PAGE_SHAPE)

    assert errors == [
        "Expected description to be present in page",
        "Unexpected field 'extra' in page",
    ]


def test_nested_violations_carry_their_path() -> None:
    entry = {
        "word": "日本",
        "prefix": "",
        "suffix": "",
        "kanjis": ("日", 3),
        "pronunciation": "にほん",
        "definition": "Japan",
        "stars": 0,
    }

    assert shape_violations(_mapping(jukugo=(entry,)), PAGE_SHAPE) == [
        "Expected jukugo[0].kanjis[1] to be str but got int 3"
    ]
    assert shape_violations(entry, JUKUGO_SHAPE, "entry") == [
        "Expected entry.kanjis[1] to be str but got int 3"
    ]


def test_component_parts_accept_only_component_types() -> None:
    errors = shape_violations(_mapping(component_parts=("丨",)), PAGE_SHAPE)

    assert errors == ["Expected component_parts[0] to match one of 2 shapes but got str"]


def test_cached_shape_drops_structured_components() -> None:
    cached = _mapping()
    del cached["component_parts"]

    assert shape_violations(cached, CACHED_PAGE_SHAPE) == []
    assert shape_violations(_mapping(), CACHED_PAGE_SHAPE) == [
        "Unexpected field 'component_parts' in page"
    ]
    assert validate_page_mapping(cached, CACHED_PAGE_SHAPE).component_parts == ()
    assert validate_page_mapping(cached, CACHED_PAGE_SHAPE) == validate_page_mapping(_mapping())


def test_validate_page_mapping_raises_structural_defect() -> None:
    with pytest.raises(StructuralDefectError, match=r"Invalid page record #42 水 with 2 violations"):
        validate_page_mapping(_mapping(index="42", stars=None))


def test_structural_defect_message_truncates_long_lists() -> None:
    error = StructuralDefectError("page record", [f"problem {idx}" for idx in range(30)])

    assert "- problem 24" in str(error)
    assert "- problem 25" not in str(error)
    assert "- ... and 5 more" in str(error)
    assert len(error.violations) == 30


def test_missing_and_duplicate_indexes() -> None:
    records = [validate_page_mapping(_mapping(index=idx)) for idx in (3, 5, 5, 8)]

    assert missing_indexes(records) == [4, 6, 7]
    assert duplicate_indexes(records) == [5]
    assert missing_indexes([]) == []
