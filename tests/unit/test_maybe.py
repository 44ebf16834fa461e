"""Unit tests for the Maybe combinators."""

from __future__ import annotations

import pytest

from kd_pipeline.maybe import (
    Absent,
    MustReturnMaybeError,
    Present,
    UnexpectedNoneError,
    ValueMustBeMappingError,
    from_optional,
    from_text,
    head,
    maybe_from_json,
    present,
)


def test_map_transforms_present_and_skips_absent() -> None:
    calls: list[int] = []

    def double(value: int) -> int:
        calls.append(value)
        return value * 2

    assert Present(21).map(double) == Present(42)
    assert Absent().map(double) == Absent()
    assert calls == [21]


def test_map_returning_none_is_a_defect() -> None:
    with pytest.raises(UnexpectedNoneError):
        Present("x").map(lambda _: None)


def test_and_then_flattens_and_short_circuits() -> None:
    assert Present("42").and_then(lambda text: Present(int(text))) == Present(42)
    assert Present("42").and_then(lambda _: Absent()) == Absent()
    assert Absent().and_then(lambda _: Present(1)) == Absent()


def test_and_then_requires_a_maybe() -> None:
    with pytest.raises(MustReturnMaybeError, match="Expected a Maybe but got int"):
        Present(1).and_then(lambda value: value + 1)


def test_or_else_is_lazy_on_present() -> None:
    calls: list[str] = []

    def fallback() -> Present[str]:
        calls.append("called")
        return Present("fallback")

    assert Present("first").or_else(fallback) == Present("first")
    assert calls == []
    assert Absent().or_else(fallback) == Present("fallback")
    assert calls == ["called"]


def test_get_or_else_variants() -> None:
    assert Present(3).get_or_else(0) == 3
    assert Absent().get_or_else(0) == 0
    assert Absent().get_or_else_get(lambda: "computed") == "computed"
    assert Present("kept").get_or_else_get(lambda: pytest.fail("must not be called")) == "kept"


def test_assign_adds_field_without_mutating_the_record() -> None:
    record = {"index": 1}
    result = Present(record).assign("character", lambda current: Present(f"#{current['index']}"))

    assert result == Present({"index": 1, "character": "#1"})
    assert record == {"index": 1}


def test_assign_propagates_absence() -> None:
    later: list[str] = []

    result = (
        Present({})
        .assign("index", lambda _: Absent())
        .assign("character", lambda _: later.append("evaluated") or Present("水"))
    )

    assert result == Absent()
    assert later == []


def test_assign_requires_a_mapping() -> None:
    with pytest.raises(ValueMustBeMappingError):
        Present([1, 2]).assign("key", lambda _: Present(1))


def test_effects_fire_only_on_matching_variant() -> None:
    seen: list[str] = []

    Present("v").effect(lambda value: seen.append(f"effect {value}")).on_absent_effect(
        lambda: seen.append("absent on present")
    )
    Absent().effect(lambda value: seen.append("effect on absent")).on_absent_effect(
        lambda: seen.append("absent")
    )

    assert seen == ["effect v", "absent"]


def test_helpers_normalize_emptiness() -> None:
    assert from_text("  水\r\n ") == Present("水")
    assert from_text(" \r ") == Absent()
    assert from_text(None) == Absent()
    assert from_optional(None) == Absent()
    assert from_optional(0) == Present(0)
    assert head([]) == Absent()
    assert head(["a", "b"]) == Present("a")
    with pytest.raises(UnexpectedNoneError):
        present(None)


def test_json_encoding_roundtrips_both_variants() -> None:
    assert Present("スイ").to_json() == {"kind": "some", "value": "スイ"}
    assert Absent().to_json() == {"kind": "none"}
    assert maybe_from_json({"kind": "some", "value": "スイ"}) == Present("スイ")
    assert maybe_from_json({"kind": "none"}) == Absent()
    assert maybe_from_json({"kind": "some", "value": ""}) == Absent()
    assert maybe_from_json({"kind": "some", "value": 0}) == Present(0)
    with pytest.raises(ValueError, match="Not a Maybe encoding"):
        maybe_from_json({"kind": "maybe"})
