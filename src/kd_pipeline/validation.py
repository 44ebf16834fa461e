"""Structural validation of built records and index continuity helpers.

Records are checked against a declared shape right after the builder produces
them and again when the JSON cache is read back. The builder and these shapes
must describe the same fields, so a violation always means a defect in this
package, never bad input; callers treat it as fatal.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Union

from kd_pipeline.maybe import Maybe
from kd_pipeline.models import KanjiComponent, PageRecord, RadicalComponent


@dataclass(frozen=True)
class Exact:
    """Value must be an instance of ``kind`` (``bool`` never passes for ``int``)."""

    kind: type


@dataclass(frozen=True)
class OptionalOf:
    """Value must be a ``Maybe`` whose present value is an instance of ``kind``."""

    kind: type


@dataclass(frozen=True)
class SequenceOf:
    """Value must be a tuple or list whose items match ``item``."""

    item: Shape


@dataclass(frozen=True)
class OneOf:
    """Value must match at least one of ``options``."""

    options: tuple[Shape, ...]


@dataclass(frozen=True)
class RecordShape:
    """Value must be a mapping holding exactly the declared fields."""

    name: str
    fields: tuple[tuple[str, Shape], ...]


Shape = Union[Exact, OptionalOf, SequenceOf, OneOf, RecordShape]

KUNYOMI_SHAPE = RecordShape(
    "kunyomi",
    (
        ("word", Exact(str)),
        ("prefix", Exact(str)),
        ("suffix", Exact(str)),
        ("pronunciation", Exact(str)),
        ("definition", Exact(str)),
        ("stars", Exact(int)),
    ),
)

JUKUGO_SHAPE = RecordShape(
    "jukugo",
    (
        ("word", Exact(str)),
        ("prefix", Exact(str)),
        ("suffix", Exact(str)),
        ("kanjis", SequenceOf(Exact(str))),
        ("pronunciation", Exact(str)),
        ("definition", Exact(str)),
        ("stars", Exact(int)),
    ),
)

PAGE_SHAPE = RecordShape(
    "page",
    (
        ("index", Exact(int)),
        ("character", Exact(str)),
        ("translation", Exact(str)),
        ("stars", Exact(int)),
        ("components", Exact(str)),
        ("component_parts", SequenceOf(OneOf((Exact(KanjiComponent), Exact(RadicalComponent))))),
        ("onyomi", OptionalOf(str)),
        ("translation_mnemonic", Exact(str)),
        ("onyomi_mnemonic", Exact(str)),
        ("description", Exact(str)),
        ("kunyomi", SequenceOf(KUNYOMI_SHAPE)),
        ("jukugo", SequenceOf(JUKUGO_SHAPE)),
    ),
)

# Records read back from the data cache carry only the freeform component view.
CACHED_PAGE_SHAPE = RecordShape(
    "page",
    tuple((name, shape) for name, shape in PAGE_SHAPE.fields if name != "component_parts"),
)


class StructuralDefectError(ValueError):
    """A built record does not match its declared shape."""

    def __init__(self, label: str, violations: Sequence[str]) -> None:
        self.violations = tuple(violations)
        preview = "\n".join(f"- {item}" for item in self.violations[:25])
        rest = len(self.violations) - min(25, len(self.violations))
        more = f"\n- ... and {rest} more" if rest > 0 else ""
        super().__init__(
            f"Invalid {label} with {len(self.violations)} violations:\n{preview}{more}"
        )


def _type_name(value: Any) -> str:
    return type(value).__name__


def _is_instance(value: Any, kind: type) -> bool:
    if isinstance(value, bool) and kind is not bool:
        return False
    return isinstance(value, kind)


def shape_violations(value: Any, shape: Shape, path: str = "") -> list[str]:
    """Compare ``value`` with ``shape`` recursively.

    Args:
        value: Candidate value.
        shape: Declared shape.
        path: Field path used as message prefix (``kunyomi[0].word``).

    Returns:
        Ordered violation messages; empty when ``value`` matches.
    """

    where = path or "value"
    if isinstance(shape, Exact):
        if _is_instance(value, shape.kind):
            return []
        expected = shape.kind.__name__
        return [f"Expected {where} to be {expected} but got {_type_name(value)} {value!r}"]

    if isinstance(shape, OptionalOf):
        if not isinstance(value, Maybe):
            return [f"Expected {where} to be a Maybe but got {_type_name(value)}"]
        inner = value.map(_type_name).get_or_else(shape.kind.__name__)
        if value.map(lambda item: _is_instance(item, shape.kind)).get_or_else(True):
            return []
        return [f"Expected {where} to be Maybe[{shape.kind.__name__}] but got Maybe[{inner}]"]

    if isinstance(shape, SequenceOf):
        if not isinstance(value, (tuple, list)):
            return [f"Expected {where} to be a sequence but got {_type_name(value)}"]
        errors: list[str] = []
        for idx, item in enumerate(value):
            errors.extend(shape_violations(item, shape.item, f"{path}[{idx}]"))
        return errors

    if isinstance(shape, OneOf):
        if any(not shape_violations(value, option, path) for option in shape.options):
            return []
        count = len(shape.options)
        return [f"Expected {where} to match one of {count} shapes but got {_type_name(value)}"]

    if isinstance(shape, RecordShape):
        if not isinstance(value, Mapping):
            return [f"Expected {where} to be a {shape.name} mapping but got {_type_name(value)}"]
        errors = []
        declared = [name for name, _ in shape.fields]
        for name, field_shape in shape.fields:
            field_path = f"{path}.{name}" if path else name
            if name not in value:
                errors.append(f"Expected {field_path} to be present in {shape.name}")
                continue
            errors.extend(shape_violations(value[name], field_shape, field_path))
        for name in value:
            if name not in declared:
                errors.append(f"Unexpected field {name!r} in {shape.name}")
        return errors

    raise TypeError(f"Unknown shape: {shape!r}")


def validate_page_mapping(record: Any, shape: RecordShape = PAGE_SHAPE) -> PageRecord:
    """Validate a record mapping and convert it into a :class:`PageRecord`.

    Args:
        record: Builder output, or a decoded data cache entry.
        shape: ``PAGE_SHAPE`` for builder output, ``CACHED_PAGE_SHAPE`` for the cache.

    Raises:
        StructuralDefectError: If the record does not match ``shape``.
    """

    errors = shape_violations(record, shape)
    if errors:
        label = "page record"
        if isinstance(record, Mapping):
            label = f"page record #{record.get('index')} {record.get('character', '')}".rstrip()
        raise StructuralDefectError(label, errors)
    return PageRecord.from_mapping(record)


def missing_indexes(records: Sequence[PageRecord]) -> list[int]:
    """Compute missing page indexes in the observed index range.

    Args:
        records: Accepted records.

    Returns:
        Missing integer indexes between min/max observed values.
    """

    if not records:
        return []

    observed = {record.index for record in records}
    return [idx for idx in range(min(observed), max(observed) + 1) if idx not in observed]


def duplicate_indexes(records: Sequence[PageRecord]) -> list[int]:
    """Indexes claimed by more than one accepted record, ascending."""

    counter = Counter(record.index for record in records)
    return sorted(index for index, count in counter.items() if count > 1)
