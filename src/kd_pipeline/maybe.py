"""Optional value container used to thread fallible extraction steps.

``Maybe`` has exactly two concrete variants: :class:`Present`, wrapping a value,
and :class:`Absent`, carrying nothing. Extraction code chains combinators on a
``Maybe`` so that the first missing field short-circuits the whole chain without
raising. Absence is the only "no value" channel; exceptions raised by the
callables passed to the combinators are defects and propagate untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, Sequence, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class MaybeError(Exception):
    """Base class for misuse of the ``Maybe`` combinators."""


class MustReturnMaybeError(MaybeError, TypeError):
    """A callable that must produce a ``Maybe`` returned something else."""


class UnexpectedNoneError(MaybeError, ValueError):
    """A ``map`` callable returned ``None`` instead of a value."""


class ValueMustBeMappingError(MaybeError, TypeError):
    """``assign`` was called on a value that is not a mapping."""


def _ensure_maybe(result: object) -> Maybe[Any]:
    if isinstance(result, Maybe):
        return result
    raise MustReturnMaybeError(f"Expected a Maybe but got {type(result).__name__}")


class Maybe(Generic[T]):
    """Common interface of :class:`Present` and :class:`Absent`."""

    __slots__ = ()

    def is_present(self) -> bool:
        raise NotImplementedError

    def map(self, func: Callable[[T], U]) -> Maybe[U]:
        raise NotImplementedError

    def and_then(self, func: Callable[[T], Maybe[U]]) -> Maybe[U]:
        raise NotImplementedError

    def or_else(self, func: Callable[[], Maybe[T]]) -> Maybe[T]:
        raise NotImplementedError

    def get_or_else(self, default: T) -> T:
        raise NotImplementedError

    def get_or_else_get(self, func: Callable[[], T]) -> T:
        raise NotImplementedError

    def assign(self, key: str, func: Callable[[Mapping[str, Any]], Maybe[Any]]) -> Maybe[dict]:
        raise NotImplementedError

    def effect(self, func: Callable[[T], object]) -> Maybe[T]:
        raise NotImplementedError

    def on_absent_effect(self, func: Callable[[], object]) -> Maybe[T]:
        raise NotImplementedError

    def to_json(self) -> dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class Present(Maybe[T]):
    """A container holding a value."""

    value: T

    def is_present(self) -> bool:
        return True

    def map(self, func: Callable[[T], U]) -> Maybe[U]:
        """Transform the value with a callable that cannot fail.

        Raises:
            UnexpectedNoneError: If ``func`` returns ``None``. Callables that
                may legitimately find nothing must be used with ``and_then``.
        """

        result = func(self.value)
        if result is None:
            raise UnexpectedNoneError("map callable unexpectedly returned None")
        return Present(result)

    def and_then(self, func: Callable[[T], Maybe[U]]) -> Maybe[U]:
        return _ensure_maybe(func(self.value))

    def or_else(self, func: Callable[[], Maybe[T]]) -> Maybe[T]:
        return self

    def get_or_else(self, default: T) -> T:
        return self.value

    def get_or_else_get(self, func: Callable[[], T]) -> T:
        return self.value

    def assign(self, key: str, func: Callable[[Mapping[str, Any]], Maybe[Any]]) -> Maybe[dict]:
        """Add ``key`` to the wrapped record using the result of ``func``.

        Args:
            key: Field name to add.
            func: Callable receiving the current record and returning a ``Maybe``
                for the new field.

        Returns:
            ``Present`` of a new dict with ``key`` set, or ``Absent`` when
            ``func`` found nothing. The wrapped record itself is not mutated.

        Raises:
            ValueMustBeMappingError: If the wrapped value is not a mapping.
            MustReturnMaybeError: If ``func`` does not return a ``Maybe``.
        """

        if not isinstance(self.value, Mapping):
            raise ValueMustBeMappingError(
                f"assign requires a mapping but got {type(self.value).__name__}"
            )
        record = self.value
        return _ensure_maybe(func(record)).map(lambda field: {**record, key: field})

    def effect(self, func: Callable[[T], object]) -> Maybe[T]:
        func(self.value)
        return self

    def on_absent_effect(self, func: Callable[[], object]) -> Maybe[T]:
        return self

    def to_json(self) -> dict[str, Any]:
        return {"kind": "some", "value": self.value}


@dataclass(frozen=True)
class Absent(Maybe[T]):
    """A container holding nothing."""

    def is_present(self) -> bool:
        return False

    def map(self, func: Callable[[T], U]) -> Maybe[U]:
        return Absent()

    def and_then(self, func: Callable[[T], Maybe[U]]) -> Maybe[U]:
        return Absent()

    def or_else(self, func: Callable[[], Maybe[T]]) -> Maybe[T]:
        return _ensure_maybe(func())

    def get_or_else(self, default: T) -> T:
        return default

    def get_or_else_get(self, func: Callable[[], T]) -> T:
        return func()

    def assign(self, key: str, func: Callable[[Mapping[str, Any]], Maybe[Any]]) -> Maybe[dict]:
        return Absent()

    def effect(self, func: Callable[[T], object]) -> Maybe[T]:
        return self

    def on_absent_effect(self, func: Callable[[], object]) -> Maybe[T]:
        func()
        return self

    def to_json(self) -> dict[str, Any]:
        return {"kind": "none"}


def present(value: T) -> Maybe[T]:
    """Wrap ``value``; ``None`` is rejected because it is not a value."""

    if value is None:
        raise UnexpectedNoneError("present() requires a value, got None")
    return Present(value)


def from_optional(value: T | None) -> Maybe[T]:
    """Convert a plain optional into a ``Maybe``."""

    return Absent() if value is None else Present(value)


def from_text(text: str | None) -> Maybe[str]:
    """Trim ``text`` and drop carriage returns; empty results become ``Absent``."""

    if text is None:
        return Absent()
    cleaned = text.strip().replace("\r", "")
    return Present(cleaned) if cleaned else Absent()


def head(items: Sequence[T]) -> Maybe[T]:
    """Return the first element of a sequence, if any."""

    return Present(items[0]) if items else Absent()


def maybe_from_json(payload: Mapping[str, Any]) -> Maybe[Any]:
    """Decode the ``{"kind": "some"|"none"}`` form produced by ``to_json``.

    A blank text value decodes to ``Absent``, like every other empty field.

    Raises:
        ValueError: If ``payload`` is not a recognized ``Maybe`` encoding.
    """

    kind = payload.get("kind")
    if kind == "some" and "value" in payload:
        value = payload["value"]
        return from_text(value) if isinstance(value, str) else present(value)
    if kind == "none":
        return Absent()
    raise ValueError(f"Not a Maybe encoding: {dict(payload)!r}")
