"""Property values attached to graph nodes.

A predicate maps to exactly one ``PropertyValue``, which is one of four
variants:

- ``Scalar``: a single literal (string, number, boolean or null)
- ``ObjectRef``: a single reference to another node identifier
- ``ScalarArray``: an ordered list of literals
- ``RefArray``: an ordered list of node identifiers

Arrays never mix literals and references. Every consumer handles all four
variants and rejects anything else with ``TypeError``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Union

# A literal value. ``None`` is the explicit JSON ``null``.
ScalarValue = Union[str, float, bool, None]

NodeId = str


def scalar_kind(value: ScalarValue) -> str:
    """Return the kind tag of a scalar: string, number, boolean or null."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    raise TypeError(f"unsupported scalar value: {value!r}")


def normalize_scalar(value: Any) -> ScalarValue:
    """Coerce a Python value into a scalar, turning integers into floats."""
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, (int, float)):
        return float(value)
    raise TypeError(f"unsupported scalar value: {value!r}")


def scalar_to_json(value: ScalarValue) -> Any:
    """Return the JSON representation of a scalar.

    Non-finite numbers have no JSON form and are emitted as ``null``.
    """
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _scalar_key(value: ScalarValue) -> tuple[str, ScalarValue]:
    return (scalar_kind(value), value)


@dataclass(frozen=True, eq=False)
class Scalar:
    """A single literal value."""

    value: ScalarValue

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", normalize_scalar(self.value))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Scalar):
            return NotImplemented
        return _scalar_key(self.value) == _scalar_key(other.value)

    def __hash__(self) -> int:
        return hash(_scalar_key(self.value))


@dataclass(frozen=True)
class ObjectRef:
    """A reference to another node by identifier."""

    target: NodeId


@dataclass(frozen=True, eq=False)
class ScalarArray:
    """An ordered list of literal values."""

    items: tuple[ScalarValue, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(normalize_scalar(item) for item in self.items))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScalarArray):
            return NotImplemented
        return [_scalar_key(item) for item in self.items] == [
            _scalar_key(item) for item in other.items
        ]

    def __hash__(self) -> int:
        return hash(tuple(_scalar_key(item) for item in self.items))

    def append(self, value: ScalarValue) -> ScalarArray:
        return ScalarArray(self.items + (value,))


@dataclass(frozen=True)
class RefArray:
    """An ordered list of node references."""

    targets: tuple[NodeId, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "targets", tuple(self.targets))

    def append(self, target: NodeId) -> RefArray:
        return RefArray(self.targets + (target,))


ArrayValue = Union[ScalarArray, RefArray]
PropertyValue = Union[Scalar, ObjectRef, ScalarArray, RefArray]
