"""OVSDB conditions (where clauses) and their evaluation."""

from __future__ import annotations

import enum
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .types import NotationError, parse_notation, to_jsonable


class ConditionFunction(str, enum.Enum):
    """The comparison functions a condition may use."""

    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    EQUAL = "=="
    NOT_EQUAL = "!="
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="
    INCLUDES = "includes"
    EXCLUDES = "excludes"

    def __str__(self) -> str:
        return self.value

    def evaluate(self, a: Any, b: Any) -> bool:
        """Apply this function to ``a`` and ``b``.

        Raises TypeError when the two values have different kinds or the
        function is not defined for their kind.
        """
        kind_a, kind_b = _kind(a), _kind(b)
        if kind_a != kind_b:
            raise TypeError(f"comparison between {kind_a} and {kind_b} not supported")

        if self is ConditionFunction.EQUAL:
            return _deep_equal(a, b)
        if self is ConditionFunction.NOT_EQUAL:
            return not _deep_equal(a, b)
        if self in (ConditionFunction.INCLUDES, ConditionFunction.EXCLUDES):
            if kind_a == "slice":
                found = slice_contains(a, b)
            elif kind_a == "map":
                found = map_contains(a, b)
            elif kind_a in ("int", "float", "bool", "string"):
                found = _deep_equal(a, b)
            else:
                raise TypeError(f"condition not supported on {kind_a}")
            return found if self is ConditionFunction.INCLUDES else not found

        if kind_a not in ("int", "float"):
            raise TypeError(f"condition {self.value} not supported on {kind_a}")
        if self is ConditionFunction.GREATER_THAN:
            return a > b
        if self is ConditionFunction.GREATER_THAN_OR_EQUAL:
            return a >= b
        if self is ConditionFunction.LESS_THAN:
            return a < b
        return a <= b


def _kind(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "map"
    if isinstance(value, (list, tuple)):
        return "slice"
    return type(value).__name__


def _deep_equal(a: Any, b: Any) -> bool:
    kind = _kind(a)
    if kind != _kind(b):
        return False
    if kind == "map":
        return a.keys() == b.keys() and all(_deep_equal(a[k], b[k]) for k in a)
    if kind == "slice":
        return len(a) == len(b) and all(_deep_equal(x, y) for x, y in zip(a, b))
    return a == b


def slice_contains(x: Sequence, y: Sequence) -> bool:
    """Return True if every element of ``y`` is present in ``x``."""
    return all(any(_deep_equal(have, want) for have in x) for want in y)


def map_contains(x: Mapping, y: Mapping) -> bool:
    """Return True if every key/value pair of ``y`` is present in ``x``."""
    return all(key in x and _deep_equal(x[key], val) for key, val in y.items())


@dataclass
class Condition:
    """A condition on a column, serialised as a 3-element JSON array."""

    column: str
    function: ConditionFunction
    value: Any

    def __post_init__(self) -> None:
        self.function = ConditionFunction(self.function)

    def __str__(self) -> str:
        return f"where column {self.column} {self.function.value} {self.value}"

    def to_json(self) -> list:
        return [self.column, self.function.value, to_jsonable(self.value)]

    @classmethod
    def from_json(cls, data: Any) -> Condition:
        if not isinstance(data, (list, tuple)):
            raise NotationError(f"expected a 3 element json array, got {data!r}")
        if len(data) != 3:
            raise NotationError(
                f"expected a 3 element json array. there are {len(data)} elements"
            )
        column, function, value = data
        if not isinstance(column, str):
            raise NotationError(f"expected column name {column!r} to be a string")
        try:
            func = ConditionFunction(function)
        except ValueError:
            raise NotationError(f"{function} is not a valid function") from None
        return cls(column, func, parse_notation(value))