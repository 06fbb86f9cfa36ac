"""OVSDB mutations, serialised as 3-element JSON arrays."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from .types import NotationError, parse_notation, to_jsonable


class Mutator(str, enum.Enum):
    """The mutators a mutation may apply."""

    DELETE = "delete"
    INSERT = "insert"
    ADD = "+="
    SUBTRACT = "-="
    MULTIPLY = "*="
    DIVIDE = "/="
    MODULO = "%="

    def __str__(self) -> str:
        return self.value


@dataclass
class Mutation:
    """A mutation of one column."""

    column: str
    mutator: Mutator
    value: Any

    def __post_init__(self) -> None:
        self.mutator = Mutator(self.mutator)

    def to_json(self) -> list:
        return [self.column, self.mutator.value, to_jsonable(self.value)]

    @classmethod
    def from_json(cls, data: Any) -> Mutation:
        if not isinstance(data, (list, tuple)):
            raise NotationError(f"expected a 3 element json array, got {data!r}")
        if len(data) != 3:
            raise NotationError(
                f"expected a 3 element json array. there are {len(data)} elements"
            )
        column, mutator, value = data
        if not isinstance(column, str):
            raise NotationError(f"expected column name {column!r} to be a valid string")
        if not isinstance(mutator, str):
            raise NotationError(f"expected mutator {mutator!r} to be a valid string")
        try:
            mut = Mutator(mutator)
        except ValueError:
            raise NotationError(f"{mutator} is not a valid mutator") from None
        return cls(column, mut, parse_notation(value))