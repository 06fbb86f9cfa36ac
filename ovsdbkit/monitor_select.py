"""Monitor select: which kinds of changes a monitor reports."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .types import NotationError

_FIELDS = ("initial", "insert", "delete", "modify")


class MonitorSelect:
    """Flags for a monitor request; an unset flag counts as True."""

    __slots__ = ("_initial", "_insert", "_delete", "_modify")

    def __init__(
        self,
        initial: bool | None = None,
        insert: bool | None = None,
        delete: bool | None = None,
        modify: bool | None = None,
    ) -> None:
        self._initial = initial
        self._insert = insert
        self._delete = delete
        self._modify = modify

    @classmethod
    def default(cls) -> MonitorSelect:
        """A select with every flag explicitly set to True."""
        return cls(True, True, True, True)

    def initial(self) -> bool:
        """Whether an initial response will be sent."""
        return True if self._initial is None else self._initial

    def insert(self) -> bool:
        """Whether inserts are reported."""
        return True if self._insert is None else self._insert

    def delete(self) -> bool:
        """Whether deletions are reported."""
        return True if self._delete is None else self._delete

    def modify(self) -> bool:
        """Whether modifications are reported."""
        return True if self._modify is None else self._modify

    def _raw(self) -> tuple:
        return (self._initial, self._insert, self._delete, self._modify)

    def to_json(self) -> dict:
        return {name: val for name, val in zip(_FIELDS, self._raw()) if val is not None}

    @classmethod
    def from_json(cls, data: Any) -> MonitorSelect:
        if not isinstance(data, Mapping):
            raise NotationError(f"{data!r} is not a monitor select object")
        values = {}
        for name in _FIELDS:
            val = data.get(name)
            if val is not None and not isinstance(val, bool):
                raise NotationError(f"monitor select field {name} must be a boolean")
            values[name] = val
        return cls(**values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MonitorSelect):
            return NotImplemented
        return self._raw() == other._raw()

    def __hash__(self) -> int:
        return hash(self._raw())

    def __repr__(self) -> str:
        parts = ", ".join(f"{n}={v!r}" for n, v in zip(_FIELDS, self._raw()))
        return f"MonitorSelect({parts})"