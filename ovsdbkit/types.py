"""Core OVSDB notation types: UUIDs, sets, maps and rows, plus JSON helpers."""

from __future__ import annotations

import enum
import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

_VALID_UUID = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
)
_UUID_TAGS = ("uuid", "named-uuid")


class NotationError(ValueError):
    """Raised when a value does not follow OVSDB JSON notation."""


def is_named(uuid: str) -> bool:
    """Return True if ``uuid`` is a non-empty name rather than a real UUID."""
    return len(uuid) > 0 and _VALID_UUID.fullmatch(uuid) is None


@dataclass(frozen=True)
class UUID:
    """An OVSDB UUID, either a real one or a named-uuid."""

    value: str

    def validate(self) -> None:
        """Raise NotationError unless the value is a well-formed UUID."""
        if len(self.value) != 36:
            raise NotationError("uuid must be exactly 36 characters long")
        if _VALID_UUID.fullmatch(self.value) is None:
            raise NotationError("uuid does not match the expected format")

    def to_json(self) -> list[str]:
        tag = "uuid" if _VALID_UUID.fullmatch(self.value) else "named-uuid"
        return [tag, self.value]

    @classmethod
    def from_json(cls, data: Any) -> UUID:
        if (
            not isinstance(data, (list, tuple))
            or len(data) < 2
            or not all(isinstance(part, str) for part in data)
        ):
            raise NotationError(f"{data!r} is not an OVSDB uuid")
        return cls(data[1])

    def __str__(self) -> str:
        return self.value


@dataclass
class OvsSet:
    """An OVSDB set; a single-element set is written as the bare atom."""

    items: list = field(default_factory=list)

    def to_json(self) -> Any:
        if len(self.items) == 1:
            return to_jsonable(self.items[0])
        return ["set", [to_jsonable(item) for item in self.items]]

    @classmethod
    def from_json(cls, data: Any) -> OvsSet:
        if isinstance(data, list):
            if len(data) == 2 and data[0] in _UUID_TAGS:
                return cls([UUID.from_json(data)])
            if len(data) != 2 or data[0] != "set" or not isinstance(data[1], list):
                raise NotationError(f"{data!r} is not an OVSDB set")
            return cls([decode_value(item) for item in data[1]])
        return cls([decode_value(data)])


@dataclass
class OvsMap:
    """An OVSDB map, written as ``["map", [[key, value], ...]]``."""

    items: dict = field(default_factory=dict)

    def to_json(self) -> list:
        return [
            "map",
            [[to_jsonable(key), to_jsonable(val)] for key, val in self.items.items()],
        ]

    @classmethod
    def from_json(cls, data: Any) -> OvsMap:
        if not isinstance(data, list):
            raise NotationError(f"{data!r} is not an OVSDB map")
        items: dict = {}
        if len(data) > 1:
            pairs = data[1]
            if not isinstance(pairs, list):
                raise NotationError(f"{data!r} is not an OVSDB map")
            for pair in pairs:
                if not isinstance(pair, list) or len(pair) != 2:
                    raise NotationError(f"{pair!r} is not a map pair")
                key, val = pair
                if isinstance(val, list):
                    if len(val) != 2 or val[0] == "map":
                        raise NotationError(f"{val!r} is not a valid map value")
                    val = decode_value(val)
                if isinstance(key, list):
                    key = decode_value(key)
                try:
                    hash(key)
                except TypeError:
                    raise NotationError(f"{key!r} cannot be a map key") from None
                items[key] = val
        return cls(items)


class Row(dict):
    """A table row: column name to value."""

    @classmethod
    def from_json(cls, data: Any) -> Row:
        if not isinstance(data, Mapping):
            raise NotationError(f"{data!r} is not an OVSDB row")
        return cls({key: decode_value(val) for key, val in data.items()})


def new_ovs_set(obj: Any) -> OvsSet:
    """Build an OvsSet from a sequence or a single atomic value."""
    if isinstance(obj, (list, tuple)):
        return OvsSet(list(obj))
    if isinstance(obj, (str, int, float, bool, UUID)):
        return OvsSet([obj])
    raise TypeError("an OVSDB set can only be built from sequences, strings, numbers or UUIDs")


def new_ovs_map(obj: Any) -> OvsMap:
    """Build an OvsMap from a mapping."""
    if not isinstance(obj, Mapping):
        raise TypeError("an OVSDB map can only be built from a mapping")
    return OvsMap(dict(obj))


def to_jsonable(value: Any) -> Any:
    """Convert a value holding OVSDB objects into plain JSON-ready data."""
    if isinstance(value, enum.Enum):
        return to_jsonable(value.value)
    to_json = getattr(value, "to_json", None)
    if callable(to_json) and not isinstance(value, type):
        return to_jsonable(to_json())
    if isinstance(value, Row):
        return {key: to_jsonable(value[key]) for key in sorted(value)}
    if isinstance(value, Mapping):
        return {key: to_jsonable(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


def dumps(value: Any) -> str:
    """Serialise a value to compact OVSDB JSON text."""
    return json.dumps(to_jsonable(value), separators=(",", ":"))


def decode_value(value: Any) -> Any:
    """Turn tagged JSON arrays (uuid, set, map) into their OVSDB objects."""
    if isinstance(value, list) and value:
        tag = value[0]
        if tag in _UUID_TAGS:
            return UUID.from_json(value)
        if tag == "set":
            return OvsSet.from_json(value)
        if tag == "map":
            return OvsMap.from_json(value)
    return value


def _uuid_of(pair: Any) -> UUID:
    if not isinstance(pair, (list, tuple)) or len(pair) < 2 or not isinstance(pair[1], str):
        raise NotationError(f"{pair!r} is not an OVSDB uuid")
    return UUID(pair[1])


def parse_notation(value: Any) -> Any:
    """Parse a decoded JSON value into a scalar, UUID, OvsSet or OvsMap."""
    if not isinstance(value, (list, tuple)):
        return value
    if not value or not isinstance(value[0], str):
        raise NotationError(f"first element of array is not a string: {value!r}")
    tag = value[0]
    if len(value) < 2:
        raise NotationError(f"{tag} notation needs a second element: {value!r}")
    if tag in _UUID_TAGS:
        return _uuid_of(value)
    if tag == "set":
        second = value[1]
        if not isinstance(second, (list, tuple)):
            raise NotationError("second element of set is not an array")
        if not second or not isinstance(second[0], (list, tuple)):
            return OvsSet(list(second))
        return OvsSet([_uuid_of(item) for item in second])
    if tag == "map":
        second = value[1]
        if not isinstance(second, (list, tuple)):
            raise NotationError("second element of map is not an array")
        items: dict = {}
        for pair in second:
            if not isinstance(pair, (list, tuple)) or len(pair) < 2:
                raise NotationError(f"{pair!r} is not a map pair")
            key, val = pair[0], pair[1]
            if isinstance(key, (list, tuple)):
                key = _uuid_of(key)
            if isinstance(val, (list, tuple)):
                val = _uuid_of(val)
            items[key] = val
        return OvsMap(items)
    raise NotationError(
        f"unsupported notation. expected <uuid>,<named-uuid>,<set> or <map>. got {value!r}"
    )