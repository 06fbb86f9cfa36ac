"""OVSDB database schemas: base types, column types, columns and tables."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import IO, Any

from .operation import (
    OPERATION_ABORT,
    OPERATION_ASSERT,
    OPERATION_COMMENT,
    OPERATION_COMMIT,
    OPERATION_DELETE,
    OPERATION_INSERT,
    OPERATION_MUTATE,
    OPERATION_SELECT,
    OPERATION_UPDATE,
    OPERATION_WAIT,
    Operation,
)
from .types import NotationError, OvsSet

TYPE_INTEGER = "integer"
TYPE_REAL = "real"
TYPE_BOOLEAN = "boolean"
TYPE_STRING = "string"
TYPE_UUID = "uuid"
TYPE_ENUM = "enum"
TYPE_MAP = "map"
TYPE_SET = "set"

STRONG = "strong"
WEAK = "weak"

UNLIMITED = -1
_UNLIMITED_STRING = "unlimited"

_ATOMIC_TYPES = frozenset({TYPE_INTEGER, TYPE_REAL, TYPE_BOOLEAN, TYPE_STRING, TYPE_UUID})
_IMPLICIT_COLUMNS = frozenset({"_uuid", "_version"})

_SMALLEST_NONZERO_REAL = 5e-324
_MAX_REAL = 1.7976931348623157e308
_MIN_INT64 = -(2**63)
_MAX_INT64 = 2**63 - 1


def is_atomic_type(atype: str) -> bool:
    """Return True if ``atype`` is one of the RFC 7047 atomic types."""
    return atype in _ATOMIC_TYPES


def _opt_int(data: Mapping, key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise NotationError(f"field {key} must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise NotationError(f"field {key} must be an integer")
    return int(value)


def _opt_float(data: Mapping, key: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise NotationError(f"field {key} must be a number")
    return float(value)


def _opt_str(data: Mapping, key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise NotationError(f"field {key} must be a string")
    return value


def _opt_bool(data: Mapping, key: str) -> bool | None:
    value = data.get(key)
    if value is not None and not isinstance(value, bool):
        raise NotationError(f"field {key} must be a boolean")
    return value


class _Comparable:
    __slots__ = ()

    def _key(self) -> tuple:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._key() == other._key()

    __hash__ = None  # type: ignore[assignment]


_BASE_FIELDS = (
    "min_real",
    "max_real",
    "min_integer",
    "max_integer",
    "min_length",
    "max_length",
    "ref_table",
    "ref_type",
)
_BASE_JSON_NAMES = {
    "min_real": "minReal",
    "max_real": "maxReal",
    "min_integer": "minInteger",
    "max_integer": "maxInteger",
    "min_length": "minLength",
    "max_length": "maxLength",
    "ref_table": "refTable",
    "ref_type": "refType",
}


class BaseType(_Comparable):
    """A base type: an atomic type with optional constraints."""

    __slots__ = ("type", "enum", *(f"_{name}" for name in _BASE_FIELDS))

    def __init__(
        self,
        type: str = "",
        enum: list | None = None,
        *,
        min_real: float | None = None,
        max_real: float | None = None,
        min_integer: int | None = None,
        max_integer: int | None = None,
        min_length: int | None = None,
        max_length: int | None = None,
        ref_table: str | None = None,
        ref_type: str | None = None,
    ) -> None:
        self.type = type
        self.enum = list(enum) if enum is not None else None
        self._min_real = min_real
        self._max_real = max_real
        self._min_integer = min_integer
        self._max_integer = max_integer
        self._min_length = min_length
        self._max_length = max_length
        self._ref_table = ref_table
        self._ref_type = ref_type

    def _constraints(self) -> tuple:
        return tuple(getattr(self, f"_{name}") for name in _BASE_FIELDS)

    def _key(self) -> tuple:
        return (self.type, self.enum, *self._constraints())

    def __repr__(self) -> str:
        parts = [f"type={self.type!r}"]
        if self.enum is not None:
            parts.append(f"enum={self.enum!r}")
        for name, value in zip(_BASE_FIELDS, self._constraints()):
            if value is not None:
                parts.append(f"{name}={value!r}")
        return f"BaseType({', '.join(parts)})"

    def simple_atomic(self) -> bool:
        """True if this is a bare atomic type without any constraint."""
        return (
            is_atomic_type(self.type)
            and self.enum is None
            and all(value is None for value in self._constraints())
        )

    def _require(self, expected: str, article: str) -> None:
        if self.type != expected:
            raise TypeError(f"{self.type} is not {article} {expected}")

    def min_real(self) -> float:
        """Minimum real value; defaults to the smallest positive float."""
        self._require(TYPE_REAL, "a")
        return self._min_real if self._min_real is not None else _SMALLEST_NONZERO_REAL

    def max_real(self) -> float:
        """Maximum real value; defaults to the largest float."""
        self._require(TYPE_REAL, "a")
        return self._max_real if self._max_real is not None else _MAX_REAL

    def min_integer(self) -> int:
        """Minimum integer value; defaults to -2**63."""
        self._require(TYPE_INTEGER, "an")
        return self._min_integer if self._min_integer is not None else _MIN_INT64

    def max_integer(self) -> int:
        """Maximum integer value; defaults to 2**63 - 1."""
        self._require(TYPE_INTEGER, "an")
        return self._max_integer if self._max_integer is not None else _MAX_INT64

    def min_length(self) -> int:
        """Minimum string length; defaults to 0."""
        self._require(TYPE_STRING, "a")
        return self._min_length if self._min_length is not None else 0

    def max_length(self) -> int:
        """Maximum string length; defaults to 2**63 - 1."""
        self._require(TYPE_STRING, "a")
        return self._max_length if self._max_length is not None else _MAX_INT64

    def ref_table(self) -> str:
        """Table a uuid refers to, or an empty string."""
        self._require(TYPE_UUID, "a")
        return self._ref_table if self._ref_table is not None else ""

    def ref_type(self) -> str:
        """Reference type of a uuid; strong when unset."""
        self._require(TYPE_UUID, "a")
        return self._ref_type if self._ref_type is not None else STRONG

    def to_json(self) -> dict:
        out: dict = {}
        if self.type:
            out["type"] = self.type
        if self.enum:
            out["enum"] = OvsSet(list(self.enum)).to_json()
        for name, value in zip(_BASE_FIELDS, self._constraints()):
            if value is not None:
                out[_BASE_JSON_NAMES[name]] = value
        return out

    @classmethod
    def from_json(cls, data: Any) -> BaseType:
        if isinstance(data, str):
            if not is_atomic_type(data):
                raise NotationError(f"non atomic type {data} in <base-type>")
            return cls(data)
        if not isinstance(data, Mapping):
            raise NotationError(f"{data!r} is not a <base-type>")
        enum = None
        raw_enum = data.get("enum")
        if raw_enum is not None:
            if isinstance(raw_enum, list):
                if len(raw_enum) != 2 or raw_enum[0] != "set" or not isinstance(raw_enum[1], list):
                    raise NotationError(f"{raw_enum!r} is not a valid enum set")
                enum = list(raw_enum[1])
            else:
                enum = [raw_enum]
        return cls(
            _opt_str(data, "type") or "",
            enum,
            min_real=_opt_float(data, "minReal"),
            max_real=_opt_float(data, "maxReal"),
            min_integer=_opt_int(data, "minInteger"),
            max_integer=_opt_int(data, "maxInteger"),
            min_length=_opt_int(data, "minLength"),
            max_length=_opt_int(data, "maxLength"),
            ref_table=_opt_str(data, "refTable"),
            ref_type=_opt_str(data, "refType"),
        )


class ColumnType(_Comparable):
    """A column's type object: key, optional value, and min/max counts."""

    __slots__ = ("key", "value", "_min", "_max")

    def __init__(
        self,
        key: BaseType | None = None,
        value: BaseType | None = None,
        *,
        min: int | None = None,
        max: int | None = None,
    ) -> None:
        self.key = key
        self.value = value
        self._min = min
        self._max = max

    def _key(self) -> tuple:
        return (self.key, self.value, self._min, self._max)

    def __repr__(self) -> str:
        return (
            f"ColumnType(key={self.key!r}, value={self.value!r}, "
            f"min={self._min!r}, max={self._max!r})"
        )

    def max(self) -> int:
        """Maximum number of elements; -1 means unlimited, default 1."""
        return 1 if self._max is None else self._max

    def min(self) -> int:
        """Minimum number of elements; default 1."""
        return 1 if self._min is None else self._min

    def to_json(self) -> Any:
        if (
            self.value is None
            and self._max is None
            and self._min is None
            and self.key is not None
            and self.key.simple_atomic()
        ):
            return self.key.type
        out: dict = {"key": self.key.to_json() if self.key is not None else None}
        if self.value is not None:
            out["value"] = self.value.to_json()
        if self._min is not None:
            out["min"] = self._min
        if self.max() == UNLIMITED:
            out["max"] = _UNLIMITED_STRING
        elif self._max is not None:
            out["max"] = self._max
        return out

    @classmethod
    def from_json(cls, data: Any) -> ColumnType:
        if isinstance(data, str):
            if not is_atomic_type(data):
                raise NotationError(f"non atomic type {data} in <type>")
            return cls(BaseType(data))
        if not isinstance(data, Mapping):
            raise NotationError(f"{data!r} is not a <type>")
        if data.get("key") is None:
            raise NotationError("a <type> needs a key")
        key = BaseType.from_json(data["key"])
        value = BaseType.from_json(data["value"]) if data.get("value") is not None else None
        raw_max = data.get("max")
        if isinstance(raw_max, str):
            if raw_max != _UNLIMITED_STRING:
                raise NotationError("unexpected string value in max field")
            max_ = UNLIMITED
        elif isinstance(raw_max, (int, float)) and not isinstance(raw_max, bool):
            max_ = int(raw_max)
        else:
            max_ = None
        return cls(key, value, min=_opt_int(data, "min"), max=max_)


class ColumnSchema(_Comparable):
    """A column: its extended type, type object and flags."""

    __slots__ = ("type", "type_obj", "_ephemeral", "_mutable")

    def __init__(
        self,
        type: str = "",
        type_obj: ColumnType | None = None,
        *,
        ephemeral: bool | None = None,
        mutable: bool | None = None,
    ) -> None:
        self.type = type
        self.type_obj = type_obj
        self._ephemeral = ephemeral
        self._mutable = mutable

    def _key(self) -> tuple:
        return (self.type, self.type_obj, self._ephemeral, self._mutable)

    def __repr__(self) -> str:
        return (
            f"ColumnSchema(type={self.type!r}, type_obj={self.type_obj!r}, "
            f"ephemeral={self._ephemeral!r}, mutable={self._mutable!r})"
        )

    def mutable(self) -> bool:
        """Whether the column may be mutated; default True."""
        return True if self._mutable is None else self._mutable

    def ephemeral(self) -> bool:
        """Whether the column is ephemeral; default False."""
        return False if self._ephemeral is None else self._ephemeral

    def to_json(self) -> dict:
        out: dict = {"type": self.type_obj.to_json() if self.type_obj is not None else None}
        if self._ephemeral is not None:
            out["ephemeral"] = self._ephemeral
        if self._mutable is not None:
            out["mutable"] = self._mutable
        return out

    @classmethod
    def from_json(cls, data: Any) -> ColumnSchema:
        if not isinstance(data, Mapping):
            raise NotationError(f"cannot parse column object {data!r}")
        if data.get("type") is None:
            raise NotationError("cannot parse column object: missing type")
        type_obj = ColumnType.from_json(data["type"])
        if type_obj.value is not None:
            ext = TYPE_MAP
        elif type_obj.min() != 1 or type_obj.max() != 1:
            ext = TYPE_SET
        elif type_obj.key.enum:
            ext = TYPE_ENUM
        else:
            ext = type_obj.key.type
        return cls(
            ext,
            type_obj,
            ephemeral=_opt_bool(data, "ephemeral"),
            mutable=_opt_bool(data, "mutable"),
        )

    def __str__(self) -> str:
        flags = []
        if self.ephemeral():
            flags.append("E")
        if self.mutable():
            flags.append("M")
        flag_str = f"[{','.join(flags)}]" if flags else ""

        if self.type in (TYPE_INTEGER, TYPE_REAL, TYPE_BOOLEAN, TYPE_STRING):
            type_str = self.type
        elif self.type == TYPE_UUID:
            if self.type_obj is not None and self.type_obj.key is not None:
                key = self.type_obj.key
                type_str = f"uuid [{key.ref_table()} ({key.ref_type()})]"
            else:
                type_str = "uuid"
        elif self.type == TYPE_ENUM:
            key = self.type_obj.key
            values = " ".join(str(v) for v in key.enum or [])
            type_str = f"enum (type: {key.type}): [{values}]"
        elif self.type == TYPE_MAP:
            type_str = f"[{self.type_obj.key.type}]{self.type_obj.value.type}"
        elif self.type == TYPE_SET:
            key = self.type_obj.key
            if key.type == TYPE_UUID:
                key_str = f" [{key.ref_table()} ({key.ref_type()})]"
            else:
                key_str = key.type
            type_str = f"[]{key_str} (min: {self.type_obj.min()}, max: {self.type_obj.max()})"
        else:
            raise ValueError(f"Unsupported type {self.type}")
        return f"{type_str} {flag_str}"


UUID_COLUMN = ColumnSchema(TYPE_UUID)


@dataclass
class TableSchema:
    """A table: its columns and indexes."""

    columns: dict[str, ColumnSchema] = field(default_factory=dict)
    indexes: list[list[str]] | None = None

    def column(self, name: str) -> ColumnSchema | None:
        """Return the column called ``name``; ``_uuid`` always exists."""
        if name == "_uuid":
            return UUID_COLUMN
        return self.columns.get(name)

    def to_json(self) -> dict:
        out: dict = {"columns": {name: col.to_json() for name, col in self.columns.items()}}
        if self.indexes:
            out["indexes"] = [list(index) for index in self.indexes]
        return out

    @classmethod
    def from_json(cls, data: Any) -> TableSchema:
        if not isinstance(data, Mapping):
            raise NotationError(f"{data!r} is not a table schema")
        columns = data.get("columns") or {}
        if not isinstance(columns, Mapping):
            raise NotationError("table columns must be an object")
        indexes = data.get("indexes")
        if indexes is not None:
            if not isinstance(indexes, list) or not all(
                isinstance(index, list) and all(isinstance(c, str) for c in index)
                for index in indexes
            ):
                raise NotationError("table indexes must be arrays of column names")
            indexes = [list(index) for index in indexes]
        return cls(
            {name: ColumnSchema.from_json(col) for name, col in columns.items()},
            indexes,
        )


def _format_indexes(indexes: list[list[str]]) -> str:
    return "[" + " ".join("[" + " ".join(index) + "]" for index in indexes) + "]"


@dataclass
class DatabaseSchema:
    """A database schema: name, version and tables."""

    name: str = ""
    version: str = ""
    tables: dict[str, TableSchema] = field(default_factory=dict)

    def table(self, name: str) -> TableSchema | None:
        """Return the table called ``name``, or None."""
        return self.tables.get(name)

    def print_to(self, stream: IO[str]) -> None:
        """Write a readable summary of the schema to ``stream``."""
        stream.write(f"{self.name}, ({self.version})\n")
        for table_name, table in self.tables.items():
            stream.write(f"\t {table_name}")
            if table.indexes:
                stream.write(f"({_format_indexes(table.indexes)})\n")
            else:
                stream.write("\n")
            for column_name, column in table.columns.items():
                stream.write(f"\t\t {column_name} => {column}\n")

    def validate_operations(self, *args: Operation) -> bool:
        """Check that every operation names known tables and columns."""
        for op in args:
            if op.op in (
                OPERATION_ABORT,
                OPERATION_ASSERT,
                OPERATION_COMMENT,
                OPERATION_COMMIT,
                OPERATION_WAIT,
            ):
                continue
            if op.op not in (
                OPERATION_INSERT,
                OPERATION_SELECT,
                OPERATION_UPDATE,
                OPERATION_MUTATE,
                OPERATION_DELETE,
            ):
                continue
            table = self.tables.get(op.table)
            if table is None:
                return False
            names: list[str] = list(op.row or {})
            for row in op.rows or []:
                names.extend(row)
            names.extend(op.columns or [])
            if any(
                name not in table.columns and name not in _IMPLICIT_COLUMNS for name in names
            ):
                return False
        return True

    def to_json(self) -> dict:
        return {
            "name": self.name,
            "version": self.version,
            "tables": {name: table.to_json() for name, table in self.tables.items()},
        }

    @classmethod
    def from_json(cls, data: Any) -> DatabaseSchema:
        if not isinstance(data, Mapping):
            raise NotationError(f"{data!r} is not a database schema")
        tables = data.get("tables") or {}
        if not isinstance(tables, Mapping):
            raise NotationError("schema tables must be an object")
        return cls(
            _opt_str(data, "name") or "",
            _opt_str(data, "version") or "",
            {name: TableSchema.from_json(table) for name, table in tables.items()},
        )


def schema_from_file(f: IO) -> DatabaseSchema:
    """Read a JSON schema document from an open file."""
    raw = f.read()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise NotationError(f"invalid schema JSON: {exc}") from exc
    return DatabaseSchema.from_json(data)