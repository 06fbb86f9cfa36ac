"""Conversion between OVSDB wire values and native Python values, plus checks
that mutations and conditions fit a column."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .condition import ConditionFunction
from .mutation import Mutator
from .schema import (
    TYPE_BOOLEAN,
    TYPE_ENUM,
    TYPE_INTEGER,
    TYPE_MAP,
    TYPE_REAL,
    TYPE_SET,
    TYPE_STRING,
    TYPE_UUID,
    ColumnSchema,
)
from .types import UUID, OvsMap, OvsSet, is_named

_ATOMIC_NATIVE = {
    TYPE_INTEGER: int,
    TYPE_REAL: float,
    TYPE_BOOLEAN: bool,
    TYPE_STRING: str,
    TYPE_UUID: str,
}

_ZERO_UUID = "00000000-0000-0000-0000-000000000000"

_REAL_MUTATORS = frozenset(
    {Mutator.ADD, Mutator.SUBTRACT, Mutator.MULTIPLY, Mutator.DIVIDE}
)
_INTEGER_MUTATORS = _REAL_MUTATORS | {Mutator.MODULO}
_EQUALITY_FUNCTIONS = frozenset(
    {
        ConditionFunction.EQUAL,
        ConditionFunction.NOT_EQUAL,
        ConditionFunction.INCLUDES,
        ConditionFunction.EXCLUDES,
    }
)


def _type_name(ntype: Any) -> str:
    if getattr(ntype, "__origin__", None) is not None:
        return str(ntype)
    return getattr(ntype, "__name__", str(ntype))


class WrongTypeError(TypeError):
    """A value does not have the type a column or atomic type expects."""

    def __init__(self, origin: str, expected: str, got: Any) -> None:
        self.origin = origin
        self.expected = expected
        self.got = got
        super().__init__(
            f"Wrong Type ({origin}): expected {expected} but got {got!r} "
            f"({type(got).__name__})"
        )


def _matches(value: Any, ntype: Any) -> bool:
    """Return True if ``value`` can be held by the native type ``ntype``."""
    origin = getattr(ntype, "__origin__", None)
    if origin is list:
        (elem_type,) = ntype.__args__
        return isinstance(value, list) and all(_matches(v, elem_type) for v in value)
    if origin is dict:
        key_type, val_type = ntype.__args__
        return isinstance(value, Mapping) and all(
            _matches(k, key_type) and _matches(v, val_type) for k, v in value.items()
        )
    if ntype is bool:
        return isinstance(value, bool)
    if ntype is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if ntype is float:
        return isinstance(value, float)
    if ntype is str:
        return isinstance(value, str)
    return False


def native_type_from_atomic(basic_type: str) -> type:
    """Return the Python type that holds a value of an atomic type."""
    try:
        return _ATOMIC_NATIVE[basic_type]
    except KeyError:
        raise ValueError(f"unknown basic type {basic_type}") from None


def native_type(column: ColumnSchema) -> Any:
    """Return the native type of a column: an atomic type, list[T] or dict[K, V]."""
    if column.type in _ATOMIC_NATIVE:
        return native_type_from_atomic(column.type)
    if column.type == TYPE_ENUM:
        return native_type_from_atomic(column.type_obj.key.type)
    if column.type == TYPE_MAP:
        key_type = native_type_from_atomic(column.type_obj.key.type)
        value_type = native_type_from_atomic(column.type_obj.value.type)
        return dict[key_type, value_type]
    if column.type == TYPE_SET:
        return list[native_type_from_atomic(column.type_obj.key.type)]
    raise ValueError(f"unknown extended type {column.type}")


def ovs_to_native_atomic(basic_type: str, elem: Any) -> Any:
    """Convert one OVSDB atom to its native value."""
    if basic_type in (TYPE_REAL, TYPE_STRING, TYPE_BOOLEAN):
        ntype = native_type_from_atomic(basic_type)
        if not _matches(elem, ntype):
            raise WrongTypeError("ovs_to_native_atomic", _type_name(ntype), elem)
        return elem
    if basic_type == TYPE_INTEGER:
        # JSON decoding may deliver integers as floats.
        if isinstance(elem, bool) or not isinstance(elem, (int, float)):
            raise WrongTypeError("ovs_to_native_atomic", "convertible to int", elem)
        return int(elem)
    if basic_type == TYPE_UUID:
        if not isinstance(elem, UUID):
            raise WrongTypeError("ovs_to_native_atomic", "UUID", elem)
        return elem.value
    raise ValueError(f"unknown atomic type {basic_type}")


def ovs_to_native(column: ColumnSchema, elem: Any) -> Any:
    """Convert an OVSDB value to the native value of ``column``."""
    if column.type in _ATOMIC_NATIVE:
        return ovs_to_native_atomic(column.type, elem)
    key_type = column.type_obj.key.type
    if column.type == TYPE_ENUM:
        return ovs_to_native_atomic(key_type, elem)
    if column.type == TYPE_SET:
        # A set of exactly one element may arrive as the bare atom.
        items = elem.items if isinstance(elem, OvsSet) else [elem]
        return [ovs_to_native_atomic(key_type, item) for item in items]
    if column.type == TYPE_MAP:
        if not isinstance(elem, OvsMap):
            raise WrongTypeError("ovs_to_native", "OvsMap", elem)
        value_type = column.type_obj.value.type
        return {
            ovs_to_native_atomic(key_type, k): ovs_to_native_atomic(value_type, v)
            for k, v in elem.items.items()
        }
    raise ValueError(f"unknown type {column.type}")


def native_to_ovs_atomic(basic_type: str, elem: Any) -> Any:
    """Convert a native atomic value to its OVSDB atom."""
    ntype = native_type_from_atomic(basic_type)
    if not _matches(elem, ntype):
        raise WrongTypeError("native_to_ovs_atomic", _type_name(ntype), elem)
    if basic_type == TYPE_UUID:
        return UUID(elem)
    return elem


def native_to_ovs(column: ColumnSchema, elem: Any) -> Any:
    """Convert a native value of ``column`` to its OVSDB value."""
    ntype = native_type(column)
    if not _matches(elem, ntype):
        raise WrongTypeError("native_to_ovs", _type_name(ntype), elem)
    if column.type in (TYPE_INTEGER, TYPE_REAL, TYPE_STRING, TYPE_BOOLEAN, TYPE_ENUM):
        return elem
    if column.type == TYPE_UUID:
        return UUID(elem)
    if column.type == TYPE_SET:
        if column.type_obj.key.type == TYPE_UUID:
            return OvsSet([UUID(v) for v in elem])
        return OvsSet(list(elem))
    if column.type == TYPE_MAP:
        key_type = column.type_obj.key.type
        value_type = column.type_obj.value.type
        return OvsMap(
            {
                native_to_ovs_atomic(key_type, k): native_to_ovs_atomic(value_type, v)
                for k, v in elem.items()
            }
        )
    raise ValueError(f"unknown type {column.type}")


def _require(elem: Any, ntype: type, etype: str) -> None:
    if not _matches(elem, ntype):
        raise WrongTypeError(f"default value of {etype}", _type_name(ntype), elem)


def _is_default_base_value(elem: Any, etype: str) -> bool:
    if elem is None:
        return True
    if etype == TYPE_UUID:
        _require(elem, str, etype)
        return elem in (_ZERO_UUID, "") or is_named(elem)
    if etype in (TYPE_MAP, TYPE_SET):
        return len(elem) == 0
    if etype == TYPE_STRING:
        _require(elem, str, etype)
        return elem == ""
    if etype == TYPE_INTEGER:
        _require(elem, int, etype)
        return elem == 0
    if etype == TYPE_REAL:
        _require(elem, float, etype)
        return elem == 0
    return False


def is_default_value(column: ColumnSchema, elem: Any) -> bool:
    """Return True if ``elem`` is the default (empty) value for ``column``."""
    if column.type == TYPE_ENUM:
        return _is_default_base_value(elem, column.type_obj.key.type)
    return _is_default_base_value(elem, column.type)


def _validate_mutation_atomic(atype: str, mutator: Any, value: Any) -> None:
    ntype = native_type_from_atomic(atype)
    if not _matches(value, ntype):
        raise WrongTypeError(f"mutation of atomic type {atype}", _type_name(ntype), value)
    if atype in (TYPE_UUID, TYPE_STRING, TYPE_BOOLEAN):
        raise ValueError(f"atomic type {atype} does not support mutation")
    if atype == TYPE_REAL:
        if mutator not in _REAL_MUTATORS:
            raise ValueError(f"wrong mutator for real type: {mutator}")
        return
    if atype == TYPE_INTEGER:
        if mutator not in _INTEGER_MUTATORS:
            raise ValueError(f"wrong mutator for integer type: {mutator}")
        return
    raise ValueError(f"unsupported atomic type {atype}")


def validate_mutation(column: ColumnSchema, mutator: Any, value: Any) -> None:
    """Raise unless ``mutator`` with ``value`` is a valid mutation of ``column``."""
    if not column.mutable():
        raise ValueError("column is not mutable")
    if column.type == TYPE_SET:
        if mutator in (Mutator.INSERT, Mutator.DELETE):
            ntype = native_type(column)
            if not isinstance(value, list):
                # A set may be given as a single atom.
                (elem_type,) = ntype.__args__
                if not _matches(value, elem_type):
                    raise WrongTypeError(
                        f"mutation {mutator} of single value into column {column}",
                        _type_name(ntype),
                        value,
                    )
                return
            if not _matches(value, ntype):
                raise WrongTypeError(
                    f"mutation {mutator} of column {column}", _type_name(ntype), value
                )
            return
        _validate_mutation_atomic(column.type_obj.key.type, mutator, value)
        return
    if column.type == TYPE_MAP:
        ntype = native_type(column)
        if mutator == Mutator.INSERT:
            if not _matches(value, ntype):
                raise WrongTypeError(
                    f"mutation {mutator} of column {column}", _type_name(ntype), value
                )
            return
        if mutator == Mutator.DELETE:
            keys_type = list[native_type_from_atomic(column.type_obj.key.type)]
            if not _matches(value, ntype) and not _matches(value, keys_type):
                raise WrongTypeError(
                    f"mutation {mutator} of column {column}", "compatible map type", value
                )
            return
        raise ValueError(f"wrong mutator for map type: {mutator}")
    if column.type == TYPE_ENUM:
        raise ValueError("enums do not support mutation")
    _validate_mutation_atomic(column.type, mutator, value)


def validate_condition(column: ColumnSchema, function: Any, value: Any) -> None:
    """Raise unless ``function`` with ``value`` is a valid condition on ``column``."""
    ntype = native_type(column)
    if not _matches(value, ntype):
        raise WrongTypeError(f"condition for column {column}", _type_name(ntype), value)
    if column.type in (TYPE_SET, TYPE_MAP, TYPE_BOOLEAN, TYPE_STRING, TYPE_UUID):
        if function not in _EQUALITY_FUNCTIONS:
            raise ValueError(f"wrong condition function {function} for type: {column.type}")
        return
    if column.type in (TYPE_INTEGER, TYPE_REAL):
        return
    raise ValueError(f"unsupported type {column.type}")