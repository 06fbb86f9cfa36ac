# ovsdbkit

Python types for the OVSDB management protocol (RFC 7047). The package covers
the wire notation, database schemas, conditions, mutations, monitor requests,
table updates and transaction results. It also converts between OVSDB values
and plain Python values.

It has no dependencies outside the standard library. It needs Python 3.10 or
later.

## Installation

```
pip install ovsdbkit
```

## Wire notation

RFC 7047 writes UUIDs, sets and maps as tagged JSON arrays. `ovsdbkit.types`
models each of them with `UUID`, `OvsSet`, `OvsMap` and `Row`:

```python
from ovsdbkit.types import UUID, new_ovs_set, new_ovs_map, dumps, parse_notation

dumps(UUID("550e8400-e29b-41d4-a716-446655440000"))
# '["uuid","550e8400-e29b-41d4-a716-446655440000"]'
dumps(UUID("my_bridge"))            # not a well-formed UUID, so a named UUID
# '["named-uuid","my_bridge"]'

dumps(new_ovs_set(["aa", "bb"]))    # '["set",["aa","bb"]]'
dumps(new_ovs_set(["aa"]))          # a one-element set is sent as the atom: '"aa"'
dumps(new_ovs_map({"k": "v"}))      # '["map",[["k","v"]]]'

parse_notation(["set", ["foo", "bar"]])   # OvsSet(items=['foo', 'bar'])
```

Each type has `to_json()` and a `from_json()` class method. `decode_value`
turns tagged arrays found in decoded JSON into these objects, and
`to_jsonable` turns them back into plain JSON-ready data. Malformed notation
raises `NotationError`, a `ValueError`.

## Schemas

```python
import sys
from ovsdbkit.schema import schema_from_file

with open("vswitch.ovsschema") as f:
    schema = schema_from_file(f)

bridge = schema.table("Bridge")
column = bridge.column("name")
print(column)              # e.g. "string [M]"
schema.print_to(sys.stdout)
```

`DatabaseSchema.table` and `TableSchema.column` return `None` for unknown
names; `TableSchema.column("_uuid")` always resolves. `BaseType` gives the
RFC defaults for its limits (`min_integer()`, `max_length()`, `ref_type()`
and so on) and raises `TypeError` when asked for a limit that does not apply
to its type. Every schema class round-trips through `from_json`/`to_json`.

## Operations and transactions

```python
from ovsdbkit.operation import Operation, transact_args
from ovsdbkit.condition import Condition, ConditionFunction
from ovsdbkit.mutation import Mutation, Mutator
from ovsdbkit.types import UUID, dumps

op = Operation(
    op="mutate",
    table="Open_vSwitch",
    mutations=[Mutation("bridges", Mutator.INSERT, UUID("br0"))],
    where=[Condition("_uuid", ConditionFunction.EQUAL, UUID("ovs"))],
)
params = transact_args("Open_vSwitch", op)
dumps(params)
```

A `select` operation always carries a `where` array, empty if no conditions
are given. `schema.validate_operations(op)` returns whether the tables and
columns an operation refers to exist in the schema.

The other request builders are `echo_args`, `get_schema_args`, `cancel_args`,
`monitor_args`, `monitor_cancel_args` and `lock_args`. Replies decode with
`TransactResponse.from_json` and `OperationResult.from_json`.

Call `check_operation_results(results, operations)` from `ovsdbkit.errors` on
the results of a transaction. It raises `TransactionError` if there are fewer
results than operations, if any operation failed, or if an extra result
reports a commit error. The exception's `errors` lists the per-operation
errors, such as `ConstraintViolation` and `ReferentialIntegrityViolation`,
each with the `operation` that caused it; `commit_error` holds a commit
failure. `error_from_result` maps a single result to its error class, or to a
plain `OperationError` for an unknown error name.

## Conditions and mutations

```python
from ovsdbkit.condition import ConditionFunction

ConditionFunction.INCLUDES.evaluate(["a", "b", "c"], ["a", "b"])   # True
ConditionFunction.GREATER_THAN.evaluate(420.0, 42.0)               # True
```

Comparing values of different kinds, or ordering non-numbers, raises
`TypeError`.

`ovsdbkit.bindings` checks a mutation or condition against a column's type
before you send it:

```python
from ovsdbkit.bindings import validate_mutation, validate_condition
```

Both functions return nothing when the value and operator fit the column and
raise `WrongTypeError` or `ValueError` when they do not.

## Native values

`ovs_to_native(column, value)` and `native_to_ovs(column, value)` convert
between the two forms. In native form a set is a list and a map is a dict. A
UUID is its string, and an integer column gives an `int` even when the wire
carried a float. A value of the wrong type raises `WrongTypeError`.
`is_default_value(column, value)` tells whether a native value is the
column's empty value.

## Monitoring

Use `MonitorSelect` and `MonitorRequest` to build monitor requests and
`monitor_args` to build their parameters. Row changes are held in
`RowUpdate`, grouped into `TableUpdate` and `TableUpdates`.
`TableUpdates.merge` folds successive updates together. For example, an
insert followed by a modify becomes a single insert of the newest row.
`NotificationHandler` is a protocol describing the callbacks a receiver of
server notifications provides.

## What it does not do

ovsdbkit does not connect to a server. It has no client, no socket or
JSON-RPC transport and no local cache of tables: it builds request
parameters, parses replies and notifications, and leaves sending and
receiving them to the caller.