import io
import json

import pytest

from ovsdbkit.operation import Operation
from ovsdbkit.schema import (
    STRONG,
    UNLIMITED,
    WEAK,
    BaseType,
    ColumnSchema,
    ColumnType,
    DatabaseSchema,
    TableSchema,
    is_atomic_type,
    schema_from_file,
)
from ovsdbkit.types import NotationError

ATOMIC_SCHEMA = """
{"name": "AtomicDB", "version": "0.0.0",
 "tables": {"atomicTable": {"columns": {
   "str": {"type": "string"},
   "int": {"type": "integer"},
   "float": {"type": "real"},
   "uuid": {"type": "uuid", "mutable": false}}}}}
"""

SETS_SCHEMA = """
{"name": "SetsDB", "version": "0.0.0",
 "tables": {"setTable": {"columns": {
   "single": {"type": {"key": {"type": "string"}, "max": 1, "min": 1}},
   "oneElem": {"type": {"key": {"type": "uuid"}, "max": 1, "min": 0}},
   "multipleElem": {"type": {"key": {"type": "real"}, "max": 2, "min": 0}},
   "unlimitedElem": {"type": {"key": {"type": "integer"}, "max": "unlimited", "min": 0}},
   "enumSet": {"type": {"key": {"type": "string", "enum": ["set", ["one", "two"]]},
                        "max": "unlimited", "min": 0}}}}}}
"""

MAPS_SCHEMA = """
{"name": "MapsDB", "version": "0.0.0",
 "tables": {"mapTable": {"columns": {
   "str_str": {"type": {"key": {"type": "string"}, "value": {"type": "string"}}},
   "str_int": {"type": {"key": {"type": "string"}, "value": {"type": "integer"}}},
   "int_real": {"type": {"key": {"type": "integer"}, "value": {"type": "real"}}},
   "str_uuid": {"type": {"key": {"type": "string"}, "value": {"type": "uuid"}}},
   "str_enum": {"type": {"key": {"type": "string"},
                         "value": {"type": "string", "enum": ["set", ["one", "two"]]}}}}}}}
"""


def _col(ext, key, value=None, **kw):
    return ColumnSchema(ext, ColumnType(key, value, **{k: v for k, v in kw.items() if k in ("min", "max")}),
                        mutable=kw.get("mutable"))


EXPECTED = {
    "atomic": DatabaseSchema(
        "AtomicDB",
        "0.0.0",
        {
            "atomicTable": TableSchema(
                {
                    "str": ColumnSchema("string", ColumnType(BaseType("string"))),
                    "int": ColumnSchema("integer", ColumnType(BaseType("integer"))),
                    "float": ColumnSchema("real", ColumnType(BaseType("real"))),
                    "uuid": ColumnSchema("uuid", ColumnType(BaseType("uuid")), mutable=False),
                }
            )
        },
    ),
    "sets": DatabaseSchema(
        "SetsDB",
        "0.0.0",
        {
            "setTable": TableSchema(
                {
                    "single": ColumnSchema("string", ColumnType(BaseType("string"), min=1, max=1)),
                    "oneElem": ColumnSchema("set", ColumnType(BaseType("uuid"), min=0, max=1)),
                    "multipleElem": ColumnSchema("set", ColumnType(BaseType("real"), min=0, max=2)),
                    "unlimitedElem": ColumnSchema(
                        "set", ColumnType(BaseType("integer"), min=0, max=UNLIMITED)
                    ),
                    "enumSet": ColumnSchema(
                        "set",
                        ColumnType(BaseType("string", ["one", "two"]), min=0, max=UNLIMITED),
                    ),
                }
            )
        },
    ),
    "maps": DatabaseSchema(
        "MapsDB",
        "0.0.0",
        {
            "mapTable": TableSchema(
                {
                    "str_str": ColumnSchema("map", ColumnType(BaseType("string"), BaseType("string"))),
                    "str_int": ColumnSchema("map", ColumnType(BaseType("string"), BaseType("integer"))),
                    "int_real": ColumnSchema("map", ColumnType(BaseType("integer"), BaseType("real"))),
                    "str_uuid": ColumnSchema("map", ColumnType(BaseType("string"), BaseType("uuid"))),
                    "str_enum": ColumnSchema(
                        "map", ColumnType(BaseType("string"), BaseType("string", ["one", "two"]))
                    ),
                }
            )
        },
    ),
}


@pytest.mark.parametrize(
    "text,name",
    [(ATOMIC_SCHEMA, "atomic"), (SETS_SCHEMA, "sets"), (MAPS_SCHEMA, "maps")],
)
def test_schema_parse_and_round_trip(text, name):
    schema = DatabaseSchema.from_json(json.loads(text))
    assert schema == EXPECTED[name]
    assert schema.to_json() == json.loads(text)


def test_schema_invalid_type():
    data = {
        "name": "ErrorDB",
        "version": "0.0.0",
        "tables": {"errorsTable": {"columns": {"wrongType": {"type": {"key": "uknown"}}}}},
    }
    with pytest.raises(NotationError):
        DatabaseSchema.from_json(data)


def test_schema_from_file_invalid_json():
    with pytest.raises(NotationError):
        schema_from_file(io.StringIO("invalid json"))


def test_schema_from_file_reads_document():
    schema = schema_from_file(io.StringIO(ATOMIC_SCHEMA))
    assert schema == EXPECTED["atomic"]


TABLE_SCHEMA = {
    "name": "TestSchema",
    "version": "0.0.0",
    "tables": {
        "test": {
            "columns": {
                "foo": {"type": {"key": "string", "value": "string"}},
                "bar": {"type": "string"},
            }
        }
    },
}


@pytest.fixture
def table_schema():
    return DatabaseSchema.from_json(TABLE_SCHEMA)


def test_table_exists(table_schema):
    table = table_schema.table("test")
    assert table is not None
    assert set(table.columns) == {"foo", "bar"}


def test_table_not_exists(table_schema):
    assert table_schema.table("notexists") is None


def test_column_exists(table_schema):
    column = table_schema.table("test").column("foo")
    assert column is not None
    assert column.type == "map"


def test_column_not_exists(table_schema):
    assert table_schema.table("test").column("notexists") is None


def test_column_uuid(table_schema):
    column = table_schema.table("test").column("_uuid")
    assert column is not None
    assert column.type == "uuid"


@pytest.mark.parametrize(
    "data,expected,expected_json",
    [
        ("string", BaseType("string"), {"type": "string"}),
        ("integer", BaseType("integer"), {"type": "integer"}),
        ("boolean", BaseType("boolean"), {"type": "boolean"}),
        ("real", BaseType("real"), {"type": "real"}),
        ("uuid", BaseType("uuid"), {"type": "uuid"}),
        (
            {"type": "uuid", "refTable": "Datapath", "refType": "strong"},
            BaseType("uuid", ref_table="Datapath", ref_type="strong"),
            {"type": "uuid", "refTable": "Datapath", "refType": "strong"},
        ),
        (
            {
                "type": "string",
                "enum": ["set", ["OpenFlow10", "OpenFlow11", "OpenFlow12",
                                 "OpenFlow13", "OpenFlow14", "OpenFlow15"]],
            },
            BaseType("string", ["OpenFlow10", "OpenFlow11", "OpenFlow12",
                                "OpenFlow13", "OpenFlow14", "OpenFlow15"]),
            {
                "type": "string",
                "enum": ["set", ["OpenFlow10", "OpenFlow11", "OpenFlow12",
                                 "OpenFlow13", "OpenFlow14", "OpenFlow15"]],
            },
        ),
        (
            {"type": "integer", "minInteger": 0, "maxInteger": 4294967295},
            BaseType("integer", min_integer=0, max_integer=4294967295),
            {"type": "integer", "minInteger": 0, "maxInteger": 4294967295},
        ),
    ],
)
def test_base_type_round_trip(data, expected, expected_json):
    base = BaseType.from_json(data)
    assert base == expected
    assert base.to_json() == expected_json


def test_base_type_single_enum_value():
    base = BaseType.from_json({"type": "string", "enum": "only"})
    assert base.enum == ["only"]


def test_base_type_rejects_non_atomic_string():
    with pytest.raises(NotationError):
        BaseType.from_json("uknown")


@pytest.mark.parametrize(
    "data,expected,expected_json",
    [
        ("string", ColumnType(BaseType("string")), "string"),
        (
            {"value": "string", "key": {"type": "string"}, "min": 1, "max": 1},
            ColumnType(BaseType("string"), BaseType("string"), min=1, max=1),
            {"key": {"type": "string"}, "value": {"type": "string"}, "min": 1, "max": 1},
        ),
        (
            {"key": "string", "value": "integer", "min": 1, "max": 1},
            ColumnType(BaseType("string"), BaseType("integer"), min=1, max=1),
            {"key": {"type": "string"}, "value": {"type": "integer"}, "min": 1, "max": 1},
        ),
        (
            {"key": {"type": "integer"}, "value": {"type": "real"}, "min": 1, "max": "unlimited"},
            ColumnType(BaseType("integer"), BaseType("real"), min=1, max=UNLIMITED),
            {"key": {"type": "integer"}, "value": {"type": "real"}, "min": 1, "max": "unlimited"},
        ),
        (
            {"key": {"type": "string"}, "value": {"type": "uuid"}, "min": 1, "max": "unlimited"},
            ColumnType(BaseType("string"), BaseType("uuid"), min=1, max=UNLIMITED),
            {"key": {"type": "string"}, "value": {"type": "uuid"}, "min": 1, "max": "unlimited"},
        ),
        (
            {"key": {"type": "string"},
             "value": {"type": "string", "enum": ["set", ["one", "two"]]}, "min": 1, "max": 1},
            ColumnType(BaseType("string"), BaseType("string", ["one", "two"]), min=1, max=1),
            {"key": {"type": "string"},
             "value": {"type": "string", "enum": ["set", ["one", "two"]]}, "min": 1, "max": 1},
        ),
    ],
)
def test_column_type_round_trip(data, expected, expected_json):
    column_type = ColumnType.from_json(data)
    assert column_type == expected
    assert column_type.to_json() == expected_json


def test_column_type_bad_max_string():
    with pytest.raises(NotationError):
        ColumnType.from_json({"key": "string", "max": "lots"})


def test_column_type_defaults():
    column_type = ColumnType(BaseType("string"))
    assert column_type.min() == 1
    assert column_type.max() == 1


def test_column_schema_mutable():
    assert ColumnSchema(mutable=None).mutable() is True
    assert ColumnSchema(mutable=True).mutable() is True
    assert ColumnSchema(mutable=False).mutable() is False


def test_column_schema_ephemeral():
    assert ColumnSchema(ephemeral=None).ephemeral() is False
    assert ColumnSchema(ephemeral=True).ephemeral() is True
    assert ColumnSchema(ephemeral=False).ephemeral() is False


@pytest.mark.parametrize(
    "data,expected",
    [
        ({"type": "string"}, ColumnSchema("string", ColumnType(BaseType("string")))),
        (
            {"type": {"key": {"type": "string"},
                      "value": {"type": "uuid", "refTable": "Datapath"},
                      "min": 0, "max": "unlimited"}},
            ColumnSchema(
                "map",
                ColumnType(BaseType("string"), BaseType("uuid", ref_table="Datapath"),
                           min=0, max=UNLIMITED),
            ),
        ),
        (
            {"type": {"key": {"type": "uuid", "refTable": "Datapath"},
                      "min": 0, "max": "unlimited"}},
            ColumnSchema(
                "set", ColumnType(BaseType("uuid", ref_table="Datapath"), min=0, max=UNLIMITED)
            ),
        ),
        (
            {"type": {"key": {"type": "string", "enum": ["set", ["one", "two"]]},
                      "max": 1, "min": 1}},
            ColumnSchema("enum", ColumnType(BaseType("string", ["one", "two"]), min=1, max=1)),
        ),
    ],
)
def test_column_schema_round_trip(data, expected):
    column = ColumnSchema.from_json(data)
    assert column == expected
    assert column.mutable() is True
    assert column.to_json() == data


def test_base_type_simple_atomic():
    assert BaseType("string").simple_atomic() is True
    assert BaseType("integer", max_integer=1024).simple_atomic() is False


@pytest.mark.parametrize(
    "base,want",
    [(BaseType("real"), 5e-324), (BaseType("real", min_real=1024.0), 1024.0)],
)
def test_base_type_min_real(base, want):
    assert base.min_real() == want


@pytest.mark.parametrize(
    "base,want",
    [(BaseType("real"), 1.7976931348623157e308), (BaseType("real", max_real=1024.0), 1024.0)],
)
def test_base_type_max_real(base, want):
    assert base.max_real() == want


@pytest.mark.parametrize(
    "base,want",
    [(BaseType("integer"), -(2**63)), (BaseType("integer", min_integer=1024), 1024)],
)
def test_base_type_min_integer(base, want):
    assert base.min_integer() == want


@pytest.mark.parametrize(
    "base,want",
    [(BaseType("integer"), 2**63 - 1), (BaseType("integer", max_integer=1024), 1024)],
)
def test_base_type_max_integer(base, want):
    assert base.max_integer() == want


@pytest.mark.parametrize(
    "base,want",
    [(BaseType("string"), 0), (BaseType("string", min_length=12), 12)],
)
def test_base_type_min_length(base, want):
    assert base.min_length() == want


@pytest.mark.parametrize(
    "base,want",
    [(BaseType("string"), 2**63 - 1), (BaseType("string", max_length=1024), 1024)],
)
def test_base_type_max_length(base, want):
    assert base.max_length() == want


@pytest.mark.parametrize(
    "base,want",
    [(BaseType("uuid"), ""), (BaseType("uuid", ref_table="Bridge"), "Bridge")],
)
def test_base_type_ref_table(base, want):
    assert base.ref_table() == want


@pytest.mark.parametrize(
    "base,want",
    [(BaseType("uuid"), STRONG), (BaseType("uuid", ref_type="weak"), WEAK)],
)
def test_base_type_ref_type(base, want):
    assert base.ref_type() == want


@pytest.mark.parametrize(
    "method,base",
    [
        ("min_real", BaseType("uuid")),
        ("max_real", BaseType("uuid")),
        ("min_integer", BaseType("uuid")),
        ("max_integer", BaseType("uuid")),
        ("min_length", BaseType("uuid")),
        ("max_length", BaseType("uuid")),
        ("ref_table", BaseType("string")),
        ("ref_type", BaseType("string")),
    ],
)
def test_base_type_accessor_wrong_type(method, base):
    with pytest.raises(TypeError) as excinfo:
        getattr(base, method)()
    assert base.type in str(excinfo.value)


@pytest.mark.parametrize(
    "column,want",
    [
        (ColumnSchema("string"), "string [M]"),
        (
            ColumnSchema("map", ColumnType(BaseType("string"), BaseType("string"))),
            "[string]string [M]",
        ),
        (
            ColumnSchema(
                "set",
                ColumnType(BaseType("uuid", ref_table="Connection"), min=0, max=UNLIMITED),
            ),
            "[] [Connection (strong)] (min: 0, max: -1) [M]",
        ),
        (
            ColumnSchema(
                "set",
                ColumnType(BaseType("uuid", ref_table="Connection", ref_type="strong"),
                           min=0, max=UNLIMITED),
            ),
            "[] [Connection (strong)] (min: 0, max: -1) [M]",
        ),
        (
            ColumnSchema(
                "set",
                ColumnType(BaseType("uuid", ref_table="Connection", ref_type="weak"),
                           min=0, max=UNLIMITED),
            ),
            "[] [Connection (weak)] (min: 0, max: -1) [M]",
        ),
        (
            ColumnSchema(
                "enum",
                ColumnType(BaseType("string", ["permit", "deny"]), min=0, max=UNLIMITED),
            ),
            "enum (type: string): [permit deny] [M]",
        ),
        (ColumnSchema("string", ephemeral=True, mutable=True), "string [E,M]"),
        (ColumnSchema("integer", mutable=False), "integer "),
    ],
)
def test_column_schema_str(column, want):
    assert str(column) == want


def test_column_schema_str_unknown_type():
    with pytest.raises(ValueError):
        str(ColumnSchema("bogus"))


def test_is_atomic_type():
    assert is_atomic_type("uuid") is True
    assert is_atomic_type("map") is False


def test_validate_operations(table_schema):
    assert table_schema.validate_operations(
        Operation(op="insert", table="test", row={"bar": "x", "_uuid": "y"}),
        Operation(op="select", table="test", columns=["foo", "_version"]),
        Operation(op="commit"),
    ) is True


@pytest.mark.parametrize(
    "operation",
    [
        Operation(op="insert", table="missing"),
        Operation(op="insert", table="test", row={"nope": 1}),
        Operation(op="update", table="test", rows=[{"bar": 1}, {"nope": 2}]),
        Operation(op="select", table="test", columns=["nope"]),
    ],
)
def test_validate_operations_rejects(table_schema, operation):
    assert table_schema.validate_operations(operation) is False


def test_print_to():
    schema = DatabaseSchema(
        "TestSchema",
        "0.0.0",
        {"test": TableSchema({"bar": ColumnSchema("string", ColumnType(BaseType("string")))},
                             [["bar"]])},
    )
    out = io.StringIO()
    schema.print_to(out)
    assert out.getvalue() == "TestSchema, (0.0.0)\n\t test([[bar]])\n\t\t bar => string [M]\n"


def test_table_schema_indexes_round_trip():
    data = {"columns": {"name": {"type": "string"}}, "indexes": [["name"]]}
    table = TableSchema.from_json(data)
    assert table.indexes == [["name"]]
    assert table.to_json() == data