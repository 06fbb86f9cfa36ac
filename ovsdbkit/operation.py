"""OVSDB operations, transaction results and RPC argument builders."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from .condition import Condition
from .monitor_select import MonitorSelect
from .mutation import Mutation
from .types import UUID, NotationError, Row, to_jsonable
from .updates import TableUpdates

OPERATION_INSERT = "insert"
OPERATION_SELECT = "select"
OPERATION_UPDATE = "update"
OPERATION_MUTATE = "mutate"
OPERATION_DELETE = "delete"
OPERATION_WAIT = "wait"
OPERATION_COMMIT = "commit"
OPERATION_ABORT = "abort"
OPERATION_COMMENT = "comment"
OPERATION_ASSERT = "assert"


def _require_mapping(data: Any, what: str) -> Mapping:
    if not isinstance(data, Mapping):
        raise NotationError(f"{data!r} is not {what}")
    return data


def _optional_str(data: Mapping, key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise NotationError(f"field {key} must be a string")
    return value


def _list_of(data: Mapping, key: str) -> list | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise NotationError(f"field {key} must be an array")
    return value


@dataclass
class Operation:
    """A single operation of a transaction."""

    op: str
    table: str = ""
    row: Row | None = None
    rows: list[Row] | None = None
    columns: list[str] | None = None
    mutations: list[Mutation] | None = None
    timeout: int = 0
    where: list[Condition] | None = None
    until: str = ""
    durable: bool | None = None
    comment: str | None = None
    lock: str | None = None
    uuid_name: str = ""

    def to_json(self) -> dict:
        """Encode the operation; a select always carries a ``where`` array."""
        out: dict = {}
        if self.op == OPERATION_SELECT:
            out["where"] = [to_jsonable(cond) for cond in self.where or []]
        out["op"] = self.op
        out["table"] = self.table
        if self.row:
            out["row"] = to_jsonable(Row(self.row))
        if self.rows:
            out["rows"] = [to_jsonable(Row(row)) for row in self.rows]
        if self.columns:
            out["columns"] = list(self.columns)
        if self.mutations:
            out["mutations"] = [to_jsonable(m) for m in self.mutations]
        if self.timeout:
            out["timeout"] = self.timeout
        if self.where and self.op != OPERATION_SELECT:
            out["where"] = [to_jsonable(cond) for cond in self.where]
        if self.until:
            out["until"] = self.until
        if self.durable is not None:
            out["durable"] = self.durable
        if self.comment is not None:
            out["comment"] = self.comment
        if self.lock is not None:
            out["lock"] = self.lock
        if self.uuid_name:
            out["uuid-name"] = self.uuid_name
        return out

    @classmethod
    def from_json(cls, data: Any) -> Operation:
        data = _require_mapping(data, "an OVSDB operation")
        op = _optional_str(data, "op") or ""
        row = data.get("row")
        rows = _list_of(data, "rows")
        mutations = _list_of(data, "mutations")
        where = _list_of(data, "where")
        timeout = data.get("timeout", 0) or 0
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            raise NotationError("field timeout must be a number")
        durable = data.get("durable")
        if durable is not None and not isinstance(durable, bool):
            raise NotationError("field durable must be a boolean")
        return cls(
            op=op,
            table=_optional_str(data, "table") or "",
            row=Row.from_json(row) if row is not None else None,
            rows=[Row.from_json(r) for r in rows] if rows is not None else None,
            columns=_list_of(data, "columns"),
            mutations=[Mutation.from_json(m) for m in mutations]
            if mutations is not None
            else None,
            timeout=int(timeout),
            where=[Condition.from_json(c) for c in where] if where is not None else None,
            until=_optional_str(data, "until") or "",
            durable=durable,
            comment=_optional_str(data, "comment"),
            lock=_optional_str(data, "lock"),
            uuid_name=_optional_str(data, "uuid-name") or "",
        )


@dataclass
class MonitorRequest:
    """A request to monitor some columns of one table."""

    columns: list[str] = field(default_factory=list)
    select: MonitorSelect | None = None

    def to_json(self) -> dict:
        out: dict = {}
        if self.columns:
            out["columns"] = list(self.columns)
        if self.select is not None:
            out["select"] = self.select.to_json()
        return out


@dataclass
class OperationResult:
    """The result of one operation in a transaction."""

    count: int = 0
    error: str = ""
    details: str = ""
    uuid: UUID | None = None
    rows: list[Row] | None = None

    def to_json(self) -> dict:
        out: dict = {}
        if self.count:
            out["count"] = self.count
        if self.error:
            out["error"] = self.error
        if self.details:
            out["details"] = self.details
        if self.uuid is not None:
            out["uuid"] = self.uuid.to_json()
        if self.rows:
            out["rows"] = [to_jsonable(Row(row)) for row in self.rows]
        return out

    @classmethod
    def from_json(cls, data: Any) -> OperationResult:
        if data is None:
            return cls()
        data = _require_mapping(data, "an operation result")
        count = data.get("count", 0) or 0
        if isinstance(count, bool) or not isinstance(count, (int, float)):
            raise NotationError("field count must be a number")
        uuid = data.get("uuid")
        rows = _list_of(data, "rows")
        return cls(
            count=int(count),
            error=_optional_str(data, "error") or "",
            details=_optional_str(data, "details") or "",
            uuid=UUID.from_json(uuid) if uuid is not None else None,
            rows=[Row.from_json(r) for r in rows] if rows is not None else None,
        )


@dataclass
class TransactResponse:
    """The reply to a transact request."""

    result: list[OperationResult] = field(default_factory=list)
    error: str = ""

    @classmethod
    def from_json(cls, data: Any) -> TransactResponse:
        data = _require_mapping(data, "a transact response")
        result = _list_of(data, "result") or []
        return cls(
            result=[OperationResult.from_json(r) for r in result],
            error=_optional_str(data, "error") or "",
        )


@runtime_checkable
class NotificationHandler(Protocol):
    """What an object must provide to receive server notifications."""

    def update(self, context: Any, table_updates: TableUpdates) -> None:
        """Handle an update notification."""

    def locked(self, args: list) -> None:
        """Handle a locked notification."""

    def stolen(self, args: list) -> None:
        """Handle a stolen notification."""

    def echo(self, args: list) -> None:
        """Handle an echo notification."""

    def disconnected(self) -> None:
        """Handle loss of the connection."""


def echo_args() -> list:
    """Arguments for an echo request."""
    return ["ovsdbkit echo"]


def get_schema_args(schema: str) -> list:
    """Arguments for a get_schema request."""
    return [schema]


def transact_args(database: str, *args: Operation) -> list:
    """Arguments for a transact request: the database, then each operation."""
    return [database, *args]


def cancel_args(request_id: Any) -> list:
    """Arguments for a cancel request."""
    return [request_id]


def monitor_args(database: str, value: Any, requests: Mapping[str, MonitorRequest]) -> list:
    """Arguments for a monitor request."""
    return [database, value, requests]


def monitor_cancel_args(value: Any) -> list:
    """Arguments for a monitor_cancel request."""
    return [value]


def lock_args(lock_id: Any) -> list:
    """Arguments for a lock, steal or unlock request."""
    return [lock_id]