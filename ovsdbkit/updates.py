"""Table updates as delivered by OVSDB monitors."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .types import NotationError, Row, to_jsonable


@dataclass
class RowUpdate:
    """The old and new contents of one row."""

    new: Row | None = None
    old: Row | None = None

    def is_insert(self) -> bool:
        return self.new is not None and self.old is None

    def is_modify(self) -> bool:
        return self.new is not None and self.old is not None

    def is_delete(self) -> bool:
        return self.new is None and self.old is not None

    def merge(self, new: RowUpdate) -> None:
        """Fold a later update for the same row into this one."""
        if self.is_delete():
            return
        if self.is_insert():
            if new.is_modify():
                self.old = None
                self.new = new.new
            elif new.is_delete():
                self.old = new.old
                self.new = None
            return
        if self.is_modify():
            if new.is_modify():
                self.new = new.new
            elif new.is_delete():
                self.old = new.old
                self.new = None

    def to_json(self) -> dict:
        out = {}
        if self.new is not None:
            out["new"] = to_jsonable(self.new)
        if self.old is not None:
            out["old"] = to_jsonable(self.old)
        return out

    @classmethod
    def from_json(cls, data: Any) -> RowUpdate:
        if not isinstance(data, Mapping):
            raise NotationError(f"{data!r} is not a row update")
        new = data.get("new")
        old = data.get("old")
        return cls(
            new=Row.from_json(new) if new is not None else None,
            old=Row.from_json(old) if old is not None else None,
        )


class TableUpdate(dict):
    """Row UUID to RowUpdate."""

    def add_row_update(self, uuid: str, update: RowUpdate) -> None:
        if uuid in self:
            self[uuid].merge(update)
        else:
            self[uuid] = update


class TableUpdates(dict):
    """Table name to TableUpdate."""

    def add_table_update(self, table: str, update: TableUpdate) -> None:
        if table not in self:
            self[table] = update
            return
        existing = self[table]
        for uuid, row in update.items():
            existing.add_row_update(uuid, row)

    def merge(self, update: Mapping) -> None:
        for table, table_update in update.items():
            self.add_table_update(table, table_update)