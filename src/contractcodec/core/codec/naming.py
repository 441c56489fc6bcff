"""Name indexes over the current table set, rebuilt for every call."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from contractcodec.core.schema.types import Column, Table


class ColumnNameIndex:
    """Resolve column names across a table's whole nested forest.

    A column is addressable by its dotted path from the root
    (``events.event_data.event_name``) and, when that name is unique within
    the table, by its bare name (``event_name``).
    """

    def __init__(self, table: Table):
        self.table = table
        self._by_id: Dict[str, Column] = {column.id: column for column in table.columns}
        self._by_path: Dict[str, Column] = {}
        self._by_name: Dict[str, List[Column]] = {}
        self._paths: Dict[str, str] = {}

        for column in sorted(table.columns, key=lambda c: c.order):
            path = self.path_of(column)
            self._by_path.setdefault(path, column)
            self._by_name.setdefault(column.name, []).append(column)

    def path_of(self, column: Column) -> str:
        """Dotted path of a column; stops early on broken or cyclic chains."""
        if column.id in self._paths:
            return self._paths[column.id]

        parts = [column.name]
        seen = {column.id}
        current = column
        while current.parent_id is not None:
            parent = self._by_id.get(current.parent_id)
            if parent is None or parent.id in seen:
                break
            seen.add(parent.id)
            parts.append(parent.name)
            current = parent

        path = ".".join(reversed(parts))
        self._paths[column.id] = path
        return path

    def resolve(self, name: str) -> Optional[Column]:
        """Find a column by dotted path, then by table-unique bare name."""
        if name in self._by_path:
            return self._by_path[name]
        candidates = self._by_name.get(name, [])
        if len(candidates) == 1:
            return candidates[0]
        return None

    def get(self, column_id: str) -> Optional[Column]:
        return self._by_id.get(column_id)

    def name_for(self, column: Column) -> str:
        """Shortest name that resolves back to ``column``."""
        if len(self._by_name.get(column.name, [])) == 1:
            return column.name
        return self.path_of(column)


class TableNameIndex:
    """Tables of one call, addressable by name or id."""

    def __init__(self, tables: Iterable[Table]):
        self._by_name: Dict[str, Table] = {}
        self._by_id: Dict[str, Table] = {}
        self._columns: Dict[str, ColumnNameIndex] = {}

        for table in tables:
            self._by_name.setdefault(table.name, table)
            self._by_id.setdefault(table.id, table)

    def by_name(self, name: str) -> Optional[Table]:
        return self._by_name.get(name)

    def by_id(self, table_id: str) -> Optional[Table]:
        return self._by_id.get(table_id)

    def columns(self, table: Table) -> ColumnNameIndex:
        if table.id not in self._columns:
            self._columns[table.id] = ColumnNameIndex(table)
        return self._columns[table.id]
