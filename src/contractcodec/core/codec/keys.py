"""Primary and compound key resolution.

On import two signals can describe a table's key: an explicit descriptor
written by a previous export into the ``compoundKeys`` custom property, and
``primaryKeyPosition`` values on the columns themselves. The descriptor is
authoritative when present; positions are only used to infer a key when it
is missing. On export both signals are written so they agree.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from contractcodec.core.codec.base import CodecContext, CodecStage
from contractcodec.core.codec.extensions import MetadataPreserver
from contractcodec.core.codec.naming import ColumnNameIndex
from contractcodec.core.codec.wire import PRIMARY_KEY, PRIMARY_KEY_POSITION
from contractcodec.core.document import NodeKind, as_bool, as_string, is_kind
from contractcodec.core.errors import KeyAmbiguityWarning, StructuralError
from contractcodec.core.schema.types import Column, CompoundKey, Table
from contractcodec.utils.logging import get_logger

logger = get_logger(__name__)

# Column overrides produced on export: None means "omit this key"
KeyFlags = Dict[str, Optional[Any]]


class KeyResolver(CodecStage):
    """Derive compound keys on import and key flags on export."""

    def __init__(self, context: CodecContext, preserver: MetadataPreserver):
        super().__init__(context)
        self.preserver = preserver

    # Import

    def resolve(self, table: Table) -> List[CompoundKey]:
        """Attach compound keys to an imported table.

        Tries the explicit descriptor first, then inference from positions.

        Args:
            table: Table with its full flattened column arena

        Returns:
            The table's compound keys (also stored on ``table``)
        """
        index = ColumnNameIndex(table)
        inferred = self._infer(table)
        explicit = self._read_descriptor(table, index)

        if explicit is None:
            table.compound_keys = [inferred] if inferred else []
            if inferred:
                logger.debug(
                    f"Inferred primary key for {table.name}: "
                    f"{[index.get(cid).name for cid in inferred.column_ids]}"
                )
            return table.compound_keys

        primary = next((key for key in explicit if key.is_primary), None)
        if inferred is not None and (
            primary is None or primary.column_ids != inferred.column_ids
        ):
            self.context.warn(
                KeyAmbiguityWarning(
                    message=(
                        "Primary key positions disagree with the stored key "
                        "descriptor; using the descriptor"
                    ),
                    table=table.name,
                    details={
                        "descriptor": [index.name_for(index.get(cid)) for cid in primary.column_ids]
                        if primary
                        else [],
                        "positions": [index.name_for(index.get(cid)) for cid in inferred.column_ids],
                    },
                )
            )
        if primary is not None:
            self._annotate(table, primary)

        table.compound_keys = explicit
        return explicit

    def _candidates(self, table: Table) -> List[Column]:
        return [
            column
            for column in sorted(table.columns, key=lambda c: c.order)
            if column.primary_key is True
            or (column.primary_key is None and column.primary_key_position is not None)
        ]

    def _infer(self, table: Table) -> Optional[CompoundKey]:
        """Synthesize a primary compound key from column positions."""
        candidates = self._candidates(table)
        if len(candidates) < 2:
            return None

        positions = [column.primary_key_position for column in candidates]
        expected = list(range(1, len(candidates) + 1))

        if None in positions or sorted(positions) != expected:
            self.context.warn(
                KeyAmbiguityWarning(
                    message=(
                        "Primary key positions are missing, duplicated or have "
                        "gaps; falling back to document order"
                    ),
                    table=table.name,
                    details={
                        "positions": {column.name: column.primary_key_position for column in candidates}
                    },
                )
            )
            ordered = candidates
        else:
            ordered = sorted(candidates, key=lambda column: column.primary_key_position)

        name = f"pk_{table.name}"
        return CompoundKey(
            id=self.context.synthesize_id("compound-key", table.id, name),
            table_id=table.id,
            name=name,
            column_ids=[column.id for column in ordered],
            is_primary=True,
        )

    def _read_descriptor(
        self, table: Table, index: ColumnNameIndex
    ) -> Optional[List[CompoundKey]]:
        """Decode the stored descriptor; None when absent or unreadable."""
        entry = self.preserver.find(table.extensions, self.context.compound_key_property)
        if entry is None:
            return None

        if not is_kind(entry.value, NodeKind.ARRAY):
            self.context.warn(
                KeyAmbiguityWarning(
                    message="Stored key descriptor is not a list; inferring keys instead",
                    table=table.name,
                )
            )
            return None

        keys: List[CompoundKey] = []
        for position, item in enumerate(entry.value):
            key = self._read_key(table, index, position, item)
            if key is None:
                continue
            if key.is_primary and any(existing.is_primary for existing in keys):
                self.context.warn(
                    KeyAmbiguityWarning(
                        message=f"More than one primary key stored; '{key.name}' kept as unique",
                        table=table.name,
                    )
                )
                key.is_primary = False
            keys.append(key)

        return keys

    def _read_key(
        self, table: Table, index: ColumnNameIndex, position: int, item: Any
    ) -> Optional[CompoundKey]:
        if not is_kind(item, NodeKind.OBJECT):
            self.context.warn(
                KeyAmbiguityWarning(
                    message=f"Key descriptor #{position + 1} is not an object; skipped",
                    table=table.name,
                )
            )
            return None

        name = as_string(item.get("name")) or f"key_{position + 1}"
        is_primary = as_bool(item.get("isPrimary", item.get("is_primary"))) or False
        names = item.get("columns")
        if not is_kind(names, NodeKind.ARRAY) or not names:
            self.context.warn(
                KeyAmbiguityWarning(
                    message=f"Key '{name}' lists no columns; skipped", table=table.name
                )
            )
            return None

        column_ids = []
        for column_name in names:
            column = index.resolve(column_name) if isinstance(column_name, str) else None
            if column is None:
                self.context.warn(
                    KeyAmbiguityWarning(
                        message=f"Key '{name}' names unknown column {column_name!r}; skipped",
                        table=table.name,
                        column=str(column_name),
                    )
                )
                return None
            column_ids.append(column.id)

        return CompoundKey(
            id=self.context.synthesize_id("compound-key", table.id, name),
            table_id=table.id,
            name=name,
            column_ids=column_ids,
            is_primary=is_primary,
        )

    def _annotate(self, table: Table, key: CompoundKey) -> None:
        """Make column flags match an authoritative primary key."""
        members = {column_id: rank for rank, column_id in enumerate(key.column_ids, 1)}
        for column in table.columns:
            if column.id in members:
                column.primary_key = True
                column.primary_key_position = members[column.id]
            elif column.primary_key or column.primary_key_position is not None:
                column.primary_key = None
                column.primary_key_position = None

    # Export

    def column_flags(self, table: Table) -> Dict[str, KeyFlags]:
        """Key-related document values for every column of a table.

        Raises:
            StructuralError: If a key references a column outside the table
                or more than one key is marked primary
        """
        by_id = {column.id: column for column in table.columns}
        primaries = [key for key in table.compound_keys if key.is_primary]
        if len(primaries) > 1:
            raise StructuralError(
                f"Table has {len(primaries)} primary keys", table=table.name
            )
        for key in table.compound_keys:
            missing = [cid for cid in key.column_ids if cid not in by_id]
            if missing:
                raise StructuralError(
                    f"Key '{key.name}' references missing columns {missing}",
                    table=table.name,
                )

        if not primaries:
            return {
                column.id: {
                    PRIMARY_KEY: column.primary_key,
                    PRIMARY_KEY_POSITION: column.primary_key_position,
                }
                for column in table.columns
            }

        members = {cid: rank for rank, cid in enumerate(primaries[0].column_ids, 1)}
        return {
            column.id: {
                PRIMARY_KEY: True
                if column.id in members
                else (False if column.primary_key is False else None),
                PRIMARY_KEY_POSITION: members.get(column.id),
            }
            for column in table.columns
        }

    def descriptor(self, table: Table) -> Optional[List[Dict[str, Any]]]:
        """Compound key descriptor for the extension channel, or None."""
        if not table.compound_keys:
            return None

        index = ColumnNameIndex(table)
        return [
            {
                "name": key.name,
                "columns": [index.name_for(index.get(cid)) for cid in key.column_ids],
                "isPrimary": key.is_primary,
            }
            for key in table.compound_keys
        ]
