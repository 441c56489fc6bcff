"""Rebuild nested contract properties from a parent-linked column list."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from contractcodec.core.codec.base import CodecStage
from contractcodec.core.codec.wire import ITEMS, PROPERTIES
from contractcodec.core.errors import StructuralError
from contractcodec.core.schema.types import Column, NestingKind, Table
from contractcodec.utils.logging import get_logger

logger = get_logger(__name__)


class ColumnTreeBuilder(CodecStage):
    """Exact inverse of :class:`ColumnTreeFlattener`.

    The builder only shapes structure: it receives one already rendered
    property node per column and nests them. Key and relationship semantics
    are applied before it runs.
    """

    def validate(self, table: Table) -> Dict[str, int]:
        """Check the column arena is a proper forest.

        Returns:
            Depth of every column keyed by id (roots are depth 0)

        Raises:
            StructuralError: On duplicate ids, orphaned parents or cycles
        """
        by_id: Dict[str, Column] = {}
        for column in table.columns:
            if column.id in by_id:
                raise StructuralError(
                    f"Duplicate column id '{column.id}'",
                    table=table.name,
                    column=column.name,
                )
            by_id[column.id] = column

        for column in table.columns:
            if column.parent_id is not None and column.parent_id not in by_id:
                raise StructuralError(
                    f"Column '{column.name}' references missing parent "
                    f"'{column.parent_id}'",
                    table=table.name,
                    column=column.name,
                )

        depths: Dict[str, int] = {}
        limit = len(by_id)
        for column in table.columns:
            chain: List[str] = []
            current = column
            while current.id not in depths:
                if current.id in chain or len(chain) > limit:
                    raise StructuralError(
                        f"Cyclic parent chain through column '{current.name}'",
                        table=table.name,
                        column=current.name,
                    )
                chain.append(current.id)
                if current.parent_id is None:
                    depths[current.id] = 0
                    chain.pop()
                    break
                current = by_id[current.parent_id]
            # Unwind: each column is one deeper than its parent
            for column_id in reversed(chain):
                depths[column_id] = depths[by_id[column_id].parent_id] + 1

        return depths

    def build(self, table: Table, rendered: Dict[str, Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Nest rendered property nodes into the table's root list.

        Args:
            table: Table whose ``columns`` arena defines the forest
            rendered: Property node per column id, without nesting keys

        Returns:
            Root property nodes sorted by ``order``
        """
        depths = self.validate(table)
        position = {column.id: index for index, column in enumerate(table.columns)}
        pending: Dict[str, List[Tuple[Tuple[int, int], Dict[str, Any]]]] = {}
        roots: List[Tuple[Tuple[int, int], Dict[str, Any]]] = []

        # Deepest first, so every child list is complete before its parent
        for column in sorted(table.columns, key=lambda c: -depths[c.id]):
            node = dict(rendered[column.id])
            children = [
                child for _, child in sorted(pending.pop(column.id, []), key=lambda p: p[0])
            ]
            self._attach(column, node, children)

            sort_key = (column.order, position[column.id])
            if column.parent_id is None:
                roots.append((sort_key, node))
            else:
                pending.setdefault(column.parent_id, []).append((sort_key, node))

        return [node for _, node in sorted(roots, key=lambda p: p[0])]

    def _attach(
        self, column: Column, node: Dict[str, Any], children: List[Dict[str, Any]]
    ) -> None:
        kind = column.nested_kind
        if kind is None and children:
            kind = (
                NestingKind.ARRAY_OF_ROWS
                if (column.logical_type or "").lower() == "array"
                else NestingKind.OBJECT_FIELDS
            )
            logger.debug(f"Column {column.name} has children but no nesting kind; using {kind.value}")

        if kind is NestingKind.ARRAY_OF_ROWS:
            items = dict(column.items_extras or {})
            items[PROPERTIES] = children
            node[ITEMS] = items
            return

        if kind is NestingKind.OBJECT_FIELDS:
            node[PROPERTIES] = children
        if column.items_extras is not None:
            node[ITEMS] = dict(column.items_extras)
