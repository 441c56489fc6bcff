"""Flatten nested contract properties into a parent-linked column list."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from contractcodec.core.codec.base import CodecContext, CodecStage
from contractcodec.core.codec.extensions import MetadataPreserver
from contractcodec.core.codec.wire import (
    COLUMN_FIELDS,
    ID,
    ITEMS,
    NAME,
    PRIMARY_KEY,
    PRIMARY_KEY_POSITION,
    PROPERTIES,
    RELATIONSHIPS,
)
from contractcodec.core.document import (
    NodeKind,
    as_bool,
    as_int,
    as_string,
    expect_array,
    is_kind,
)
from contractcodec.core.errors import StructuralError
from contractcodec.core.schema.types import Column, NestingKind
from contractcodec.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class FlattenResult:
    """Flat columns for one table plus their raw relationship nodes."""

    columns: List[Column] = field(default_factory=list)
    links: Dict[str, List[Any]] = field(default_factory=dict)  # column id -> raw links


class ColumnTreeFlattener(CodecStage):
    """Depth-first, pre-order flattening of a property forest.

    Every visited property becomes one :class:`Column`. Non-root columns
    carry their parent's id; the parent carries the nesting kind that tells
    the builder whether to rebuild children under ``properties`` or under
    ``items.properties``.
    """

    def __init__(self, context: CodecContext, preserver: MetadataPreserver):
        super().__init__(context)
        self.preserver = preserver

    def flatten(
        self, properties: List[Any], table_id: str, table_name: str
    ) -> FlattenResult:
        """Flatten a schema object's ``properties`` list.

        Args:
            properties: Root property nodes, in document order
            table_id: Identifier of the owning table
            table_name: Table name, used in error messages

        Returns:
            FlattenResult with columns in pre-order

        Raises:
            StructuralError: On malformed property nodes, duplicate ids or a
                property that contains itself
        """
        result = FlattenResult()
        seen_ids: Dict[str, str] = {}
        path_counts: Dict[str, int] = {}

        # (node, parent column, parent path, ancestor node ids); reversed so
        # pop() keeps document order
        stack: List[Tuple[Any, Optional[Column], str, FrozenSet[int]]] = [
            (node, None, "", frozenset()) for node in reversed(properties)
        ]

        while stack:
            node, parent, parent_path, ancestors = stack.pop()
            if id(node) in ancestors:
                # Only reachable through aliased nodes in the parsed tree
                raise StructuralError(
                    f"Cyclic property tree: '{parent_path}' contains itself",
                    table=table_name,
                    column=parent.name if parent else None,
                )
            column, children = self._visit(
                node, parent, parent_path, table_id, table_name, result, path_counts
            )

            if column.id in seen_ids:
                raise StructuralError(
                    f"Duplicate column id '{column.id}' "
                    f"(used by '{seen_ids[column.id]}' and '{column.name}')",
                    table=table_name,
                    column=column.name,
                )
            seen_ids[column.id] = column.name

            path = f"{parent_path}.{column.name}" if parent_path else column.name
            lineage = ancestors | {id(node)}
            for child in reversed(children):
                stack.append((child, column, path, lineage))

        logger.debug(
            f"Flattened table {table_name}: {len(result.columns)} columns, "
            f"{sum(1 for c in result.columns if c.parent_id)} nested"
        )
        return result

    def _visit(
        self,
        node: Any,
        parent: Optional[Column],
        parent_path: str,
        table_id: str,
        table_name: str,
        result: FlattenResult,
        path_counts: Dict[str, int],
    ) -> Tuple[Column, List[Any]]:
        if not is_kind(node, NodeKind.OBJECT):
            raise StructuralError(
                f"Property under '{parent_path or '<root>'}' is not an object",
                table=table_name,
            )

        name = as_string(node.get(NAME))
        if not name:
            raise StructuralError(
                f"Property under '{parent_path or '<root>'}' has no name",
                table=table_name,
            )

        path = f"{parent_path}.{name}" if parent_path else name
        consumed = {NAME}

        column_id = as_string(node.get(ID))
        synthetic = column_id is None
        if synthetic:
            # Repeated sibling names get a suffix so their ids stay distinct
            seen = path_counts.get(path, 0)
            path_counts[path] = seen + 1
            column_id = self.context.synthesize_id(
                "column", table_id, path if seen == 0 else f"{path}#{seen}"
            )
        else:
            consumed.add(ID)

        column = Column(
            id=column_id,
            name=name,
            table_id=table_id,
            order=len(result.columns),
            parent_id=parent.id if parent else None,
            synthetic_id=synthetic,
        )

        for key, attr, reader in COLUMN_FIELDS:
            if key not in node:
                continue
            value = reader(node[key])
            if value is not None:
                setattr(column, attr, value)
                consumed.add(key)

        primary_key = as_bool(node.get(PRIMARY_KEY))
        if primary_key is not None:
            column.primary_key = primary_key
            consumed.add(PRIMARY_KEY)
        position = as_int(node.get(PRIMARY_KEY_POSITION))
        if position is not None:
            column.primary_key_position = position
            consumed.add(PRIMARY_KEY_POSITION)

        # An empty list stays an extension so it is written back as-is
        if is_kind(node.get(RELATIONSHIPS), NodeKind.ARRAY) and node[RELATIONSHIPS]:
            result.links[column.id] = list(node[RELATIONSHIPS])
            consumed.add(RELATIONSHIPS)

        children = self._read_nesting(node, column, consumed)

        column.extensions = self.preserver.collect(
            node, consumed, table=table_name, column=name
        )
        result.columns.append(column)
        return column, children

    def _read_nesting(
        self, node: Dict[str, Any], column: Column, consumed: set
    ) -> List[Any]:
        """Decide the nesting kind and return the child property nodes."""
        items = node.get(ITEMS)

        if is_kind(items, NodeKind.OBJECT):
            consumed.add(ITEMS)
            column.items_extras = {k: v for k, v in items.items() if k != PROPERTIES}
            if PROPERTIES in items and is_kind(
                items[PROPERTIES], NodeKind.ARRAY, NodeKind.NULL
            ):
                column.nested_kind = NestingKind.ARRAY_OF_ROWS
                if PROPERTIES in node:
                    logger.debug(
                        f"Column {column.name} has both items.properties and "
                        "properties; keeping the latter as an extension"
                    )
                return expect_array(items[PROPERTIES], column.name)
            if PROPERTIES in items:
                # Malformed nested list: keep the whole wrapper opaque
                column.items_extras = dict(items)

        if PROPERTIES in node and is_kind(node[PROPERTIES], NodeKind.ARRAY, NodeKind.NULL):
            consumed.add(PROPERTIES)
            column.nested_kind = NestingKind.OBJECT_FIELDS
            return expect_array(node[PROPERTIES], column.name)

        return []
