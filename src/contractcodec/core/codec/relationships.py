"""Resolve ``table`` / ``table.column`` relationship strings and encode them back."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

from contractcodec.core.codec.base import CodecContext, CodecStage
from contractcodec.core.codec.extensions import MetadataPreserver
from contractcodec.core.codec.naming import TableNameIndex
from contractcodec.core.codec.wire import RELATIONSHIP_FIELDS
from contractcodec.core.document import NodeKind, is_kind
from contractcodec.core.errors import UnresolvedRelationshipWarning
from contractcodec.core.schema.types import Column, Relationship, Table
from contractcodec.utils.logging import get_logger

logger = get_logger(__name__)


class RelationshipLinker(CodecStage):
    """Turn dotted target strings into typed links and back."""

    def __init__(self, context: CodecContext, preserver: MetadataPreserver):
        super().__init__(context)
        self.preserver = preserver

    # Import

    def read(
        self,
        raw_links: List[Any],
        table: Table,
        column: Optional[Column] = None,
    ) -> List[Relationship]:
        """Parse relationship nodes declared on a table or column.

        A ``to`` list yields one relationship per target, all sharing the
        same ``target_group`` so they are re-exported as one list.
        Targets are left unresolved here; see :meth:`link`.
        """
        relationships: List[Relationship] = []
        owner = column.id if column else ""

        for position, node in enumerate(raw_links):
            if not is_kind(node, NodeKind.OBJECT):
                self.context.warn(
                    UnresolvedRelationshipWarning(
                        message=f"Relationship #{position + 1} is not an object; dropped",
                        table=table.name,
                        column=column.name if column else None,
                        details={"raw": node},
                    )
                )
                continue

            consumed = {"to"}
            attrs: Dict[str, Any] = {}
            for key, attr, reader in RELATIONSHIP_FIELDS:
                if key in node and reader(node[key]) is not None:
                    attrs[attr] = reader(node[key])
                    consumed.add(key)

            targets, group = self._targets(node.get("to"))
            if "to" not in node or targets is None:
                consumed.discard("to")
                targets = [""]

            extensions = self.preserver.collect(node, consumed)
            for target in targets:
                table_part, _, column_part = target.partition(".")
                relationships.append(
                    Relationship(
                        id=self.context.synthesize_id(
                            "relationship", table.id, owner, str(position), target
                        ),
                        source_table_id=table.id,
                        source_column_id=column.id if column else None,
                        raw_target=target,
                        target_table=table_part,
                        target_column=column_part or None,
                        extensions=list(extensions),
                        target_group=position if group else None,
                        **attrs,
                    )
                )

        return relationships

    @staticmethod
    def _targets(value: Any) -> Tuple[Optional[List[str]], bool]:
        if is_kind(value, NodeKind.STRING):
            return [value], False
        if is_kind(value, NodeKind.ARRAY) and value and all(
            is_kind(item, NodeKind.STRING) for item in value
        ):
            return list(value), True
        return None, False

    def link(self, tables: List[Table]) -> None:
        """Resolve every relationship against the whole table set.

        Runs once per call after all tables are flattened, because links
        may point at any table and at nested columns.
        """
        index = TableNameIndex(tables)
        resolved = unresolved = 0

        for table in tables:
            for relationship, column in self._owned(table):
                if self._resolve(relationship, index):
                    resolved += 1
                    continue
                unresolved += 1
                self.context.warn(
                    UnresolvedRelationshipWarning(
                        message=f"Relationship target '{relationship.raw_target}' not found",
                        table=table.name,
                        column=column.name if column else None,
                        details={"target": relationship.raw_target},
                    )
                )

        logger.info(f"Linked relationships: {resolved} resolved, {unresolved} unresolved")

    @staticmethod
    def _owned(table: Table) -> Iterable[Tuple[Relationship, Optional[Column]]]:
        for relationship in table.relationships:
            yield relationship, None
        for column in sorted(table.columns, key=lambda c: c.order):
            for relationship in column.relationships:
                yield relationship, column

    @staticmethod
    def _resolve(relationship: Relationship, index: TableNameIndex) -> bool:
        relationship.resolved = False
        relationship.target_table_id = None
        relationship.target_column_id = None

        target = index.by_name(relationship.target_table)
        if target is None:
            return False
        relationship.target_table_id = target.id

        if relationship.target_column is None:
            relationship.resolved = True
            return True

        column = index.columns(target).resolve(relationship.target_column)
        if column is None:
            return False
        relationship.target_column_id = column.id
        relationship.resolved = True
        return True

    # Export

    def place(
        self, tables: List[Table], extra: Optional[List[Relationship]] = None
    ) -> Tuple[Dict[str, List[Relationship]], Dict[str, List[Relationship]]]:
        """Group relationships by owning table and owning column.

        Relationships attached to tables and columns come first; ``extra``
        ones (e.g. created in the editor store) are added under their source
        unless an attached relationship already has the same id.
        """
        by_table: Dict[str, List[Relationship]] = {}
        by_column: Dict[str, List[Relationship]] = {}
        seen = set()
        column_owner: Dict[str, str] = {}

        for table in tables:
            by_table[table.id] = list(table.relationships)
            seen.update(rel.id for rel in table.relationships)
            for column in table.columns:
                column_owner[column.id] = table.id
                by_column[column.id] = list(column.relationships)
                seen.update(rel.id for rel in column.relationships)

        for relationship in extra or []:
            if relationship.id in seen:
                continue
            seen.add(relationship.id)
            if relationship.source_column_id is not None:
                if column_owner.get(relationship.source_column_id) == relationship.source_table_id:
                    by_column[relationship.source_column_id].append(relationship)
                    continue
            elif relationship.source_table_id in by_table:
                by_table[relationship.source_table_id].append(relationship)
                continue
            self.context.warn(
                UnresolvedRelationshipWarning(
                    message=(
                        f"Relationship to '{relationship.raw_target}' has a source "
                        "outside the exported tables; not written"
                    ),
                    details={
                        "source_table_id": relationship.source_table_id,
                        "source_column_id": relationship.source_column_id,
                    },
                )
            )

        return by_table, by_column

    def encode(self, relationship: Relationship, index: TableNameIndex) -> str:
        """Build the target string from current names.

        Resolved ids win so renamed tables and columns are written under
        their new names; unresolved links fall back to what was imported.
        """
        target = index.by_id(relationship.target_table_id) if relationship.target_table_id else None
        if target is not None:
            if relationship.target_column_id:
                columns = index.columns(target)
                column = columns.get(relationship.target_column_id)
                if column is not None:
                    # Keep the imported spelling (bare or dotted) while it still fits
                    stored = relationship.target_column
                    if stored and columns.resolve(stored) is column:
                        return f"{target.name}.{stored}"
                    return f"{target.name}.{columns.name_for(column)}"
            if relationship.target_column:
                return f"{target.name}.{relationship.target_column}"
            return target.name

        if relationship.target_table:
            if relationship.target_column:
                return f"{relationship.target_table}.{relationship.target_column}"
            return relationship.target_table
        return relationship.raw_target

    def render(
        self, relationships: List[Relationship], index: TableNameIndex
    ) -> List[Dict[str, Any]]:
        """Relationship nodes for one owner, regrouping ``to`` lists."""
        nodes: List[Dict[str, Any]] = []
        current_group: Optional[int] = None

        for relationship in relationships:
            target = self.encode(relationship, index)
            group = relationship.target_group
            if group is not None and group == current_group and nodes:
                nodes[-1]["to"].append(target)
                continue
            current_group = group

            node: Dict[str, Any] = {}
            if relationship.relationship_type is not None:
                node["type"] = relationship.relationship_type
            if target:
                node["to"] = [target] if group is not None else target
            if relationship.description is not None:
                node["description"] = relationship.description
            nodes.append(self.preserver.emit(node, relationship.extensions))

        return nodes
