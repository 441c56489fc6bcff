"""Flat model -> contract document (export direction)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from contractcodec.core.codec.base import CodecContext, CodecStage
from contractcodec.core.codec.builder import ColumnTreeBuilder
from contractcodec.core.codec.extensions import MetadataPreserver
from contractcodec.core.codec.keys import KeyFlags, KeyResolver
from contractcodec.core.codec.naming import TableNameIndex
from contractcodec.core.codec.relationships import RelationshipLinker
from contractcodec.core.codec.wire import (
    COLUMN_FIELDS,
    ENVELOPE_FIELDS,
    ID,
    NAME,
    PROPERTIES,
    RELATIONSHIPS,
    SCHEMA,
    TABLE_FIELDS,
)
from contractcodec.core.schema.types import (
    Column,
    ContractEnvelope,
    ExtensionEntry,
    Relationship,
    Table,
)
from contractcodec.utils.logging import get_logger

logger = get_logger(__name__)


class ContractAssembler(CodecStage):
    """Assemble a contract document from flat tables.

    Per table, key flags and relationship nodes are computed first, each
    column is rendered, and only then does the builder nest the rendered
    nodes. Reserved custom properties (key descriptor, status) are written
    from computed state, replacing any stored copy.
    """

    def __init__(self, context: CodecContext):
        super().__init__(context)
        self.preserver = MetadataPreserver(context)
        self.keys = KeyResolver(context, self.preserver)
        self.linker = RelationshipLinker(context, self.preserver)
        self.builder = ColumnTreeBuilder(context)

    def assemble(
        self,
        tables: List[Table],
        relationships: Optional[List[Relationship]] = None,
        envelope: Optional[ContractEnvelope] = None,
    ) -> Dict[str, Any]:
        """Export tables to a contract document.

        Args:
            tables: Tables to export, in document order
            relationships: Extra relationships not attached to any table or
                column (matched by id, attached ones win)
            envelope: Contract-level metadata; defaults come from settings

        Returns:
            Contract document

        Raises:
            StructuralError: If any table's column forest or keys are corrupt
        """
        index = TableNameIndex(tables)
        by_table, by_column = self.linker.place(tables, relationships)

        schema = [
            self._write_table(table, index, by_table, by_column) for table in tables
        ]
        document = self._write_envelope(envelope or ContractEnvelope(), tables, schema)

        logger.info(
            f"Exported {len(tables)} tables "
            f"({sum(len(t.columns) for t in tables)} columns), "
            f"{len(self.context.warnings)} warnings"
        )
        return document

    def _emit_id(self, synthetic: bool) -> bool:
        return not synthetic or bool(self.context.setting("emit_synthesized_ids", False))

    def _write_table(
        self,
        table: Table,
        index: TableNameIndex,
        by_table: Dict[str, List[Relationship]],
        by_column: Dict[str, List[Relationship]],
    ) -> Dict[str, Any]:
        flags = self.keys.column_flags(table)
        descriptor = self.keys.descriptor(table)

        rendered = {
            column.id: self._render_column(
                column, flags[column.id], by_column.get(column.id, []), index
            )
            for column in table.columns
        }
        properties = self.builder.build(table, rendered)

        node: Dict[str, Any] = {}
        if self._emit_id(table.synthetic_id):
            node[ID] = table.id
        node[NAME] = table.name
        for key, attr, _ in TABLE_FIELDS:
            value = getattr(table, attr)
            if value is not None:
                node[key] = value
        node[PROPERTIES] = properties

        links = self.linker.render(by_table.get(table.id, []), index)
        if links:
            node[RELATIONSHIPS] = links

        extensions = self._reserved(
            table.extensions, self.context.compound_key_property, descriptor, table.name
        )
        extensions = self._reserved(
            extensions, self.context.status_property, table.status, table.name
        )
        return self.preserver.emit(node, extensions, table=table.name)

    def _reserved(
        self,
        extensions: List[ExtensionEntry],
        key: str,
        value: Any,
        table_name: str,
    ) -> List[ExtensionEntry]:
        """Write computed state into a reserved custom property."""
        if value is not None:
            return self.preserver.inject(extensions, key, value, table=table_name)
        if self.preserver.find(extensions, key) is not None:
            return self.preserver.remove(extensions, key, table=table_name)
        return extensions

    def _render_column(
        self,
        column: Column,
        flags: KeyFlags,
        relationships: List[Relationship],
        index: TableNameIndex,
    ) -> Dict[str, Any]:
        node: Dict[str, Any] = {}
        if self._emit_id(column.synthetic_id):
            node[ID] = column.id
        node[NAME] = column.name

        for key, attr, _ in COLUMN_FIELDS:
            value = getattr(column, attr)
            if value is not None:
                node[key] = value
        for key, value in flags.items():
            if value is not None:
                node[key] = value

        links = self.linker.render(relationships, index)
        if links:
            node[RELATIONSHIPS] = links

        return self.preserver.emit(node, column.extensions, column=column.name)

    def _write_envelope(
        self,
        envelope: ContractEnvelope,
        tables: List[Table],
        schema: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        defaults = {
            "api_version": self.context.setting("api_version", "v3.1.0"),
            "kind": self.context.setting("kind", "DataContract"),
            "id": self.context.synthesize_id(
                "contract", envelope.name or "", *[t.id for t in tables]
            ),
            "version": self.context.setting("default_version", "1.0.0"),
            "status": self.context.setting("default_status", "draft"),
        }

        node: Dict[str, Any] = {}
        for key, attr, _ in ENVELOPE_FIELDS:
            value = getattr(envelope, attr)
            if value is None:
                value = defaults.get(attr)
            if value is not None:
                node[key] = value
        node[SCHEMA] = schema

        return self.preserver.emit(node, envelope.extensions)
