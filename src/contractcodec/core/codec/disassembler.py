"""Contract document -> flat model (import direction)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from contractcodec.core.codec.base import CodecContext, CodecStage
from contractcodec.core.codec.extensions import MetadataPreserver
from contractcodec.core.codec.flattener import ColumnTreeFlattener
from contractcodec.core.codec.keys import KeyResolver
from contractcodec.core.codec.relationships import RelationshipLinker
from contractcodec.core.codec.wire import (
    ENVELOPE_FIELDS,
    ID,
    NAME,
    PROPERTIES,
    RELATIONSHIPS,
    SCHEMA,
    STATUS,
    TABLE_FIELDS,
)
from contractcodec.core.document import (
    NodeKind,
    as_string,
    expect_array,
    expect_object,
    is_kind,
)
from contractcodec.core.errors import (
    ExtensionConflictWarning,
    StructuralError,
    TableError,
)
from contractcodec.core.schema.model import ContractModel
from contractcodec.core.schema.types import ContractEnvelope, Table
from contractcodec.utils.logging import get_logger

logger = get_logger(__name__)


class ContractDisassembler(CodecStage):
    """Split a contract document into tables, columns, keys and links.

    Stages run per schema object in this order: flattening, status
    relocation, key resolution. Relationships are linked once every table
    is known.
    """

    def __init__(self, context: CodecContext):
        super().__init__(context)
        self.preserver = MetadataPreserver(context)
        self.flattener = ColumnTreeFlattener(context, self.preserver)
        self.keys = KeyResolver(context, self.preserver)
        self.linker = RelationshipLinker(context, self.preserver)

    def disassemble(self, document: Any) -> ContractModel:
        """Import a whole contract document.

        Args:
            document: Parsed contract document (root object)

        Returns:
            ContractModel with the tables that imported cleanly, warnings and
            per-table errors

        Raises:
            DocumentShapeError: If the root or its ``schema`` list is malformed
            StructuralError: In strict mode, on the first rejected table
        """
        root = expect_object(document, "contract")
        envelope = self._read_envelope(root)
        schema = expect_array(root.get(SCHEMA), SCHEMA)

        strict = bool(self.context.setting("strict", False))
        tables: List[Table] = []
        errors: List[TableError] = []

        for position, node in enumerate(schema):
            label = self._label(node, position)
            try:
                tables.append(self._read_table(node, label, envelope))
            except StructuralError as e:
                if strict:
                    raise
                logger.error(f"Skipping table {label}: {e}")
                errors.append(TableError.from_exception(label, e))

        self.linker.link(tables)

        logger.info(
            f"Imported {len(tables)} tables "
            f"({sum(len(t.columns) for t in tables)} columns), "
            f"{len(errors)} rejected, {len(self.context.warnings)} warnings"
        )
        return ContractModel(
            envelope=envelope,
            tables=tables,
            warnings=list(self.context.warnings),
            errors=errors,
        )

    @staticmethod
    def _label(node: Any, position: int) -> str:
        if is_kind(node, NodeKind.OBJECT):
            name = as_string(node.get(NAME))
            if name:
                return name
        return f"schema[{position}]"

    def _read_envelope(self, root: Dict[str, Any]) -> ContractEnvelope:
        envelope = ContractEnvelope()
        consumed = {SCHEMA}

        for key, attr, reader in ENVELOPE_FIELDS:
            if key not in root:
                continue
            value = reader(root[key])
            if value is not None:
                setattr(envelope, attr, value)
                consumed.add(key)

        envelope.extensions = self.preserver.collect(root, consumed)
        return envelope

    def _read_table(
        self, node: Any, label: str, envelope: ContractEnvelope
    ) -> Table:
        if not is_kind(node, NodeKind.OBJECT):
            raise StructuralError("Schema entry is not an object", table=label)

        name = as_string(node.get(NAME))
        if not name:
            raise StructuralError("Schema object has no name", table=label)
        consumed = {NAME}

        table_id = as_string(node.get(ID))
        synthetic = table_id is None
        if synthetic:
            table_id = self.context.synthesize_id("table", envelope.id or "", name)
        else:
            consumed.add(ID)

        table = Table(id=table_id, name=name, synthetic_id=synthetic)
        for key, attr, reader in TABLE_FIELDS:
            if key not in node:
                continue
            value = reader(node[key])
            if value is not None:
                setattr(table, attr, value)
                consumed.add(key)

        properties = node.get(PROPERTIES)
        if not is_kind(properties, NodeKind.ARRAY, NodeKind.NULL):
            raise StructuralError("'properties' is not a list", table=name)
        if PROPERTIES in node:
            consumed.add(PROPERTIES)
        flat = self.flattener.flatten(expect_array(properties, name), table.id, name)
        table.columns = flat.columns

        # An empty list stays an extension so it is written back as-is
        raw_links = node.get(RELATIONSHIPS)
        if is_kind(raw_links, NodeKind.ARRAY) and raw_links:
            table.relationships = self.linker.read(raw_links, table)
            consumed.add(RELATIONSHIPS)
        for column in table.columns:
            if column.id in flat.links:
                column.relationships = self.linker.read(flat.links[column.id], table, column)

        schema_status = as_string(node.get(STATUS))
        if schema_status is not None:
            consumed.add(STATUS)
        table.extensions = self.preserver.collect(node, consumed, table=name)
        self._relocate_status(table, schema_status)

        self.keys.resolve(table)
        return table

    def _relocate_status(self, table: Table, schema_status: Optional[str]) -> None:
        """Move a schema-level status into the status custom property."""
        key = self.context.status_property
        entry = self.preserver.find(table.extensions, key)

        if entry is not None:
            table.status = entry.value
            if schema_status is not None and schema_status != entry.value:
                self.context.warn(
                    ExtensionConflictWarning(
                        message=(
                            f"Schema-level status {schema_status!r} differs from "
                            f"custom property {entry.value!r}; keeping the custom property"
                        ),
                        table=table.name,
                        details={"key": key},
                    )
                )
            return

        if schema_status is not None:
            table.status = schema_status
            table.extensions = self.preserver.inject(
                table.extensions, key, schema_status, table=table.name
            )
            logger.debug(f"Relocated status of {table.name} into custom property '{key}'")
