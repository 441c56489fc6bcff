"""Public entry points of the contract codec."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from contractcodec.core.codec.assembler import ContractAssembler
from contractcodec.core.codec.base import CodecContext
from contractcodec.core.codec.disassembler import ContractDisassembler
from contractcodec.core.errors import CodecWarning
from contractcodec.core.schema.model import ContractModel
from contractcodec.core.schema.types import ContractEnvelope, Relationship, Table
from contractcodec.utils.config import Config
from contractcodec.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ExportResult:
    """Exported document plus the warnings raised while writing it."""

    document: Dict[str, Any]
    warnings: List[CodecWarning] = field(default_factory=list)


class ContractCodec:
    """Bidirectional codec between flat tables and contract documents.

    Holds settings only. Every call builds its own :class:`CodecContext`, so
    one instance can serve concurrent calls.

    Example:
        >>> codec = ContractCodec()
        >>> model = codec.import_document(document)
        >>> result = codec.export_model(model)
        >>> result.document == document
        True
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        """Initialize codec.

        Args:
            settings: Overrides merged over the default ``codec`` config
                section. Callers that load a config file pass its
                ``codec_settings()`` here.
        """
        base = Config().codec_settings()
        if settings:
            base = Config._merge_configs(base, settings)
        self.settings = base

    def _context(self) -> CodecContext:
        return CodecContext(settings=dict(self.settings))

    def import_document(self, document: Any) -> ContractModel:
        """Import a contract document into a flat model.

        Args:
            document: Parsed contract document (root object)

        Returns:
            ContractModel; tables rejected by structural errors are listed in
            ``errors`` unless ``strict`` is set

        Raises:
            DocumentShapeError: If the document root is malformed
            StructuralError: In strict mode, on the first rejected table
        """
        return ContractDisassembler(self._context()).disassemble(document)

    def export_document(
        self,
        tables: List[Table],
        relationships: Optional[List[Relationship]] = None,
        envelope: Optional[ContractEnvelope] = None,
    ) -> ExportResult:
        """Export flat tables to a contract document.

        Args:
            tables: Tables in document order
            relationships: Relationships not attached to a table or column
            envelope: Contract-level metadata

        Returns:
            ExportResult with the document and warnings

        Raises:
            StructuralError: If a table's column forest or keys are corrupt
        """
        context = self._context()
        document = ContractAssembler(context).assemble(tables, relationships, envelope)
        return ExportResult(document=document, warnings=list(context.warnings))

    def export_model(self, model: ContractModel) -> ExportResult:
        """Export a previously imported model with its envelope."""
        return self.export_document(model.tables, envelope=model.envelope)

    def roundtrip(self, document: Any) -> ExportResult:
        """Import then export a document; useful to check losslessness."""
        model = self.import_document(document)
        result = self.export_model(model)
        result.warnings = list(model.warnings) + result.warnings
        return result


def import_contract(
    document: Any, settings: Optional[Dict[str, Any]] = None
) -> ContractModel:
    """Import a contract document with a one-off codec."""
    return ContractCodec(settings).import_document(document)


def export_contract(
    tables: List[Table],
    relationships: Optional[List[Relationship]] = None,
    envelope: Optional[ContractEnvelope] = None,
    settings: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Export tables to a contract document with a one-off codec."""
    return ContractCodec(settings).export_document(tables, relationships, envelope).document
