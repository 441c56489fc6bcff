"""Core modules for contractcodec."""

# Re-export all public APIs
from contractcodec.core.codec import (
    ContractCodec,
    ExportResult,
    export_contract,
    import_contract,
)
from contractcodec.core.errors import (
    CodecError,
    CodecWarning,
    DocumentShapeError,
    ExtensionConflictWarning,
    KeyAmbiguityWarning,
    LegacyFormatWarning,
    StructuralError,
    TableError,
    UnresolvedRelationshipWarning,
)
from contractcodec.core.frames import columns_frame
from contractcodec.core.schema import (
    Column,
    CompoundKey,
    ContractEnvelope,
    ContractModel,
    ExtensionEntry,
    ExtensionPlacement,
    NestingKind,
    Relationship,
    RelationshipKind,
    Table,
)

__all__ = [
    # Codec
    "ContractCodec",
    "ExportResult",
    "export_contract",
    "import_contract",
    # Model
    "Column",
    "CompoundKey",
    "ContractEnvelope",
    "ContractModel",
    "ExtensionEntry",
    "ExtensionPlacement",
    "NestingKind",
    "Relationship",
    "RelationshipKind",
    "Table",
    # Errors
    "CodecError",
    "CodecWarning",
    "DocumentShapeError",
    "ExtensionConflictWarning",
    "KeyAmbiguityWarning",
    "LegacyFormatWarning",
    "StructuralError",
    "TableError",
    "UnresolvedRelationshipWarning",
    # Views
    "columns_frame",
]
