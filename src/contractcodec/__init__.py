"""contractcodec - Lossless codec between flat table models and data contracts."""

__version__ = "0.1.0"

# Core modules
from contractcodec.core import (
    CodecError,
    CodecWarning,
    Column,
    CompoundKey,
    ContractCodec,
    ContractEnvelope,
    ContractModel,
    DocumentShapeError,
    ExportResult,
    Relationship,
    StructuralError,
    Table,
    columns_frame,
    export_contract,
    import_contract,
)

# Utils
from contractcodec.utils.config import Config, get_config, load_config

__all__ = [
    # Version
    "__version__",
    # Codec
    "ContractCodec",
    "ExportResult",
    "import_contract",
    "export_contract",
    # Model
    "ContractModel",
    "ContractEnvelope",
    "Table",
    "Column",
    "CompoundKey",
    "Relationship",
    "columns_frame",
    # Errors
    "CodecError",
    "CodecWarning",
    "StructuralError",
    "DocumentShapeError",
    # Config
    "Config",
    "get_config",
    "load_config",
]
