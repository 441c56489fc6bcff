"""Contract codec stages and entry points."""

from contractcodec.core.codec.base import CodecContext, CodecStage
from contractcodec.core.codec.codec import (
    ContractCodec,
    ExportResult,
    export_contract,
    import_contract,
)

__all__ = [
    "CodecContext",
    "CodecStage",
    "ContractCodec",
    "ExportResult",
    "export_contract",
    "import_contract",
]
