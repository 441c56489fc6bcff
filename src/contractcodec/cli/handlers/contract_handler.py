"""Business logic for contract commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
import yaml

from contractcodec.core.codec import ContractCodec, ExportResult
from contractcodec.core.frames import columns_frame
from contractcodec.core.schema import ContractModel
from contractcodec.utils.config import Config
from contractcodec.utils.logging import get_logger

logger = get_logger(__name__)


class ContractHandler:
    """Handler for contract operations.

    Owns file formats (YAML or JSON by suffix) so the codec itself never
    touches the filesystem.

    Example:
        >>> handler = ContractHandler(config)
        >>> model = handler.import_file("contract.yaml")
    """

    def __init__(self, config: Config, strict: bool = False):
        """Initialize handler.

        Args:
            config: Configuration instance
            strict: Fail on the first malformed table
        """
        self.config = config
        settings = config.codec_settings()
        if strict:
            settings["strict"] = True
        self.codec = ContractCodec(settings)

    def read_document(self, path: str | Path) -> Any:
        """Parse a contract document from YAML or JSON."""
        path = Path(path)
        with open(path, "r") as f:
            if path.suffix.lower() == ".json":
                return json.load(f)
            return yaml.safe_load(f)

    def write_document(self, document: Dict[str, Any], path: str | Path) -> Path:
        """Write a contract document, keeping key order."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            if path.suffix.lower() == ".json":
                json.dump(document, f, indent=self.config.get("output.json_indent", 2))
            else:
                yaml.safe_dump(
                    document,
                    f,
                    sort_keys=False,
                    allow_unicode=True,
                    indent=self.config.get("output.yaml_indent", 2),
                )

        logger.info(f"Wrote contract document to {path}")
        return path

    def dump_document(self, document: Dict[str, Any]) -> str:
        return yaml.safe_dump(
            document,
            sort_keys=False,
            allow_unicode=True,
            indent=self.config.get("output.yaml_indent", 2),
        )

    def import_file(
        self, path: str | Path, output: Optional[str | Path] = None
    ) -> ContractModel:
        """Import a contract file and optionally save the model as JSON.

        Args:
            path: Contract document (YAML or JSON)
            output: Optional model JSON path

        Returns:
            Imported ContractModel
        """
        model = self.codec.import_document(self.read_document(path))
        if output:
            model.save(output, indent=self.config.get("output.json_indent", 2))
        return model

    def export_file(
        self, model_path: str | Path, output: Optional[str | Path] = None
    ) -> ExportResult:
        """Export a saved model to a contract document.

        Args:
            model_path: Model JSON written by :meth:`import_file`
            output: Optional document path; nothing is written when None

        Returns:
            ExportResult
        """
        model = ContractModel.load(model_path)
        result = self.codec.export_model(model)
        if output:
            self.write_document(result.document, output)
        return result

    def roundtrip_file(
        self, path: str | Path, output: Optional[str | Path] = None
    ) -> Dict[str, Any]:
        """Import then export a document and compare the trees.

        Returns:
            Dictionary with ``result`` (ExportResult) and ``identical`` (bool)
        """
        document = self.read_document(path)
        result = self.codec.roundtrip(document)
        if output:
            self.write_document(result.document, output)
        return {"result": result, "identical": result.document == document}

    def inspect_file(self, path: str | Path) -> pd.DataFrame:
        """Flat column view of a contract document."""
        model = self.codec.import_document(self.read_document(path))
        return columns_frame(model.tables)
