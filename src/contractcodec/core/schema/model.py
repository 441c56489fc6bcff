"""Contract model: the internal side of the codec."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from contractcodec.core.errors import CodecWarning, TableError
from contractcodec.core.schema.types import ContractEnvelope, Relationship, Table
from contractcodec.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ContractModel:
    """Tables, relationships and findings produced by one import."""

    envelope: ContractEnvelope = field(default_factory=ContractEnvelope)
    tables: List[Table] = field(default_factory=list)
    warnings: List[CodecWarning] = field(default_factory=list)
    errors: List[TableError] = field(default_factory=list)

    @property
    def relationships(self) -> List[Relationship]:
        """Every relationship, table-level first, then column-level per table."""
        result: List[Relationship] = []
        for table in self.tables:
            result.extend(table.relationships)
            for column in sorted(table.columns, key=lambda c: c.order):
                result.extend(column.relationships)
        return result

    def get_table(self, name: str) -> Optional[Table]:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            "envelope": self.envelope.to_dict(),
            "tables": [table.to_dict() for table in self.tables],
            "warnings": [warning.to_dict() for warning in self.warnings],
            "errors": [error.to_dict() for error in self.errors],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> ContractModel:
        """Create from dictionary.

        Args:
            data: Dictionary produced by :meth:`to_dict`

        Returns:
            ContractModel instance
        """
        return cls(
            envelope=ContractEnvelope.from_dict(data.get("envelope") or {}),
            tables=[Table.from_dict(table) for table in data.get("tables") or []],
            warnings=[CodecWarning.from_dict(w) for w in data.get("warnings") or []],
            errors=[TableError.from_dict(e) for e in data.get("errors") or []],
        )

    def save(self, path: str | Path, indent: int = 2) -> None:
        """Save the model to a JSON file.

        Args:
            path: Path to save JSON file
            indent: JSON indentation
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=indent)

        logger.info(f"Saved contract model to {path}")

    @classmethod
    def load(cls, path: str | Path) -> ContractModel:
        """Load a model from a JSON file.

        Args:
            path: Path to JSON file

        Returns:
            ContractModel instance
        """
        with open(path, "r") as f:
            data = json.load(f)

        return cls.from_dict(data)

    def __repr__(self) -> str:
        return (
            f"ContractModel(tables={len(self.tables)}, "
            f"relationships={len(self.relationships)}, "
            f"warnings={len(self.warnings)}, errors={len(self.errors)})"
        )
