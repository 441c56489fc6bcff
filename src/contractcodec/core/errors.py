"""Codec errors and non-fatal warnings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class CodecError(Exception):
    """Base class for all codec failures."""

    pass


class StructuralError(CodecError, ValueError):
    """Raised when a table's column forest is corrupt.

    Covers orphaned parent references, cyclic parent chains and duplicate
    column identifiers. The offending table is rejected as a whole; sibling
    tables are unaffected.

    Example:
        A column whose ``parent_id`` names a column that is not in the same
        table raises this error during export.
    """

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        column: Optional[str] = None,
    ):
        self.table = table
        self.column = column
        super().__init__(message)


class DocumentShapeError(StructuralError):
    """Raised when a document node has the wrong shape for its position.

    Example:
        ``schema`` being a string instead of a list of schema objects.
    """

    pass


@dataclass
class CodecWarning:
    """A non-fatal finding reported alongside a codec result."""

    message: str
    table: Optional[str] = None
    column: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    code = "codec"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "table": self.table,
            "column": self.column,
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CodecWarning:
        """Rebuild a warning, picking the subclass from its ``code``."""
        warning_cls = WARNING_TYPES.get(data.get("code", ""), CodecWarning)
        return warning_cls(
            message=data["message"],
            table=data.get("table"),
            column=data.get("column"),
            details=data.get("details") or {},
        )

    def __str__(self) -> str:
        where = self.table or "<contract>"
        if self.column:
            where = f"{where}.{self.column}"
        return f"[{self.code}] {where}: {self.message}"


@dataclass
class KeyAmbiguityWarning(CodecWarning):
    """Primary key positions are missing, duplicated or contradict the descriptor."""

    code = "key_ambiguity"


@dataclass
class UnresolvedRelationshipWarning(CodecWarning):
    """A relationship target does not name an existing table or column."""

    code = "unresolved_relationship"


@dataclass
class ExtensionConflictWarning(CodecWarning):
    """A reserved extension entry disagreed with codec-computed state."""

    code = "extension_conflict"


@dataclass
class LegacyFormatWarning(CodecWarning):
    """A pre-3.x construct was rewritten into its current form on import."""

    code = "legacy_format"


WARNING_TYPES = {
    KeyAmbiguityWarning.code: KeyAmbiguityWarning,
    UnresolvedRelationshipWarning.code: UnresolvedRelationshipWarning,
    ExtensionConflictWarning.code: ExtensionConflictWarning,
    LegacyFormatWarning.code: LegacyFormatWarning,
}


@dataclass
class TableError:
    """A fatal error that rejected one table during import."""

    table: str
    message: str
    column: Optional[str] = None

    @classmethod
    def from_exception(cls, table: str, error: StructuralError) -> TableError:
        return cls(table=table, message=str(error), column=error.column)

    def to_dict(self) -> Dict[str, Any]:
        return {"table": self.table, "message": self.message, "column": self.column}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TableError:
        return cls(
            table=data["table"], message=data["message"], column=data.get("column")
        )
