"""Flat contract model: tables, columns, keys and relationships."""

from contractcodec.core.schema.model import ContractModel
from contractcodec.core.schema.types import (
    Column,
    CompoundKey,
    ContractEnvelope,
    ExtensionEntry,
    ExtensionPlacement,
    NestingKind,
    Relationship,
    RelationshipKind,
    Table,
)

__all__ = [
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
]
