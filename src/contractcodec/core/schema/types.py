"""Internal data model for tables, columns, keys and relationships."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class NestingKind(Enum):
    """How a parent column holds its children in the document."""

    ARRAY_OF_ROWS = "array-of-rows"  # items.properties
    OBJECT_FIELDS = "object-fields"  # properties


class ExtensionPlacement(Enum):
    """Where an extension entry lives in the document."""

    FIELD = "field"  # unknown key at the owner's own level
    CUSTOM_PROPERTY = "custom-property"  # entry of the owner's customProperties


class RelationshipKind(Enum):
    """Normalized relationship target shape."""

    TABLE_TO_TABLE = "table-to-table"
    TABLE_TO_COLUMN = "table-to-column"


@dataclass
class ExtensionEntry:
    """One opaque key/value pair the codec carries without interpreting."""

    key: str
    value: Any
    placement: ExtensionPlacement = ExtensionPlacement.CUSTOM_PROPERTY
    extra: Dict[str, Any] = field(default_factory=dict)  # other customProperty keys

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "value": self.value,
            "placement": self.placement.value,
            "extra": self.extra,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ExtensionEntry:
        return cls(
            key=data["key"],
            value=data.get("value"),
            placement=ExtensionPlacement(
                data.get("placement", ExtensionPlacement.CUSTOM_PROPERTY.value)
            ),
            extra=data.get("extra") or {},
        )


def _extensions_to_list(entries: List[ExtensionEntry]) -> List[Dict[str, Any]]:
    return [entry.to_dict() for entry in entries]


def _extensions_from_list(data: Optional[List[Dict[str, Any]]]) -> List[ExtensionEntry]:
    return [ExtensionEntry.from_dict(item) for item in data or []]


@dataclass
class Relationship:
    """A table-level or column-level link to another table or column.

    ``source_column_id`` is set only for links declared on a column. A target
    that could not be resolved keeps ``resolved=False`` and its ``raw_target``
    string, so it is never dropped.
    """

    id: str
    source_table_id: str
    raw_target: str
    target_table: str
    target_column: Optional[str] = None
    source_column_id: Optional[str] = None
    target_table_id: Optional[str] = None
    target_column_id: Optional[str] = None
    resolved: bool = False
    relationship_type: Optional[str] = None  # ODCS "type", e.g. "references"
    description: Optional[str] = None
    extensions: List[ExtensionEntry] = field(default_factory=list)
    target_group: Optional[int] = None  # shared by targets of one "to" list

    @property
    def kind(self) -> RelationshipKind:
        if self.target_column:
            return RelationshipKind.TABLE_TO_COLUMN
        return RelationshipKind.TABLE_TO_TABLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "source_table_id": self.source_table_id,
            "source_column_id": self.source_column_id,
            "raw_target": self.raw_target,
            "target_table": self.target_table,
            "target_column": self.target_column,
            "target_table_id": self.target_table_id,
            "target_column_id": self.target_column_id,
            "resolved": self.resolved,
            "relationship_type": self.relationship_type,
            "description": self.description,
            "extensions": _extensions_to_list(self.extensions),
            "target_group": self.target_group,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Relationship:
        return cls(
            id=data["id"],
            source_table_id=data["source_table_id"],
            source_column_id=data.get("source_column_id"),
            raw_target=data["raw_target"],
            target_table=data["target_table"],
            target_column=data.get("target_column"),
            target_table_id=data.get("target_table_id"),
            target_column_id=data.get("target_column_id"),
            resolved=data.get("resolved", False),
            relationship_type=data.get("relationship_type"),
            description=data.get("description"),
            extensions=_extensions_from_list(data.get("extensions")),
            target_group=data.get("target_group"),
        )

    def __repr__(self) -> str:
        state = "" if self.resolved else ", unresolved"
        return f"Relationship({self.source_table_id} -> {self.raw_target}{state})"


@dataclass
class Column:
    """One column in a table's flat, parent-linked column arena.

    ``nested_kind`` describes how *this* column holds its children, so it is
    only set on parents. ``order`` is the pre-order traversal index and is
    what sibling ordering is rebuilt from.
    """

    id: str
    name: str
    table_id: str = ""
    order: int = 0
    parent_id: Optional[str] = None
    nested_kind: Optional[NestingKind] = None

    physical_name: Optional[str] = None
    physical_type: Optional[str] = None
    logical_type: Optional[str] = None
    business_name: Optional[str] = None
    description: Optional[str] = None

    # Flags; None means the document did not state them
    required: Optional[bool] = None
    unique: Optional[bool] = None
    partitioned: Optional[bool] = None
    clustered: Optional[bool] = None
    critical_data_element: Optional[bool] = None
    primary_key: Optional[bool] = None

    primary_key_position: Optional[int] = None  # 1-indexed
    partition_key_position: Optional[int] = None
    classification: Optional[str] = None
    examples: Optional[List[Any]] = None
    logical_type_options: Optional[Dict[str, Any]] = None
    transform_source_objects: Optional[List[str]] = None
    transform_logic: Optional[str] = None
    transform_description: Optional[str] = None
    authoritative_definitions: Optional[List[Any]] = None

    items_extras: Optional[Dict[str, Any]] = None  # items minus properties; None if absent
    relationships: List[Relationship] = field(default_factory=list)
    extensions: List[ExtensionEntry] = field(default_factory=list)
    synthetic_id: bool = False

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "table_id": self.table_id,
            "order": self.order,
            "parent_id": self.parent_id,
            "nested_kind": self.nested_kind.value if self.nested_kind else None,
            "physical_name": self.physical_name,
            "physical_type": self.physical_type,
            "logical_type": self.logical_type,
            "business_name": self.business_name,
            "description": self.description,
            "required": self.required,
            "unique": self.unique,
            "partitioned": self.partitioned,
            "clustered": self.clustered,
            "critical_data_element": self.critical_data_element,
            "primary_key": self.primary_key,
            "primary_key_position": self.primary_key_position,
            "partition_key_position": self.partition_key_position,
            "classification": self.classification,
            "examples": self.examples,
            "logical_type_options": self.logical_type_options,
            "transform_source_objects": self.transform_source_objects,
            "transform_logic": self.transform_logic,
            "transform_description": self.transform_description,
            "authoritative_definitions": self.authoritative_definitions,
            "items_extras": self.items_extras,
            "relationships": [rel.to_dict() for rel in self.relationships],
            "extensions": _extensions_to_list(self.extensions),
            "synthetic_id": self.synthetic_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Column:
        nested_kind = data.get("nested_kind")
        return cls(
            id=data["id"],
            name=data["name"],
            table_id=data.get("table_id", ""),
            order=data.get("order", 0),
            parent_id=data.get("parent_id"),
            nested_kind=NestingKind(nested_kind) if nested_kind else None,
            physical_name=data.get("physical_name"),
            physical_type=data.get("physical_type"),
            logical_type=data.get("logical_type"),
            business_name=data.get("business_name"),
            description=data.get("description"),
            required=data.get("required"),
            unique=data.get("unique"),
            partitioned=data.get("partitioned"),
            clustered=data.get("clustered"),
            critical_data_element=data.get("critical_data_element"),
            primary_key=data.get("primary_key"),
            primary_key_position=data.get("primary_key_position"),
            partition_key_position=data.get("partition_key_position"),
            classification=data.get("classification"),
            examples=data.get("examples"),
            logical_type_options=data.get("logical_type_options"),
            transform_source_objects=data.get("transform_source_objects"),
            transform_logic=data.get("transform_logic"),
            transform_description=data.get("transform_description"),
            authoritative_definitions=data.get("authoritative_definitions"),
            items_extras=data.get("items_extras"),
            relationships=[
                Relationship.from_dict(rel) for rel in data.get("relationships") or []
            ],
            extensions=_extensions_from_list(data.get("extensions")),
            synthetic_id=data.get("synthetic_id", False),
        )

    def __repr__(self) -> str:
        parent = f", parent={self.parent_id}" if self.parent_id else ""
        return f"Column({self.name}, order={self.order}{parent})"


@dataclass
class CompoundKey:
    """A primary or unique key over an ordered sequence of columns."""

    id: str
    table_id: str
    name: str
    column_ids: List[str]  # order defines key position
    is_primary: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "table_id": self.table_id,
            "name": self.name,
            "column_ids": list(self.column_ids),
            "is_primary": self.is_primary,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CompoundKey:
        return cls(
            id=data["id"],
            table_id=data["table_id"],
            name=data["name"],
            column_ids=list(data.get("column_ids") or []),
            is_primary=data.get("is_primary", False),
        )


@dataclass
class Table:
    """A schema object: one table with its flat column arena."""

    id: str
    name: str
    physical_name: Optional[str] = None
    physical_type: Optional[str] = None
    business_name: Optional[str] = None
    description: Any = None  # string or structured description object
    tags: Optional[List[Any]] = None
    data_granularity_description: Optional[str] = None
    columns: List[Column] = field(default_factory=list)
    relationships: List[Relationship] = field(default_factory=list)
    compound_keys: List[CompoundKey] = field(default_factory=list)
    extensions: List[ExtensionEntry] = field(default_factory=list)
    status: Optional[str] = None  # carried as a custom property, never at schema level
    synthetic_id: bool = False

    @property
    def roots(self) -> List[Column]:
        """Forest roots, in document order."""
        return sorted(
            (column for column in self.columns if column.parent_id is None),
            key=lambda column: column.order,
        )

    def children_of(self, column_id: str) -> List[Column]:
        """Direct children of a column, in document order."""
        return sorted(
            (column for column in self.columns if column.parent_id == column_id),
            key=lambda column: column.order,
        )

    def get_column(self, column_id: str) -> Optional[Column]:
        for column in self.columns:
            if column.id == column_id:
                return column
        return None

    @property
    def primary_key(self) -> Optional[CompoundKey]:
        for key in self.compound_keys:
            if key.is_primary:
                return key
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "physical_name": self.physical_name,
            "physical_type": self.physical_type,
            "business_name": self.business_name,
            "description": self.description,
            "tags": self.tags,
            "data_granularity_description": self.data_granularity_description,
            "columns": [column.to_dict() for column in self.columns],
            "relationships": [rel.to_dict() for rel in self.relationships],
            "compound_keys": [key.to_dict() for key in self.compound_keys],
            "extensions": _extensions_to_list(self.extensions),
            "status": self.status,
            "synthetic_id": self.synthetic_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Table:
        return cls(
            id=data["id"],
            name=data["name"],
            physical_name=data.get("physical_name"),
            physical_type=data.get("physical_type"),
            business_name=data.get("business_name"),
            description=data.get("description"),
            tags=data.get("tags"),
            data_granularity_description=data.get("data_granularity_description"),
            columns=[Column.from_dict(column) for column in data.get("columns") or []],
            relationships=[
                Relationship.from_dict(rel) for rel in data.get("relationships") or []
            ],
            compound_keys=[
                CompoundKey.from_dict(key) for key in data.get("compound_keys") or []
            ],
            extensions=_extensions_from_list(data.get("extensions")),
            status=data.get("status"),
            synthetic_id=data.get("synthetic_id", False),
        )

    def __repr__(self) -> str:
        return (
            f"Table({self.name}, columns={len(self.columns)}, "
            f"keys={len(self.compound_keys)})"
        )


@dataclass
class ContractEnvelope:
    """Top-level contract identity and its own extension entries."""

    id: Optional[str] = None
    version: Optional[str] = None
    status: Optional[str] = None
    api_version: Optional[str] = None
    kind: Optional[str] = None
    name: Optional[str] = None
    domain: Optional[str] = None
    data_product: Optional[str] = None
    tenant: Optional[str] = None
    description: Any = None
    tags: Optional[List[Any]] = None
    extensions: List[ExtensionEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "version": self.version,
            "status": self.status,
            "api_version": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "domain": self.domain,
            "data_product": self.data_product,
            "tenant": self.tenant,
            "description": self.description,
            "tags": self.tags,
            "extensions": _extensions_to_list(self.extensions),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ContractEnvelope:
        return cls(
            id=data.get("id"),
            version=data.get("version"),
            status=data.get("status"),
            api_version=data.get("api_version"),
            kind=data.get("kind"),
            name=data.get("name"),
            domain=data.get("domain"),
            data_product=data.get("data_product"),
            tenant=data.get("tenant"),
            description=data.get("description"),
            tags=data.get("tags"),
            extensions=_extensions_from_list(data.get("extensions")),
        )
