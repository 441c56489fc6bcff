"""Document key names and the attributes they map to.

Each table is ``(document key, attribute name, reader)``. A reader returns
None when the node has the wrong shape; the codec then keeps the original
node as an opaque extension instead of guessing.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Tuple

from contractcodec.core.document import (
    as_bool,
    as_int,
    as_string,
    as_string_list,
    is_kind,
    NodeKind,
)

Reader = Callable[[Any], Optional[Any]]
FieldSpec = Tuple[str, str, Reader]


def opaque(value: Any) -> Any:
    """Accept any node verbatim."""
    return value


def opaque_object(value: Any) -> Optional[Any]:
    return value if is_kind(value, NodeKind.OBJECT) else None


def opaque_array(value: Any) -> Optional[Any]:
    return list(value) if is_kind(value, NodeKind.ARRAY) else None


# Keys with dedicated handling (nesting, keys, links, extensions)
PROPERTIES = "properties"
ITEMS = "items"
RELATIONSHIPS = "relationships"
CUSTOM_PROPERTIES = "customProperties"
LEGACY_CUSTOM = "custom"  # pre-3.x mapping form of customProperties
SCHEMA = "schema"
PRIMARY_KEY = "primaryKey"
PRIMARY_KEY_POSITION = "primaryKeyPosition"
STATUS = "status"
ID = "id"
NAME = "name"

COLUMN_FIELDS: Tuple[FieldSpec, ...] = (
    ("physicalName", "physical_name", as_string),
    ("physicalType", "physical_type", as_string),
    ("logicalType", "logical_type", as_string),
    ("businessName", "business_name", as_string),
    ("description", "description", as_string),
    ("required", "required", as_bool),
    ("unique", "unique", as_bool),
    ("partitioned", "partitioned", as_bool),
    ("partitionKeyPosition", "partition_key_position", as_int),
    ("clustered", "clustered", as_bool),
    ("criticalDataElement", "critical_data_element", as_bool),
    ("classification", "classification", as_string),
    ("examples", "examples", opaque_array),
    ("logicalTypeOptions", "logical_type_options", opaque_object),
    ("transformSourceObjects", "transform_source_objects", as_string_list),
    ("transformLogic", "transform_logic", as_string),
    ("transformDescription", "transform_description", as_string),
    ("authoritativeDefinitions", "authoritative_definitions", opaque_array),
)

TABLE_FIELDS: Tuple[FieldSpec, ...] = (
    ("physicalName", "physical_name", as_string),
    ("physicalType", "physical_type", as_string),
    ("businessName", "business_name", as_string),
    ("description", "description", opaque),
    ("tags", "tags", opaque_array),
    ("dataGranularityDescription", "data_granularity_description", as_string),
)

ENVELOPE_FIELDS: Tuple[FieldSpec, ...] = (
    ("apiVersion", "api_version", as_string),
    ("kind", "kind", as_string),
    ("id", "id", as_string),
    ("name", "name", as_string),
    ("version", "version", as_string),
    ("status", "status", as_string),
    ("domain", "domain", as_string),
    ("dataProduct", "data_product", as_string),
    ("tenant", "tenant", as_string),
    ("description", "description", opaque),
    ("tags", "tags", opaque_array),
)

RELATIONSHIP_FIELDS: Tuple[FieldSpec, ...] = (
    ("type", "relationship_type", as_string),
    ("description", "description", as_string),
)

