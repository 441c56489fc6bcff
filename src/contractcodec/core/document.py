"""Typed access to a generically parsed contract document.

The codec consumes whatever a YAML/JSON parser produces: dicts, lists and
scalars. Every node is classified into exactly one :class:`NodeKind` before
it is read, so traversal never duck-types its way past a malformed tree.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from contractcodec.core.errors import DocumentShapeError


class NodeKind(Enum):
    """Closed set of node variants in a parsed document tree."""

    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"


def node_kind(value: Any) -> NodeKind:
    """Classify a document node.

    Args:
        value: Any node of a parsed document tree

    Returns:
        The node's kind

    Raises:
        DocumentShapeError: If the value is not a document node (e.g. a set)
    """
    # bool first: it is a subclass of int
    if value is None:
        return NodeKind.NULL
    if isinstance(value, bool):
        return NodeKind.BOOLEAN
    if isinstance(value, (int, float)):
        return NodeKind.NUMBER
    if isinstance(value, str):
        return NodeKind.STRING
    if isinstance(value, dict):
        return NodeKind.OBJECT
    if isinstance(value, (list, tuple)):
        return NodeKind.ARRAY
    raise DocumentShapeError(
        f"Unsupported document node of type {type(value).__name__}"
    )


def expect_object(value: Any, where: str) -> Dict[str, Any]:
    """Return ``value`` if it is an object node, else raise."""
    if node_kind(value) is not NodeKind.OBJECT:
        raise DocumentShapeError(
            f"{where}: expected an object, got {node_kind(value).value}"
        )
    return value


def expect_array(value: Any, where: str) -> List[Any]:
    """Return ``value`` as a list; null counts as an empty array."""
    kind = node_kind(value)
    if kind is NodeKind.NULL:
        return []
    if kind is not NodeKind.ARRAY:
        raise DocumentShapeError(f"{where}: expected an array, got {kind.value}")
    return list(value)


def is_kind(value: Any, *kinds: NodeKind) -> bool:
    """Check a node against one or more kinds without raising on odd types."""
    try:
        return node_kind(value) in kinds
    except DocumentShapeError:
        return False


def as_string(value: Any) -> Optional[str]:
    """Read a string scalar, or None if the node is not one."""
    return value if is_kind(value, NodeKind.STRING) else None


def as_bool(value: Any) -> Optional[bool]:
    """Read a boolean scalar, or None if the node is not one."""
    return value if is_kind(value, NodeKind.BOOLEAN) else None


def as_int(value: Any) -> Optional[int]:
    """Read an integral number, or None if the node is not one."""
    if not is_kind(value, NodeKind.NUMBER):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    return value


def as_string_list(value: Any) -> Optional[List[str]]:
    """Read an array of strings, or None if any element is not a string."""
    if not is_kind(value, NodeKind.ARRAY):
        return None
    if all(is_kind(item, NodeKind.STRING) for item in value):
        return list(value)
    return None
