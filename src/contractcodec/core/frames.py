"""Tabular views of the flat column arena."""

from __future__ import annotations

from typing import List

import pandas as pd

from contractcodec.core.codec.base import CodecContext
from contractcodec.core.codec.builder import ColumnTreeBuilder
from contractcodec.core.codec.naming import ColumnNameIndex
from contractcodec.core.schema.types import Table

FRAME_COLUMNS = [
    "table",
    "path",
    "depth",
    "parent",
    "nesting",
    "logical_type",
    "physical_type",
    "required",
    "primary_key",
    "primary_key_position",
    "relationships",
    "extensions",
]


def columns_frame(tables: List[Table]) -> pd.DataFrame:
    """Build a DataFrame with one row per column, in document order.

    Args:
        tables: Imported tables

    Returns:
        DataFrame with the columns listed in ``FRAME_COLUMNS``

    Raises:
        StructuralError: If a table's column forest is corrupt

    Example:
        >>> df = columns_frame(model.tables)
        >>> df[df["depth"] > 0]["path"].tolist()
        ['address.street', 'address.city']
    """
    builder = ColumnTreeBuilder(CodecContext())
    rows = []
    for table in tables:
        depths = builder.validate(table)
        index = ColumnNameIndex(table)
        for column in sorted(table.columns, key=lambda c: c.order):
            path = index.path_of(column)
            parent = index.get(column.parent_id) if column.parent_id else None
            rows.append(
                {
                    "table": table.name,
                    "path": path,
                    "depth": depths[column.id],
                    "parent": parent.name if parent else None,
                    "nesting": column.nested_kind.value if column.nested_kind else None,
                    "logical_type": column.logical_type,
                    "physical_type": column.physical_type,
                    "required": column.required,
                    "primary_key": column.primary_key,
                    "primary_key_position": column.primary_key_position,
                    "relationships": len(column.relationships),
                    "extensions": len(column.extensions),
                }
            )

    return pd.DataFrame(rows, columns=FRAME_COLUMNS)
