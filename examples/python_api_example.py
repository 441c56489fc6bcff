"""Python API usage examples for contractcodec."""

import yaml

from contractcodec import ContractCodec, columns_frame

CONTRACT = """
apiVersion: v3.1.0
kind: DataContract
id: shop
version: 1.0.0
status: active
schema:
  - name: customers
    properties:
      - name: customer_id
        primaryKey: true
  - name: orders
    status: active
    properties:
      - name: region
        primaryKey: true
        primaryKeyPosition: 1
      - name: order_id
        primaryKey: true
        primaryKeyPosition: 2
      - name: customer_id
        relationships:
          - type: foreignKey
            to: customers.customer_id
      - name: lines
        logicalType: array
        items:
          logicalType: object
          properties:
            - name: sku
            - name: qty
"""


# Example 1: Import a contract into the flat model
def example_import():
    """Import example."""
    print("Example 1: Import")
    print("=" * 60)

    codec = ContractCodec()
    model = codec.import_document(yaml.safe_load(CONTRACT))

    print(model)
    for table in model.tables:
        key = table.primary_key
        columns = [table.get_column(cid).name for cid in key.column_ids] if key else []
        print(f"  {table.name}: {len(table.columns)} columns, compound key {columns}")

    for warning in model.warnings:
        print(f"  {warning}")

    return model


# Example 2: Inspect the flat column arena
def example_frame(model):
    """Tabular view example."""
    print("\n\nExample 2: Column Frame")
    print("=" * 60)

    frame = columns_frame(model.tables)
    print(frame[["table", "path", "depth", "nesting", "primary_key_position"]])


# Example 3: Edit the model and export it again
def example_export(model):
    """Export example."""
    print("\n\nExample 3: Rename and Export")
    print("=" * 60)

    customers = model.get_table("customers")
    customers.name = "clients"

    result = ContractCodec().export_model(model)
    print(yaml.safe_dump(result.document, sort_keys=False))


if __name__ == "__main__":
    model = example_import()
    example_frame(model)
    example_export(model)
