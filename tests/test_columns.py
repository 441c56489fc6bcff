"""Tests for flattening and rebuilding nested column trees."""

import pytest
import yaml

from conftest import contract, schema_object
from contractcodec.core.codec import ContractCodec
from contractcodec.core.codec.base import CodecContext
from contractcodec.core.codec.builder import ColumnTreeBuilder
from contractcodec.core.codec.naming import ColumnNameIndex
from contractcodec.core.errors import DocumentShapeError, StructuralError
from contractcodec.core.schema import Column, NestingKind, Table


def test_flatten_preorder_with_parent_links(orders_model):
    """Nested properties become a pre-order arena with parent ids."""
    orders = orders_model.get_table("orders")
    index = ColumnNameIndex(orders)

    paths = [index.path_of(c) for c in sorted(orders.columns, key=lambda c: c.order)]
    assert paths == [
        "order_id",
        "region",
        "customer_id",
        "shipping",
        "shipping.city",
        "shipping.geo",
        "shipping.geo.lat",
        "lines",
        "lines.sku",
        "lines.qty",
    ]

    lat = orders.get_column("col-lat")
    assert lat.parent_id == "col-ship-geo"
    assert orders.get_column("col-ship-geo").parent_id == "col-shipping"
    assert all(c.table_id == "tbl-orders" for c in orders.columns)


def test_roots_are_exactly_parentless_columns(orders_model):
    orders = orders_model.get_table("orders")
    assert [c.name for c in orders.roots] == [
        "order_id",
        "region",
        "customer_id",
        "shipping",
        "lines",
    ]
    assert [c.name for c in orders.children_of("col-lines")] == ["sku", "qty"]


def test_nesting_kinds(orders_model):
    orders = orders_model.get_table("orders")

    assert orders.get_column("col-shipping").nested_kind is NestingKind.OBJECT_FIELDS
    lines = orders.get_column("col-lines")
    assert lines.nested_kind is NestingKind.ARRAY_OF_ROWS
    assert lines.items_extras == {"logicalType": "object"}
    assert orders.get_column("col-sku").nested_kind is None


def test_empty_nested_lists_round_trip(codec):
    """Empty property lists keep their nesting kind and are written back."""
    document = contract(
        schema_object(
            "events",
            [
                {"name": "meta", "logicalType": "object", "properties": []},
                {"name": "tags", "logicalType": "array", "items": {"properties": []}},
                {"name": "raw", "logicalType": "array", "items": {"logicalType": "string"}},
            ],
        )
    )

    model = codec.import_document(document)
    table = model.get_table("events")
    meta, tags, raw = sorted(table.columns, key=lambda c: c.order)

    assert meta.nested_kind is NestingKind.OBJECT_FIELDS
    assert tags.nested_kind is NestingKind.ARRAY_OF_ROWS
    assert raw.nested_kind is None
    assert raw.items_extras == {"logicalType": "string"}
    assert codec.export_model(model).document == document


def test_missing_ids_are_deterministic(codec):
    document = contract(
        schema_object("users", [{"name": "id"}, {"name": "profile", "properties": [{"name": "email"}]}])
    )

    first = codec.import_document(document)
    second = codec.import_document(document)

    first_ids = [c.id for c in first.tables[0].columns]
    assert first_ids == [c.id for c in second.tables[0].columns]
    assert first.tables[0].id == second.tables[0].id
    assert len(set(first_ids)) == 3
    assert all(c.synthetic_id for c in first.tables[0].columns)


def test_synthesized_ids_are_not_emitted_by_default(codec):
    document = contract(schema_object("users", [{"name": "id"}]))

    exported = codec.export_model(codec.import_document(document)).document

    assert "id" not in exported["schema"][0]
    assert "id" not in exported["schema"][0]["properties"][0]
    assert exported == document


def test_synthesized_ids_emitted_when_configured():
    document = contract(schema_object("users", [{"name": "id"}]))
    codec = ContractCodec({"emit_synthesized_ids": True})

    model = codec.import_document(document)
    exported = codec.export_model(model).document

    assert exported["schema"][0]["id"] == model.tables[0].id
    assert exported["schema"][0]["properties"][0]["id"] == model.tables[0].columns[0].id


def test_repeated_sibling_names_get_distinct_ids(codec):
    document = contract(schema_object("t", [{"name": "a"}, {"name": "a"}]))

    table = codec.import_document(document).tables[0]

    assert table.columns[0].id != table.columns[1].id


def test_duplicate_column_id_rejects_only_that_table(codec):
    document = contract(
        schema_object("good", [{"id": "x", "name": "a"}]),
        schema_object("bad", [{"id": "dup", "name": "a"}, {"id": "dup", "name": "b"}]),
    )

    model = codec.import_document(document)

    assert [t.name for t in model.tables] == ["good"]
    assert len(model.errors) == 1
    assert model.errors[0].table == "bad"
    assert "dup" in model.errors[0].message


def test_nameless_property_rejects_table(codec):
    document = contract(schema_object("bad", [{"logicalType": "string"}]))

    model = codec.import_document(document)

    assert model.tables == []
    assert model.errors[0].table == "bad"


def test_strict_mode_raises_on_structural_error():
    document = contract(schema_object("bad", [{"id": "dup", "name": "a"}, {"id": "dup", "name": "b"}]))

    with pytest.raises(StructuralError):
        ContractCodec({"strict": True}).import_document(document)


def test_malformed_schema_list_raises(codec):
    with pytest.raises(DocumentShapeError):
        codec.import_document({"apiVersion": "v3.1.0", "schema": "orders"})

    with pytest.raises(DocumentShapeError):
        codec.import_document(["not", "an", "object"])


def _builder():
    return ColumnTreeBuilder(CodecContext())


def test_build_rejects_orphaned_parent():
    table = Table(
        id="t",
        name="t",
        columns=[Column(id="a", name="a"), Column(id="b", name="b", parent_id="missing")],
    )

    with pytest.raises(StructuralError) as exc_info:
        _builder().build(table, {"a": {"name": "a"}, "b": {"name": "b"}})
    assert exc_info.value.column == "b"


def test_build_rejects_cyclic_parent_chain():
    table = Table(
        id="t",
        name="t",
        columns=[
            Column(id="a", name="a", parent_id="c"),
            Column(id="b", name="b", parent_id="a"),
            Column(id="c", name="c", parent_id="b"),
        ],
    )

    with pytest.raises(StructuralError):
        _builder().validate(table)


def test_build_rejects_duplicate_ids():
    table = Table(id="t", name="t", columns=[Column(id="a", name="a"), Column(id="a", name="b")])

    with pytest.raises(StructuralError):
        _builder().validate(table)


def test_export_rejects_corrupt_table(codec):
    table = Table(id="t", name="t", columns=[Column(id="b", name="b", parent_id="missing")])

    with pytest.raises(StructuralError):
        codec.export_document([table])


def test_build_sorts_siblings_by_order():
    table = Table(
        id="t",
        name="t",
        columns=[
            Column(id="c", name="c", order=2, parent_id="p"),
            Column(id="p", name="p", order=0, nested_kind=NestingKind.OBJECT_FIELDS),
            Column(id="b", name="b", order=1, parent_id="p"),
            Column(id="z", name="z", order=5),
        ],
    )
    rendered = {c.id: {"name": c.name} for c in table.columns}

    roots = _builder().build(table, rendered)

    assert [node["name"] for node in roots] == ["p", "z"]
    assert [node["name"] for node in roots[0]["properties"]] == ["b", "c"]


def test_build_infers_nesting_kind_from_logical_type():
    table = Table(
        id="t",
        name="t",
        columns=[
            Column(id="arr", name="arr", logical_type="array"),
            Column(id="obj", name="obj", order=1),
            Column(id="x", name="x", order=2, parent_id="arr"),
            Column(id="y", name="y", order=3, parent_id="obj"),
        ],
    )
    rendered = {c.id: {"name": c.name} for c in table.columns}

    arr, obj = _builder().build(table, rendered)

    assert arr["items"] == {"properties": [{"name": "x"}]}
    assert obj["properties"] == [{"name": "y"}]


def test_build_does_not_mutate_rendered_nodes():
    table = Table(
        id="t",
        name="t",
        columns=[
            Column(id="p", name="p", nested_kind=NestingKind.OBJECT_FIELDS),
            Column(id="c", name="c", order=1, parent_id="p"),
        ],
    )
    rendered = {"p": {"name": "p"}, "c": {"name": "c"}}

    _builder().build(table, rendered)

    assert rendered["p"] == {"name": "p"}


def test_three_level_nesting_round_trip(codec):
    """Array of objects holding an object: wrapper only at the array level."""
    document = contract(
        schema_object(
            "telemetry",
            [
                {
                    "name": "events",
                    "logicalType": "array",
                    "items": {
                        "logicalType": "object",
                        "properties": [
                            {
                                "name": "event_data",
                                "logicalType": "object",
                                "properties": [{"name": "event_name", "logicalType": "string"}],
                            }
                        ],
                    },
                }
            ],
        )
    )

    model = codec.import_document(document)
    events, event_data, event_name = sorted(model.tables[0].columns, key=lambda c: c.order)

    assert event_name.parent_id == event_data.id
    assert event_data.parent_id == events.id
    assert events.parent_id is None

    exported = codec.export_model(model).document
    roots = exported["schema"][0]["properties"]
    assert [p["name"] for p in roots] == ["events"]
    assert "items" not in roots[0]["items"]["properties"][0]
    assert exported == document


def test_null_properties_is_an_empty_object(codec):
    document = contract(schema_object("t", [{"name": "meta", "properties": None}]))

    model = codec.import_document(document)
    meta = model.tables[0].columns[0]

    assert meta.nested_kind is NestingKind.OBJECT_FIELDS
    assert model.tables[0].children_of(meta.id) == []
    assert model.errors == []


def test_stray_properties_next_to_items_stay_opaque(codec):
    """Array nesting wins and the extra properties list is written back as is."""
    document = contract(
        schema_object(
            "t",
            [
                {
                    "name": "rows",
                    "items": {"properties": [{"name": "x"}]},
                    "properties": [{"name": "ignored"}],
                }
            ],
        )
    )

    model = codec.import_document(document)
    table = model.tables[0]

    assert [c.name for c in table.columns] == ["rows", "x"]
    assert table.columns[0].nested_kind is NestingKind.ARRAY_OF_ROWS
    assert codec.export_model(model).document == document


def test_self_containing_property_rejects_table(codec):
    """A YAML alias that nests a property inside itself cannot be flattened."""
    document = yaml.safe_load(
        """
        apiVersion: v3.1.0
        kind: DataContract
        id: loops
        schema:
          - name: looped
            properties:
              - &node
                name: loop
                properties:
                  - *node
          - name: fine
            properties:
              - name: a
        """
    )

    model = codec.import_document(document)

    assert [t.name for t in model.tables] == ["fine"]
    assert model.errors[0].table == "looped"
    assert "Cyclic" in model.errors[0].message


def test_shared_alias_is_not_a_cycle(codec):
    document = yaml.safe_load(
        """
        apiVersion: v3.1.0
        kind: DataContract
        id: shared
        schema:
          - name: t
            properties:
              - name: home
                properties:
                  - &street {name: street, logicalType: string}
              - name: work
                properties:
                  - *street
        """
    )

    model = codec.import_document(document)

    assert model.errors == []
    assert len(model.tables[0].columns) == 4


def test_empty_items_wrapper_round_trips(codec):
    document = contract(
        schema_object(
            "t",
            [
                {"name": "tags", "logicalType": "array", "items": {}},
                {"name": "plain", "logicalType": "string"},
            ],
        )
    )

    model = codec.import_document(document)
    tags, plain = model.tables[0].columns

    assert tags.items_extras == {}
    assert plain.items_extras is None
    assert codec.export_model(model).document == document
