"""Tests for relationship resolution and re-encoding."""

from conftest import contract, schema_object
from contractcodec.core.errors import UnresolvedRelationshipWarning
from contractcodec.core.schema import Relationship, RelationshipKind


def test_relationships_resolve_to_ids(orders_model):
    orders = orders_model.get_table("orders")

    table_level = orders.relationships[0]
    assert table_level.resolved
    assert table_level.kind is RelationshipKind.TABLE_TO_TABLE
    assert table_level.target_table_id == "tbl-customers"
    assert table_level.description == "placed by"
    assert table_level.source_column_id is None

    column_level = orders.get_column("col-customer").relationships[0]
    assert column_level.resolved
    assert column_level.kind is RelationshipKind.TABLE_TO_COLUMN
    assert column_level.source_column_id == "col-customer"
    assert column_level.target_column_id == "col-cust-id"
    assert column_level.relationship_type == "foreignKey"


def test_model_relationship_helpers(orders_model):
    relationships = orders_model.relationships

    assert len(relationships) == 2
    assert [r.source_column_id for r in relationships] == [None, "col-customer"]


def test_unresolved_target_is_preserved(codec):
    document = contract(
        schema_object(
            "orders",
            [{"name": "warehouse_id", "relationships": [{"type": "foreignKey", "to": "warehouses.id"}]}],
        )
    )

    model = codec.import_document(document)
    relationship = model.tables[0].columns[0].relationships[0]

    assert not relationship.resolved
    assert relationship.target_table == "warehouses"
    assert relationship.target_column == "id"
    assert relationship.raw_target == "warehouses.id"
    unresolved = [w for w in model.warnings if isinstance(w, UnresolvedRelationshipWarning)]
    assert len(unresolved) == 1
    assert unresolved[0].details == {"target": "warehouses.id"}
    assert codec.export_model(model).document == document


def test_rename_is_reflected_on_export(codec, orders_model):
    customers = orders_model.get_table("customers")
    customers.name = "clients"
    customers.get_column("col-cust-id").name = "client_id"

    exported = codec.export_model(orders_model).document
    orders = exported["schema"][1]

    assert orders["relationships"][0]["to"] == "clients"
    customer = next(p for p in orders["properties"] if p["name"] == "customer_id")
    assert customer["relationships"][0]["to"] == "clients.client_id"


def test_target_list_is_regrouped(codec):
    document = contract(
        schema_object("a", [{"name": "id"}]),
        schema_object("b", [{"name": "id"}]),
        schema_object(
            "c",
            [{"name": "ref"}],
            relationships=[{"type": "foreignKey", "to": ["a.id", "b.id"]}, {"to": "a"}],
        ),
    )

    model = codec.import_document(document)
    relationships = model.get_table("c").relationships

    assert [r.raw_target for r in relationships] == ["a.id", "b.id", "a"]
    assert relationships[0].target_group == relationships[1].target_group == 0
    assert relationships[2].target_group is None
    assert all(r.resolved for r in relationships)
    assert codec.export_model(model).document == document


def test_dotted_nested_target_keeps_its_spelling(codec):
    document = contract(
        schema_object(
            "events",
            [{"name": "device", "properties": [{"name": "serial"}]}],
        ),
        schema_object(
            "readings",
            [{"name": "serial", "relationships": [{"to": "events.device.serial"}]}],
        ),
    )

    model = codec.import_document(document)
    relationship = model.get_table("readings").columns[0].relationships[0]
    serial = model.get_table("events").columns[1]

    assert relationship.target_column_id == serial.id
    assert codec.export_model(model).document == document


def test_non_object_relationship_is_dropped(codec):
    document = contract(
        schema_object("t", [{"name": "a"}], relationships=["t.a", {"to": "t.a"}])
    )

    model = codec.import_document(document)

    assert len(model.tables[0].relationships) == 1
    assert isinstance(model.warnings[0], UnresolvedRelationshipWarning)


def test_relationship_extensions_round_trip(codec):
    document = contract(
        schema_object(
            "t",
            [{"name": "a"}],
            relationships=[
                {
                    "type": "foreignKey",
                    "to": "t.a",
                    "cardinality": "one-to-many",
                    "customProperties": [{"property": "enforced", "value": False}],
                }
            ],
        )
    )

    model = codec.import_document(document)
    relationship = model.tables[0].relationships[0]

    assert [e.key for e in relationship.extensions] == ["cardinality", "enforced"]
    assert codec.export_model(model).document == document


def test_extra_relationships_are_placed_by_source(codec, orders_model):
    orders = orders_model.get_table("orders")
    extra = [
        Relationship(
            id="rel-extra",
            source_table_id=orders.id,
            source_column_id="col-region",
            raw_target="customers.name",
            target_table="customers",
            target_column="name",
            target_table_id="tbl-customers",
            target_column_id="col-cust-name",
            resolved=True,
        ),
        Relationship(
            id="rel-orphan",
            source_table_id="tbl-elsewhere",
            raw_target="customers",
            target_table="customers",
        ),
    ]

    result = codec.export_document(orders_model.tables, extra, orders_model.envelope)
    region = next(
        p for p in result.document["schema"][1]["properties"] if p["name"] == "region"
    )

    assert region["relationships"] == [{"to": "customers.name"}]
    assert any(
        isinstance(w, UnresolvedRelationshipWarning) and "outside" in w.message
        for w in result.warnings
    )


def test_attached_relationship_wins_over_duplicate_extra(codec, orders_model):
    attached = orders_model.get_table("orders").relationships[0]

    result = codec.export_document(
        orders_model.tables, [attached], orders_model.envelope
    )

    assert len(result.document["schema"][1]["relationships"]) == 1
