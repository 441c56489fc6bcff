"""End-to-end tests for the contract codec."""

import copy

import pytest

from conftest import contract, schema_object
from contractcodec import __version__
from contractcodec.core.codec import ContractCodec, export_contract, import_contract
from contractcodec.core.frames import columns_frame
from contractcodec.core.errors import KeyAmbiguityWarning
from contractcodec.core.schema import ContractEnvelope, ContractModel


def test_full_document_round_trip(codec, orders_contract):
    """A document carrying ids and a key descriptor comes back unchanged."""
    result = codec.roundtrip(orders_contract)

    assert result.document == orders_contract
    assert result.warnings == []


def test_round_trip_does_not_mutate_input(codec, orders_contract):
    before = copy.deepcopy(orders_contract)
    codec.roundtrip(orders_contract)

    assert orders_contract == before


def test_export_is_idempotent_after_one_cycle(codec):
    document = contract(
        schema_object(
            "t",
            [
                {"name": "b", "primaryKey": True},
                {"name": "a", "primaryKey": True},
                {"name": "nested", "items": {"properties": [{"name": "x"}]}},
            ],
            status="active",
        ),
        schema_object("u", [{"name": "ref", "relationships": [{"to": "t.nested.x"}]}]),
    )

    once = codec.roundtrip(document).document
    twice = codec.roundtrip(once).document

    assert once == twice


def test_import_counts(orders_model):
    assert len(orders_model.tables) == 2
    assert sum(len(t.columns) for t in orders_model.tables) == 12
    assert orders_model.envelope.id == "orders-contract"
    assert orders_model.envelope.version == "1.2.0"
    assert orders_model.errors == []


def test_envelope_defaults():
    document = export_contract([])

    assert document["apiVersion"] == "v3.1.0"
    assert document["kind"] == "DataContract"
    assert document["version"] == "1.0.0"
    assert document["status"] == "draft"
    assert document["schema"] == []
    assert export_contract([])["id"] == document["id"]


def test_envelope_defaults_follow_settings():
    envelope = ContractEnvelope(name="Billing")
    document = export_contract(
        [], envelope=envelope, settings={"default_version": "0.1.0", "api_version": "v3.0.2"}
    )

    assert document["name"] == "Billing"
    assert document["version"] == "0.1.0"
    assert document["apiVersion"] == "v3.0.2"


def test_module_functions_match_codec(orders_contract):
    model = import_contract(orders_contract)

    assert export_contract(model.tables, envelope=model.envelope) == orders_contract


def test_each_call_gets_fresh_warnings(codec):
    document = contract(
        schema_object("t", [{"name": "a", "primaryKey": True}, {"name": "b", "primaryKey": True}])
    )

    first = codec.import_document(document)
    second = codec.import_document(document)

    assert len(first.warnings) == len(second.warnings) == 1
    assert isinstance(second.warnings[0], KeyAmbiguityWarning)


def test_model_json_persistence(tmp_path, codec, orders_contract):
    model = codec.import_document(orders_contract)
    path = tmp_path / "models" / "orders.json"

    model.save(path)
    loaded = ContractModel.load(path)

    assert [t.name for t in loaded.tables] == ["customers", "orders"]
    assert codec.export_model(loaded).document == orders_contract


def test_model_persistence_keeps_findings(tmp_path, codec):
    document = contract(
        schema_object("ok", [{"name": "a", "relationships": [{"to": "ghost"}]}]),
        schema_object("bad", [{"logicalType": "string"}]),
    )
    model = codec.import_document(document)
    path = tmp_path / "model.json"

    model.save(path)
    loaded = ContractModel.load(path)

    assert [w.code for w in loaded.warnings] == ["unresolved_relationship"]
    assert loaded.errors[0].table == "bad"


def test_columns_frame(orders_model):
    frame = columns_frame(orders_model.tables)

    assert len(frame) == 12
    lat = frame[frame["path"] == "shipping.geo.lat"].iloc[0]
    assert lat["table"] == "orders"
    assert lat["depth"] == 2
    assert lat["parent"] == "geo"

    lines = frame[frame["path"] == "lines"].iloc[0]
    assert lines["nesting"] == "array-of-rows"

    keys = frame[frame["primary_key"] == True]  # noqa: E712
    assert sorted(keys["path"]) == ["customer_id", "order_id", "region"]


def test_columns_frame_depth_ignores_dots_in_names(codec):
    document = contract(
        schema_object("t", [{"name": "geo.point", "properties": [{"name": "lat.deg"}]}])
    )

    frame = columns_frame(codec.import_document(document).tables)

    assert frame["depth"].tolist() == [0, 1]
    assert frame["parent"].tolist() == [None, "geo.point"]


def test_settings_override_defaults():
    codec = ContractCodec({"strict": True})

    assert codec.settings["strict"] is True
    assert codec.settings["compound_key_property"] == "compoundKeys"


def test_version():
    """Test version is set."""
    assert __version__ == "0.1.0"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
