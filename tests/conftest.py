"""Shared fixtures for contractcodec tests."""

import copy

import pytest

from contractcodec.core.codec import ContractCodec
from contractcodec.utils.config import Config, set_config

ORDERS_CONTRACT = {
    "apiVersion": "v3.1.0",
    "kind": "DataContract",
    "id": "orders-contract",
    "name": "Orders",
    "version": "1.2.0",
    "status": "active",
    "domain": "sales",
    "servers": [{"server": "prod", "type": "postgres"}],
    "schema": [
        {
            "id": "tbl-customers",
            "name": "customers",
            "physicalName": "crm.customers",
            "physicalType": "table",
            "properties": [
                {
                    "id": "col-cust-id",
                    "name": "customer_id",
                    "logicalType": "integer",
                    "required": True,
                    "primaryKey": True,
                    "primaryKeyPosition": 1,
                },
                {
                    "id": "col-cust-name",
                    "name": "name",
                    "logicalType": "string",
                    "quality": [{"rule": "nullCheck"}],
                },
            ],
        },
        {
            "id": "tbl-orders",
            "name": "orders",
            "description": "One row per order",
            "properties": [
                {
                    "id": "col-order-id",
                    "name": "order_id",
                    "logicalType": "integer",
                    "primaryKey": True,
                    "primaryKeyPosition": 2,
                },
                {
                    "id": "col-region",
                    "name": "region",
                    "logicalType": "string",
                    "primaryKey": True,
                    "primaryKeyPosition": 1,
                },
                {
                    "id": "col-customer",
                    "name": "customer_id",
                    "logicalType": "integer",
                    "relationships": [
                        {"type": "foreignKey", "to": "customers.customer_id"}
                    ],
                },
                {
                    "id": "col-shipping",
                    "name": "shipping",
                    "logicalType": "object",
                    "properties": [
                        {"id": "col-ship-city", "name": "city", "logicalType": "string"},
                        {
                            "id": "col-ship-geo",
                            "name": "geo",
                            "logicalType": "object",
                            "properties": [
                                {"id": "col-lat", "name": "lat", "logicalType": "number"}
                            ],
                        },
                    ],
                },
                {
                    "id": "col-lines",
                    "name": "lines",
                    "logicalType": "array",
                    "items": {
                        "logicalType": "object",
                        "properties": [
                            {"id": "col-sku", "name": "sku", "logicalType": "string"},
                            {"id": "col-qty", "name": "qty", "logicalType": "integer"},
                        ],
                    },
                },
            ],
            "relationships": [
                {"type": "foreignKey", "to": "customers", "description": "placed by"}
            ],
            "customProperties": [
                {
                    "property": "compoundKeys",
                    "value": [
                        {
                            "name": "pk_orders",
                            "columns": ["region", "order_id"],
                            "isPrimary": True,
                        }
                    ],
                },
                {"property": "status", "value": "active"},
                {"property": "owner", "value": "sales-eng"},
            ],
        },
    ],
}


@pytest.fixture(autouse=True)
def default_config():
    """Isolate every test from config.yml files and global state."""
    set_config(Config())
    yield
    set_config(None)


@pytest.fixture
def codec():
    """Codec with default settings."""
    return ContractCodec()


@pytest.fixture
def orders_contract():
    """Contract with nested columns, a compound key and relationships."""
    return copy.deepcopy(ORDERS_CONTRACT)


@pytest.fixture
def orders_model(codec, orders_contract):
    """Imported orders contract."""
    return codec.import_document(orders_contract)


def schema_object(name, properties, **extra):
    """Minimal schema object for single-table documents."""
    node = {"name": name, "properties": properties}
    node.update(extra)
    return node


def contract(*schema_objects, **extra):
    """Minimal contract document around the given schema objects."""
    node = {
        "apiVersion": "v3.1.0",
        "kind": "DataContract",
        "id": "test-contract",
        "version": "1.0.0",
        "status": "draft",
        "schema": list(schema_objects),
    }
    node.update(extra)
    return node
