"""Shared fixtures for the Lambda handler unit tests."""

from unittest.mock import MagicMock

import pytest
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError


TABLE_NAME = "test-orders-table"
BUCKET_NAME = "test-invoices-bucket"


class FakeOrdersTable:
    """Minimal in-memory stand-in for the shared DynamoDB table resource."""

    def __init__(self, items=None):
        self.items = {item["id"]: dict(item) for item in items or []}

    def query(self, **kwargs):
        # Only the type index is queried by the handlers
        record_type = kwargs["KeyConditionExpression"].get_expression()["values"][1]
        return {
            "Items": [
                dict(item)
                for item in self.items.values()
                if item.get("type") == record_type
            ]
        }

    def put_item(self, Item, ConditionExpression=None, **kwargs):
        # Same type checks boto3 applies before sending the request
        serializer = TypeSerializer()
        for value in Item.values():
            serializer.serialize(value)

        if ConditionExpression == "attribute_not_exists(id)" and Item["id"] in self.items:
            raise ClientError(
                {"Error": {"Code": "ConditionalCheckFailedException"}}, "PutItem"
            )

        self.items[Item["id"]] = dict(Item)
        return {}

    def get_item(self, Key):
        item = self.items.get(Key["id"])
        return {"Item": dict(item)} if item else {}

    def scan(self, **kwargs):
        return {"Items": [dict(item) for item in self.items.values()]}


@pytest.fixture
def orders_env(monkeypatch):
    """Set the handler environment variables."""
    monkeypatch.setenv("TABLE_NAME", TABLE_NAME)
    monkeypatch.setenv("BUCKET_NAME", BUCKET_NAME)


@pytest.fixture
def store_item():
    return {
        "id": "s1",
        "type": "Stores",
        "storeCode": "NEW",
        "storeName": "Newcastle",
    }


@pytest.fixture
def fake_table(store_item):
    """In-memory table seeded with one store."""
    return FakeOrdersTable([store_item])


@pytest.fixture
def mock_s3_client():
    """Create a mock S3 client."""
    return MagicMock()
