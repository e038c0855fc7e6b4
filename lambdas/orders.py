"""Order records and their persistence in DynamoDB and S3."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Union

from boto3.dynamodb.conditions import Key

from common import (
    ConfigurationMissingError,
    InputMissingError,
    InvalidInputError,
    NotFoundError,
    to_json,
)


# Record discriminators sharing the one table
ORDER_TYPE = "Orders"
STORE_TYPE = "Stores"

# GSI keyed on the record type
STORE_INDEX = "storeIndex"

REQUIRED_FIELDS = ("storeId", "productId", "quantity")


def _new_id() -> str:
    return str(uuid.uuid4())


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with millisecond precision."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def invoice_key(order_id: str) -> str:
    """Object key of the invoice written for an order."""
    return f"{order_id}-invoice.txt"


@dataclass(frozen=True)
class Order:
    """A customer order for a quantity of one product at one store."""

    id: str
    store_id: str
    product_id: str
    quantity: Union[int, Decimal]  # copied verbatim from the payload
    created: str
    type: str = ORDER_TYPE

    def to_item(self) -> Dict[str, Any]:
        """Return the order as a table item / API representation."""
        return {
            "id": self.id,
            "type": self.type,
            "storeId": self.store_id,
            "productId": self.product_id,
            "quantity": self.quantity,
            "created": self.created,
        }

    def to_json(self) -> str:
        return to_json(self.to_item())

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "Order":
        """Project a stored item onto the order fields, dropping the rest."""
        return cls(
            id=item.get("id"),
            store_id=item.get("storeId"),
            product_id=item.get("productId"),
            quantity=item.get("quantity"),
            created=item.get("created"),
            type=item.get("type"),
        )


def build_order(
    payload: Optional[Dict[str, Any]],
    id_factory: Callable[[], str] = _new_id,
    clock: Callable[[], datetime] = _utc_now,
) -> Order:
    """Assemble a new order from an inbound payload.

    The id, type and created timestamp are always set here; any values the
    payload carries for them are ignored, as are unknown fields. Store
    membership is not checked.

    Args:
        payload: Decoded request body.
        id_factory: Callable returning a fresh unique order id.
        clock: Callable returning the current time.

    Returns:
        The new Order.

    Raises:
        InputMissingError: If the payload or a required field is missing.
        InvalidInputError: If storeId or productId is not a string.
    """
    if payload is None:
        raise InputMissingError("no order supplied")

    missing = [field for field in REQUIRED_FIELDS if payload.get(field) is None]
    if missing:
        raise InputMissingError(f"missing required fields: {', '.join(missing)}")

    for field in ("storeId", "productId"):
        if not isinstance(payload[field], str):
            raise InvalidInputError(f"{field} must be a string")

    return Order(
        id=id_factory(),
        store_id=payload["storeId"],
        product_id=payload["productId"],
        quantity=payload["quantity"],
        created=format_timestamp(clock()),
    )


class OrderRepository:
    """Reads and writes orders in the shared table and the invoice bucket.

    The table resource and S3 client are passed in so the handlers can share
    cached clients across invocations and tests can substitute mocks.
    """

    def __init__(self, table, s3_client=None, bucket_name: Optional[str] = None):
        self.table = table
        self.s3_client = s3_client
        self.bucket_name = bucket_name

    def list_stores(self) -> List[Dict[str, Any]]:
        """Return every store record via the type index."""
        stores = []
        kwargs = {
            "IndexName": STORE_INDEX,
            "KeyConditionExpression": Key("type").eq(STORE_TYPE),
        }
        while True:
            response = self.table.query(**kwargs)
            stores.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return stores
            kwargs["ExclusiveStartKey"] = last_key

    def create_order(self, order: Order) -> Order:
        """Validate the order's store, then write the order and its invoice.

        The two writes are not transactional: if the invoice upload fails
        the order row stays in the table without an invoice.

        Raises:
            NotFoundError: If the order's store does not exist.
            ConfigurationMissingError: If no invoice bucket was configured.
        """
        if not self.s3_client or not self.bucket_name:
            raise ConfigurationMissingError("bucket name not supplied")

        stores = self.list_stores()
        if not any(store.get("id") == order.store_id for store in stores):
            raise NotFoundError(f"{order.store_id} is not found")

        self.table.put_item(
            Item=order.to_item(),
            ConditionExpression="attribute_not_exists(id)",
        )
        self.write_invoice(order)
        return order

    def write_invoice(self, order: Order) -> str:
        """Upload the serialised order as its invoice and return the key."""
        key = invoice_key(order.id)
        self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=order.to_json().encode("utf-8"),
            ContentType="text/plain",
        )
        return key

    def get_order(self, order_id: str) -> Order:
        """Fetch one order by id.

        Raises:
            NotFoundError: If no order exists with that id.
        """
        response = self.table.get_item(Key={"id": order_id})
        item = response.get("Item")
        if not item or item.get("type") != ORDER_TYPE:
            raise NotFoundError(f"order id {order_id} is not found")
        return Order.from_item(item)

    def full_scan(self) -> List[Dict[str, Any]]:
        """Read every item in the table, across all scan pages.

        Cost grows with the whole table, not just the orders in it.
        """
        items = []
        kwargs = {}
        while True:
            response = self.table.scan(**kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    def list_orders(self) -> List[Order]:
        """Return all orders, filtering a full scan on the record type."""
        return [
            Order.from_item(item)
            for item in self.full_scan()
            if item.get("type") == ORDER_TYPE
        ]
