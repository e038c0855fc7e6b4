"""Lambda handler for listing every order."""

from typing import Any, Dict

from common import get_table, json_response, log_prefix, require_env
from orders import OrderRepository


METHOD = "list-orders.handler"


def _get_repository(table_name: str) -> OrderRepository:
    return OrderRepository(get_table(table_name))


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Return all orders as a JSON array (empty when there are none).

    Uses a full table scan, so this is only suitable for small tables.
    """
    prefix = log_prefix(METHOD)

    try:
        table_name = require_env("TABLE_NAME")
        print(f"{prefix} - started")

        orders = _get_repository(table_name).list_orders()
        print(f"{prefix} - found {len(orders)} orders")

        return json_response(200, [order.to_item() for order in orders])
    except Exception as e:
        print(f"{prefix} - error listing orders: {str(e)}")
        raise
