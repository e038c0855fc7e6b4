"""Lambda handler for fetching a single order."""

from typing import Any, Dict

from common import get_path_parameter, get_table, json_response, log_prefix, require_env
from orders import OrderRepository


METHOD = "get-order.handler"


def _get_repository(table_name: str) -> OrderRepository:
    return OrderRepository(get_table(table_name))


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Return the order named by the ``id`` path parameter."""
    prefix = log_prefix(METHOD)

    try:
        table_name = require_env("TABLE_NAME")
        print(f"{prefix} - started")

        order_id = get_path_parameter(event, "id")
        print(f"{prefix} - get order: {order_id}")

        order = _get_repository(table_name).get_order(order_id)
        return json_response(200, order.to_item())
    except Exception as e:
        print(f"{prefix} - error getting order: {str(e)}")
        raise
