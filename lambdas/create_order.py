"""Lambda handler for creating new orders and their invoices."""

from typing import Any, Dict

from common import (
    get_s3_client,
    get_table,
    json_response,
    log_prefix,
    parse_body,
    require_env,
)
from orders import OrderRepository, build_order


METHOD = "create-order.handler"


def _get_repository(table_name: str, bucket_name: str) -> OrderRepository:
    """Build a repository over the cached table and S3 clients."""
    return OrderRepository(get_table(table_name), get_s3_client(), bucket_name)


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Create an order for an existing store and write its invoice to S3.

    Args:
        event: API Gateway proxy event whose body holds the order payload.
        context: Lambda context object.

    Returns:
        201 response whose body is the created order.

    Raises:
        Any error is logged and re-raised for API Gateway to report.
    """
    prefix = log_prefix(METHOD)
    print(f"{prefix} - started")

    try:
        table_name = require_env("TABLE_NAME")
        bucket_name = require_env("BUCKET_NAME")

        order = build_order(parse_body(event))
        print(f"{prefix} - create order: {order.to_json()}")

        _get_repository(table_name, bucket_name).create_order(order)
        print(f"{prefix} - invoice written to {bucket_name}")

        return json_response(201, order.to_item())
    except Exception as e:
        print(f"{prefix} - error creating order: {str(e)}")
        raise
