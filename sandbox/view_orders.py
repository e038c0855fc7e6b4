#!/usr/bin/env python3
"""View orders in LocalStack through the list and get handlers."""

import sys
import json
from typing import Any, Dict, List, Optional

import boto3

# Colors for terminal output
GREEN = "\033[0;32m"
BLUE = "\033[0;34m"
YELLOW = "\033[1;33m"
CYAN = "\033[0;36m"
RED = "\033[0;31m"
BOLD = "\033[1m"
NC = "\033[0m"  # No Color

LIST_ORDERS_FUNCTION = "serverless-orders-list-orders"
GET_ORDER_FUNCTION = "serverless-orders-get-order"


def get_lambda_client():
    """Create Lambda client pointing to LocalStack."""
    return boto3.client(
        "lambda",
        endpoint_url="http://localhost:4566",
        region_name="eu-west-1",
        aws_access_key_id="test",
        aws_secret_access_key="test",
    )


def invoke(function_name: str, event: Dict[str, Any]) -> Optional[Any]:
    """Invoke a handler and return its decoded body, or None on error."""
    try:
        response = get_lambda_client().invoke(
            FunctionName=function_name,
            InvocationType="RequestResponse",
            Payload=json.dumps(event),
        )
    except Exception as e:
        print(f"{RED}[ERROR] Error invoking {function_name}: {str(e)}{NC}")
        print(f"{YELLOW}Is LocalStack running? Start with: localstack start -d{NC}")
        sys.exit(1)

    payload = json.loads(response["Payload"].read())
    if "FunctionError" in response:
        print(f"{RED}[ERROR] {payload.get('errorType')}: {payload.get('errorMessage')}{NC}")
        return None
    return json.loads(payload["body"])


def print_order_table(orders: List[Dict[str, Any]]):
    """Print orders in a table, newest first."""
    if not orders:
        print(f"{YELLOW} No orders found{NC}")
        print(f"\nCreate an order with: {GREEN}python sandbox/create_order.py{NC}")
        return

    print(f"\n{BOLD}{BLUE} Orders{NC}\n")
    print(f"{CYAN}{'─' * 120}{NC}")
    print(
        f"{BOLD}{'Order ID':<38} {'Store ID':<38} {'Product':<15} {'Qty':<5} {'Created':<25}{NC}"
    )
    print(f"{CYAN}{'─' * 120}{NC}")

    for order in sorted(orders, key=lambda o: o.get("created") or "", reverse=True):
        print(
            f"{order.get('id', 'N/A'):<38} {order.get('storeId', 'N/A'):<38} "
            f"{str(order.get('productId', 'N/A')):<15} {str(order.get('quantity', '-')):<5} "
            f"{(order.get('created') or 'N/A')[:19]:<25}"
        )

    print(f"{CYAN}{'─' * 120}{NC}\n")
    print(f"{BOLD} Total orders:{NC} {len(orders)}")


def print_order_details(order: Dict[str, Any]):
    """Print detailed information about a single order."""
    print(f"\n{BOLD}{BLUE} Order Details{NC}\n")
    print(f"{CYAN}{'─' * 60}{NC}")

    for key, value in order.items():
        print(f"{BOLD}{key:20s}{NC}: {value}")

    print(f"{CYAN}{'─' * 60}{NC}\n")


def main():
    """Main entry point."""
    if len(sys.argv) > 1:
        if sys.argv[1] in ("--help", "-h"):
            print(f"{BLUE}Usage:{NC}")
            print(f"  {sys.argv[0]}              - View all orders")
            print(f"  {sys.argv[0]} ORDER_ID     - View specific order")
            print(f"  {sys.argv[0]} --help|-h    - Show this help")
            return

        order = invoke(GET_ORDER_FUNCTION, {"pathParameters": {"id": sys.argv[1]}})
        if order:
            print_order_details(order)
    else:
        orders = invoke(LIST_ORDERS_FUNCTION, {})
        print_order_table(orders or [])


if __name__ == "__main__":
    main()
