#!/usr/bin/env python3
"""Interactive script to create orders in LocalStack."""

import sys
import json
import boto3

# Colors for output
GREEN = "\033[0;32m"
BLUE = "\033[0;34m"
YELLOW = "\033[1;33m"
NC = "\033[0m"  # No Color

ENDPOINT_URL = "http://localhost:4566"
TABLE_NAME = "serverless-orders"
CREATE_ORDER_FUNCTION = "serverless-orders-create-order"

# Demo store seeded so orders have something to reference
DEMO_STORE = {
    "id": "59b8a675-9bb7-46c7-955d-2566edfba8ea",
    "type": "Stores",
    "storeCode": "NEW",
    "storeName": "Newcastle",
}


def get_client(service: str):
    """Create a boto3 client pointing to LocalStack."""
    return boto3.client(
        service,
        endpoint_url=ENDPOINT_URL,
        region_name="eu-west-1",
        aws_access_key_id="test",
        aws_secret_access_key="test",
    )


def check_localstack():
    """Check if LocalStack is running."""
    try:
        import requests

        response = requests.get(f"{ENDPOINT_URL}/_localstack/health", timeout=2)
        return response.status_code == 200
    except Exception:
        return False


def seed_demo_store():
    """Write (or overwrite) the demo store record."""
    get_client("dynamodb").put_item(
        TableName=TABLE_NAME,
        Item={key: {"S": value} for key, value in DEMO_STORE.items()},
    )


def main():
    """Main entry point."""
    print(f"{BLUE} Order Creation Tool{NC}\n")

    if not check_localstack():
        print(f"{YELLOW}[WARN]  LocalStack is not running!{NC}")
        print("Start it with: localstack start -d")
        sys.exit(1)

    store_id = sys.argv[1] if len(sys.argv) > 1 else None
    if not store_id:
        seed_demo_store()
        store_id = DEMO_STORE["id"]
        print(f"{GREEN}Using demo store: {DEMO_STORE['storeName']} ({store_id}){NC}")

    product_id = (
        sys.argv[2] if len(sys.argv) > 2 else input("Enter Product ID: ").strip()
    )
    quantity_input = (
        sys.argv[3] if len(sys.argv) > 3 else input("Enter quantity: ").strip()
    )
    quantity = int(quantity_input or "1")

    payload = {"storeId": store_id, "productId": product_id, "quantity": quantity}

    print(f"\n{BLUE}Creating order...{NC}")
    print(f"  Payload: {json.dumps(payload)}\n")

    try:
        response = get_client("lambda").invoke(
            FunctionName=CREATE_ORDER_FUNCTION,
            InvocationType="RequestResponse",
            Payload=json.dumps({"body": json.dumps(payload)}),
        )

        response_payload = json.loads(response["Payload"].read())

        if "FunctionError" in response:
            print(
                f"{YELLOW}[ERROR] {response_payload.get('errorType')}: "
                f"{response_payload.get('errorMessage')}{NC}"
            )
            sys.exit(1)

        body = json.loads(response_payload.get("body", "{}"))
        print(f"{GREEN}[OK] Order created ({response_payload.get('statusCode')}):{NC}")
        print(json.dumps(body, indent=2))
        print(f"\nView orders with: {GREEN}python sandbox/view_orders.py{NC}")

    except Exception as e:
        print(f"{YELLOW}[ERROR] Error invoking Lambda: {str(e)}{NC}")
        print(f"\n{BLUE}Troubleshooting:{NC}")
        print("  - Is LocalStack running? (localstack start -d)")
        print("  - Are the stacks deployed? (cdklocal deploy --all)")
        sys.exit(1)


if __name__ == "__main__":
    main()
