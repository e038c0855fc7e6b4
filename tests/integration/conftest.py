"""Pytest configuration and fixtures for integration tests."""

import json
import os
import shutil
import subprocess
import sys
import time
import uuid
from typing import Any, Dict, Generator

import boto3
import pytest


PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))


def check_aws_credentials():
    """Check if AWS credentials are configured and provide guidance if not."""
    try:
        sts = boto3.client("sts")
        identity = sts.get_caller_identity()
        return True, identity
    except Exception:
        print("\n" + "=" * 80)
        print("AWS CREDENTIALS NOT CONFIGURED")
        print("=" * 80)
        print("\nIntegration tests require AWS credentials to deploy resources.")
        print("\nQuick Setup:\n")

        print("1. Run aws configure and enter your credentials:")
        print("   aws configure\n")

        print("2. Verify:")
        print("   aws sts get-caller-identity\n")

        print("3. Run tests:")
        print("   pytest -m integration tests/integration\n")

        print("SKIP INTEGRATION TESTS:")
        print("  pytest    # unit and infrastructure tests only (no AWS)\n")
        print("=" * 80)
        return False, None


def _cdk_command():
    """Prefer an installed cdk, fall back to npx."""
    if shutil.which("cdk"):
        return ["cdk"]
    return ["npx", "cdk"]


def _run_cdk(args, aws_region: str) -> subprocess.CompletedProcess:
    venv_python = sys.executable
    return subprocess.run(
        [*_cdk_command(), *args],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        env={
            **os.environ,
            "CDK_DEFAULT_REGION": aws_region,
            "PATH": f"{os.path.dirname(venv_python)}:{os.environ.get('PATH', '')}",
        },
    )


@pytest.fixture(scope="session")
def aws_region() -> str:
    """Get AWS region from environment or AWS config."""
    region = os.environ.get("AWS_REGION")
    if region:
        return region

    try:
        result = subprocess.run(
            ["aws", "configure", "get", "region"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip()
    except (OSError, subprocess.SubprocessError):
        pass

    return "eu-west-1"


@pytest.fixture(scope="session")
def test_stack_name() -> str:
    """Generate unique test stack prefix to avoid conflicts."""
    timestamp = int(time.time())
    unique_id = str(uuid.uuid4())[:8]
    return f"IntegrationTest-Orders-{timestamp}-{unique_id}"


@pytest.fixture(scope="session", autouse=True)
def verify_aws_credentials():
    """Verify AWS credentials before running any integration tests."""
    has_creds, identity = check_aws_credentials()
    if not has_creds:
        pytest.exit("AWS credentials not configured. See guidance above.", returncode=2)
    print(f"\nAWS Account: {identity['Account']}")
    print(f"AWS User/Role: {identity['Arn']}\n")


@pytest.fixture(scope="session")
def deployed_stack(
    test_stack_name: str, aws_region: str
) -> Generator[Dict[str, Any], None, None]:
    """
    Deploy both stacks for integration testing and clean up after.

    Yields:
        Dictionary of the CloudFormation outputs of both stacks
    """
    unique_suffix = test_stack_name.split("-")[-1]
    context_args = [
        "--context",
        f"stack_name={test_stack_name}",
        "--context",
        f"resource_suffix={unique_suffix}",
    ]
    outputs_file = f"/tmp/{test_stack_name}-outputs.json"

    print(f"\nDeploying integration test stacks: {test_stack_name}")
    deploy_result = _run_cdk(
        [
            "deploy",
            "--all",
            "--require-approval",
            "never",
            "--outputs-file",
            outputs_file,
            *context_args,
        ],
        aws_region,
    )

    if deploy_result.returncode != 0:
        pytest.fail(
            f"CDK deployment failed:\nSTDOUT: {deploy_result.stdout}\nSTDERR: {deploy_result.stderr}"
        )

    with open(outputs_file, "r") as f:
        outputs_data = json.load(f)

    # CDK nests outputs under each stack name
    stack_outputs = {}
    for outputs in outputs_data.values():
        stack_outputs.update(outputs)

    print(f"Stacks deployed successfully. Outputs: {stack_outputs}")

    yield stack_outputs

    print(f"\nDestroying integration test stacks: {test_stack_name}")
    destroy_result = _run_cdk(["destroy", "--all", "--force", *context_args], aws_region)

    if destroy_result.returncode != 0:
        print(
            f"WARNING: Stack destruction failed:\nSTDOUT: {destroy_result.stdout}\nSTDERR: {destroy_result.stderr}"
        )


@pytest.fixture(scope="session")
def seeded_store(deployed_stack: Dict[str, Any], dynamodb_client) -> Dict[str, str]:
    """Put a store record into the table, as the provisioning step would."""
    store = {
        "id": f"store-{uuid.uuid4()}",
        "type": "Stores",
        "storeCode": "INT",
        "storeName": "Integration Test Store",
    }
    dynamodb_client.put_item(
        TableName=deployed_stack["OrdersTableName"],
        Item={key: {"S": value} for key, value in store.items()},
    )
    return store


@pytest.fixture(scope="session")
def dynamodb_client(aws_region: str):
    """Create DynamoDB client."""
    return boto3.client("dynamodb", region_name=aws_region)


@pytest.fixture(scope="session")
def s3_client(aws_region: str):
    """Create S3 client."""
    return boto3.client("s3", region_name=aws_region)


@pytest.fixture(scope="session")
def lambda_client(aws_region: str):
    """Create Lambda client."""
    return boto3.client("lambda", region_name=aws_region)
