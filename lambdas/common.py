"""Shared helpers for the order Lambda handlers."""

import base64
import binascii
import json
import os
import uuid
from decimal import Decimal
from functools import lru_cache
from typing import Any, Dict, Optional

import boto3


# Headers returned on every response so the browser client can call the API
CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "OPTIONS,POST,GET",
    "Access-Control-Allow-Credentials": "true",
}


class OrdersError(Exception):
    """Base class for errors raised by the order handlers."""


class ConfigurationMissingError(OrdersError):
    """A required environment variable is not set."""


class InputMissingError(OrdersError):
    """The request is missing its body, a path parameter or a required field."""


class InvalidInputError(OrdersError):
    """The request body is present but cannot be used."""


class NotFoundError(OrdersError):
    """A referenced store or order does not exist."""


def require_env(name: str) -> str:
    """Return the value of a required environment variable.

    Raises:
        ConfigurationMissingError: If the variable is unset or empty.
    """
    value = os.environ.get(name)
    if not value:
        raise ConfigurationMissingError(f"{name} not supplied")
    return value


def log_prefix(method: str, correlation_id: Optional[str] = None) -> str:
    """Build the per-invocation log prefix."""
    return f"{correlation_id or uuid.uuid4()} - {method}"


@lru_cache(maxsize=None)
def get_table(table_name: str):
    """Get or initialise a DynamoDB table resource (cached per name)."""
    dynamodb = boto3.resource("dynamodb")
    return dynamodb.Table(table_name)


@lru_cache(maxsize=1)
def get_s3_client():
    """Get or initialise the S3 client (cached)."""
    return boto3.client("s3")


def _json_default(value: Any) -> Any:
    # DynamoDB hands numbers back as Decimal
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serialisable")


def to_json(value: Any) -> str:
    """Serialise a value, rendering Decimals as plain JSON numbers."""
    return json.dumps(value, default=_json_default)


def parse_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """Extract the JSON object payload from an API Gateway proxy event.

    Direct invocations may pass ``body`` as an already decoded dict.

    Raises:
        InputMissingError: If there is no body.
        InvalidInputError: If the body is not a JSON object.
    """
    body = event.get("body") if event else None
    if not body:
        raise InputMissingError("no order supplied")

    encoded = bool(event.get("isBase64Encoded"))

    # Round-trip dict bodies so floats become Decimal on both paths
    if isinstance(body, dict):
        body = to_json(body)
        encoded = False

    try:
        if encoded:
            body = base64.b64decode(body, validate=True).decode("utf-8")
        payload = json.loads(body, parse_float=Decimal)
    except (json.JSONDecodeError, UnicodeDecodeError, binascii.Error) as e:
        raise InvalidInputError(f"Invalid JSON in request body: {e}") from e

    if not isinstance(payload, dict):
        raise InvalidInputError("request body must be a JSON object")
    return payload


def get_path_parameter(event: Dict[str, Any], name: str) -> str:
    """Return a path parameter from the event.

    Raises:
        InputMissingError: If the parameter is absent.
    """
    path_parameters = (event or {}).get("pathParameters") or {}
    value = path_parameters.get(name)
    if not value:
        raise InputMissingError(f"no {name} in the path parameters of the event")
    return value


def json_response(status_code: int, body: Any) -> Dict[str, Any]:
    """Build an API Gateway proxy response with CORS headers."""
    return {
        "statusCode": status_code,
        "headers": dict(CORS_HEADERS),
        "body": to_json(body),
    }
