"""Lambda handler for the API liveness probe."""

from typing import Any, Dict

from common import json_response, log_prefix


METHOD = "health-check.handler"


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Always report success; touches no other service."""
    print(f"{log_prefix(METHOD)} - success")
    return json_response(200, "success")
