"""
HTTP response utilities for Lambda functions behind API Gateway.
Provides consistent JSON responses, error formatting, and CORS headers.
"""

from __future__ import annotations

import base64
import json
from decimal import Decimal
from functools import wraps
from typing import Any, Callable, Dict, List, Optional, TypedDict, TypeVar, Union

from ddhub.logutil import clogger

F = TypeVar("F", bound=Callable[..., Any])


# -----------------------------------------------------------------------------
# Typed response object for API Gateway
# -----------------------------------------------------------------------------
class LambdaResponse(TypedDict):
    statusCode: int
    headers: Dict[str, str]
    body: str


# -----------------------------------------------------------------------------
# Default CORS headers (shared by all responses)
# -----------------------------------------------------------------------------
DEFAULT_HEADERS: Dict[str, str] = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": (
        "Content-Type, Authorization, X-Amz-Date, X-Api-Key, X-Amz-Security-Token"
    ),
    "Access-Control-Allow-Methods": "GET,POST,DELETE,OPTIONS",
}


def _json_default(value: Any) -> Any:
    """Serialize the types boto3 hands back from DynamoDB."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


# -----------------------------------------------------------------------------
# Success Response
# -----------------------------------------------------------------------------
def json_response(
    status_code: int,
    body: Union[Dict[str, Any], List[Any], str, bool, None],
    headers: Optional[Dict[str, str]] = None,
) -> LambdaResponse:
    """
    Build a standardized JSON response object for API Gateway.
    """
    combined_headers = DEFAULT_HEADERS.copy()
    if headers:
        combined_headers.update(headers)

    return LambdaResponse(
        statusCode=status_code,
        headers=combined_headers,
        body=json.dumps(body, default=_json_default),
    )


# -----------------------------------------------------------------------------
# Error Response
# -----------------------------------------------------------------------------
def error_response(
    status_code: int,
    message: str,
    error_code: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
    **extra: Any,
) -> LambdaResponse:
    """
    Build a standardized error JSON response.

    Example body:
    {
        "error": "Contributor access required",
        "error_code": "NOT_CONTRIBUTOR"
    }
    """
    payload: Dict[str, Any] = {"error": message}

    if error_code is not None:
        payload["error_code"] = error_code

    payload.update(extra)

    return json_response(
        status_code=status_code,
        body=payload,
        headers=headers,
    )


# -----------------------------------------------------------------------------
# Request helpers
# -----------------------------------------------------------------------------
def parse_json_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Decode the request body of an API Gateway proxy event into a dict.

    Raises:
        ValueError: body is not valid JSON or not a JSON object
    """
    raw = event.get("body") or ""
    if event.get("isBase64Encoded") and raw:
        raw = base64.b64decode(raw).decode("utf-8")

    body = json.loads(raw) if raw else {}
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body


def get_query_params(event: Dict[str, Any]) -> Dict[str, str]:
    return event.get("queryStringParameters") or {}


def get_header(event: Dict[str, Any], name: str) -> Optional[str]:
    """Case-insensitive header lookup (API Gateway preserves client casing)."""
    headers = event.get("headers") or {}
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


# -----------------------------------------------------------------------------
# Exception → API Gateway Response Translator Decorator
# -----------------------------------------------------------------------------
def translate_exceptions(func: F) -> Callable[[Dict[str, Any], Any], LambdaResponse]:
    """
    Decorator for Lambda handlers that ensures all uncaught exceptions
    become standardized JSON error responses.
    """

    @wraps(func)
    def wrapper(event: Dict[str, Any], context: Any) -> LambdaResponse:
        try:
            return func(event, context)

        except Exception as e:
            clogger.error(f"Error in {func.__name__}: {e}")
            return error_response(
                500,
                "Internal Server Error",
                error_code="INTERNAL_ERROR",
            )

    return wrapper
