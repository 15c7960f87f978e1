"""
Lambda handler logging decorator.

Provides request/response logging for AWS Lambda handlers with:
- Correlation ID tracking
- Timing and performance metrics
- Sensitive data masking
"""

import json
import time
import uuid
from functools import wraps
from typing import Any, Callable, Dict, TypeVar

from ddhub.logutil.config import logger
from ddhub.logutil.context import clogger, correlation_id, request_start_time
from ddhub.logutil.masking import mask_sensitive_data

F = TypeVar("F", bound=Callable[..., Any])

__all__ = ["log_lambda_handler"]

_DEBUG_LEVEL_NO = 10


def _debug_enabled() -> bool:
    return logger._core.min_level <= _DEBUG_LEVEL_NO  # type: ignore[attr-defined]


# -----------------------------------------------------------------------------
# Lambda Request/Response Logging Decorator
# -----------------------------------------------------------------------------
def log_lambda_handler(
    endpoint_name: str,
    log_request_body: bool = False,
    log_response_body: bool = False,
) -> Callable[[F], F]:
    """
    Lambda handler logging decorator.

    - Uses the Lambda request id as correlation ID (UUID fallback)
    - INFO level: summary only (method, path, status, duration)
    - DEBUG level: masked headers, params and optionally bodies

    Args:
        endpoint_name: Human-readable endpoint name (e.g., "POST /sync/dashboards")
        log_request_body: Log request body at DEBUG level
        log_response_body: Log response body at DEBUG level

    Usage:
        @translate_exceptions
        @log_lambda_handler("POST /aws/dashboards", log_request_body=True)
        @contributor_required
        def lambda_handler(event, context, auth):
            ...
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(event: Dict[str, Any], context: Any, **kwargs: Any) -> Dict[str, Any]:
            cid = getattr(context, "aws_request_id", None) or str(uuid.uuid4())
            correlation_id.set(cid)
            request_start_time.set(time.time())

            http_method = event.get("httpMethod", "UNKNOWN")
            path = event.get("path", "UNKNOWN")

            clogger.info(
                f"Incoming request: {http_method} {path}",
                extra={
                    "event_type": "request",
                    "endpoint": endpoint_name,
                    "method": http_method,
                    "path": path,
                },
            )

            if _debug_enabled():
                detailed_request: Dict[str, Any] = {
                    "event_type": "request_details",
                    "endpoint": endpoint_name,
                    "headers": mask_sensitive_data(event.get("headers") or {}),
                    "query_params": mask_sensitive_data(
                        event.get("queryStringParameters") or {}
                    ),
                    "path_params": event.get("pathParameters") or {},
                }

                if log_request_body:
                    raw_body = event.get("body") or ""
                    try:
                        body_obj = json.loads(raw_body) if raw_body else {}
                        detailed_request["body"] = mask_sensitive_data(body_obj)
                    except json.JSONDecodeError:
                        detailed_request["body"] = "[NON_JSON_BODY]"

                clogger.debug(f"Request details: {http_method} {path}", extra=detailed_request)

            try:
                result = func(event, context, **kwargs)

                status_code = result.get("statusCode", 500)
                start_time = request_start_time.get()
                duration_ms = int((time.time() - (start_time or time.time())) * 1000)

                log_func = clogger.info if 200 <= status_code < 400 else clogger.warning
                log_func(
                    f"Request completed: {http_method} {path} -> {status_code} ({duration_ms}ms)",
                    extra={
                        "event_type": "response",
                        "endpoint": endpoint_name,
                        "status_code": status_code,
                        "duration_ms": duration_ms,
                    },
                )

                if log_response_body and _debug_enabled():
                    try:
                        body_obj = json.loads(result.get("body") or "{}")
                        clogger.debug(
                            f"Response details: {status_code}",
                            extra={
                                "event_type": "response_details",
                                "body": mask_sensitive_data(body_obj),
                            },
                        )
                    except json.JSONDecodeError:
                        pass

                return result

            except Exception as e:
                start_time = request_start_time.get()
                duration_ms = int((time.time() - (start_time or time.time())) * 1000)
                clogger.exception(
                    f"Request failed: {http_method} {path}",
                    extra={
                        "event_type": "error",
                        "endpoint": endpoint_name,
                        "duration_ms": duration_ms,
                        "error_type": type(e).__name__,
                    },
                )
                raise

            finally:
                correlation_id.set(None)
                request_start_time.set(None)

        return wrapper  # type: ignore[return-value]

    return decorator
