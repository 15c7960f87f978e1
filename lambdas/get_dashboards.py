"""
GET /aws/dashboards
List every shared dashboard (metadata only, newest first).
"""

from __future__ import annotations

from typing import Any, Dict

from botocore.exceptions import ClientError

from ddhub.logutil import clogger, log_lambda_handler
from ddhub.services import get_artifact_store
from ddhub.utils.http import (
    LambdaResponse,
    error_response,
    json_response,
    translate_exceptions,
)


# =============================================================================
# Lambda Handler: GET /aws/dashboards
# =============================================================================
#
# Error codes:
#   500 - DynamoDB scan failed (STORAGE_ERROR) or catchall
# =============================================================================


@translate_exceptions
@log_lambda_handler("GET /aws/dashboards")
def lambda_handler(event: Dict[str, Any], context: Any) -> LambdaResponse:
    store = get_artifact_store("dashboard")

    try:
        dashboards = store.list()
    except ClientError as e:
        clogger.error(
            "Failed to list dashboards",
            extra={"error_code": e.response.get("Error", {}).get("Code")},
        )
        return error_response(500, "Failed to fetch dashboards", error_code="STORAGE_ERROR")

    return json_response(200, dashboards)
