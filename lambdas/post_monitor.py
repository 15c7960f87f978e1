"""
POST /aws/monitors
Share a monitor definition.
"""

from __future__ import annotations

from typing import Any, Dict

from botocore.exceptions import ClientError

from ddhub.artifacts import InvalidArtifactError
from ddhub.auth import AuthContext, contributor_required
from ddhub.logutil import clogger, log_lambda_handler
from ddhub.services import get_artifact_store
from ddhub.utils.http import (
    LambdaResponse,
    error_response,
    json_response,
    parse_json_body,
    translate_exceptions,
)


# =============================================================================
# Lambda Handler: POST /aws/monitors
# =============================================================================
#
# Request body:
#   {"monitorData": {...}, "metadata": {"name", "target", "language",
#    "tags", "priority"}}
#
# type/query/message/options are taken from monitorData itself.
#
# Error codes:
#   400 - invalid JSON, missing monitorData/metadata, invalid metadata
#   401 / 403 - handled by @contributor_required
#   500 - S3/DynamoDB failure (STORAGE_ERROR) or catchall
# =============================================================================


@translate_exceptions
@log_lambda_handler("POST /aws/monitors")
@contributor_required
def lambda_handler(
    event: Dict[str, Any],
    context: Any,
    auth: AuthContext,
) -> LambdaResponse:
    try:
        body = parse_json_body(event)
    except ValueError:
        return error_response(400, "Request body must be a JSON object", error_code="INVALID_JSON")

    monitor_data = body.get("monitorData")
    metadata = body.get("metadata")
    if not monitor_data or not metadata:
        return error_response(
            400,
            "Monitor data and metadata are required",
            error_code="INVALID_REQUEST",
        )

    if isinstance(metadata, dict):
        metadata = {**metadata, "contributor": auth["email"]}

    store = get_artifact_store("monitor")
    try:
        result = store.upload(monitor_data, metadata)
    except InvalidArtifactError as e:
        return error_response(400, str(e), error_code="INVALID_ARTIFACT")
    except ClientError as e:
        clogger.error(
            "Failed to upload monitor",
            extra={"error_code": e.response.get("Error", {}).get("Code")},
        )
        return error_response(500, "Failed to upload monitor", error_code="STORAGE_ERROR")

    clogger.info(
        "Monitor uploaded",
        extra={"artifact_id": result["id"], "contributor": auth["email"]},
    )
    return json_response(200, result)
