"""
DELETE /aws/monitors?id=<id>&s3Key=<key>
Remove a shared monitor.
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
    get_query_params,
    json_response,
    translate_exceptions,
)


# =============================================================================
# Lambda Handler: DELETE /aws/monitors
# =============================================================================
#
# Error codes:
#   400 - id or s3Key missing, s3Key outside monitors/
#   401 / 403 - handled by @contributor_required
#   500 - S3/DynamoDB failure (STORAGE_ERROR) or catchall
# =============================================================================


@translate_exceptions
@log_lambda_handler("DELETE /aws/monitors")
@contributor_required
def lambda_handler(
    event: Dict[str, Any],
    context: Any,
    auth: AuthContext,
) -> LambdaResponse:
    params = get_query_params(event)
    artifact_id = params.get("id")
    s3_key = params.get("s3Key")

    if not artifact_id or not s3_key:
        return error_response(400, "ID and s3Key are required", error_code="INVALID_REQUEST")

    store = get_artifact_store("monitor")
    try:
        store.delete(artifact_id, s3_key)
    except InvalidArtifactError as e:
        return error_response(400, str(e), error_code="INVALID_REQUEST")
    except ClientError as e:
        clogger.error(
            "Failed to delete monitor",
            extra={
                "artifact_id": artifact_id,
                "error_code": e.response.get("Error", {}).get("Code"),
            },
        )
        return error_response(500, "Failed to delete monitor", error_code="STORAGE_ERROR")

    clogger.info(
        "Monitor deleted",
        extra={"artifact_id": artifact_id, "deleted_by": auth["email"]},
    )
    return json_response(200, {"success": True})
