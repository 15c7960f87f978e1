"""
POST /aws/dashboards
Share a dashboard: JSON payload to S3, metadata row to DynamoDB.
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
# Lambda Handler: POST /aws/dashboards
# =============================================================================
#
# Request body:
#   {"dashboardData": {...}, "metadata": {"title", "description", "target",
#    "language", "tags", "priority", "sharedUrl"}}
#
# Responsibilities:
#   1. Authenticate user and re-check contributor flag
#   2. Parse and validate body
#   3. Store payload + metadata (compensated on partial failure)
#   4. Return {id, s3Key}
#
# Error codes:
#   400 - invalid JSON, missing dashboardData/metadata, invalid metadata
#   401 - no/invalid session (handled by @contributor_required)
#   403 - not a contributor (handled by @contributor_required)
#   500 - S3/DynamoDB failure (STORAGE_ERROR) or catchall
# =============================================================================


@translate_exceptions
@log_lambda_handler("POST /aws/dashboards")
@contributor_required
def lambda_handler(
    event: Dict[str, Any],
    context: Any,
    auth: AuthContext,
) -> LambdaResponse:
    # ---------------------------------------------------------------------
    # Step 1 - Parse body
    # ---------------------------------------------------------------------
    try:
        body = parse_json_body(event)
    except ValueError:
        return error_response(400, "Request body must be a JSON object", error_code="INVALID_JSON")

    dashboard_data = body.get("dashboardData")
    metadata = body.get("metadata")
    if not dashboard_data or not metadata:
        return error_response(
            400,
            "Dashboard data and metadata are required",
            error_code="INVALID_REQUEST",
        )

    # ---------------------------------------------------------------------
    # Step 2 - The contributor is whoever is signed in
    # ---------------------------------------------------------------------
    if isinstance(metadata, dict):
        metadata = {**metadata, "contributor": auth["email"]}

    # ---------------------------------------------------------------------
    # Step 3 - Store
    # ---------------------------------------------------------------------
    store = get_artifact_store("dashboard")
    try:
        result = store.upload(dashboard_data, metadata)
    except InvalidArtifactError as e:
        return error_response(400, str(e), error_code="INVALID_ARTIFACT")
    except ClientError as e:
        clogger.error(
            "Failed to upload dashboard",
            extra={"error_code": e.response.get("Error", {}).get("Code")},
        )
        return error_response(500, "Failed to upload dashboard", error_code="STORAGE_ERROR")

    clogger.info(
        "Dashboard uploaded",
        extra={"artifact_id": result["id"], "contributor": auth["email"]},
    )
    return json_response(200, result)
