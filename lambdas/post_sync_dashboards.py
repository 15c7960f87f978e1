"""
POST /sync/dashboards
Create dashboards in a target Datadog account, either copied from a source
account or from payloads supplied by the caller / stored in the hub.
"""

from __future__ import annotations

from typing import Any, Dict

from botocore.exceptions import ClientError

from ddhub.artifacts import ArtifactNotFoundError, InvalidArtifactError
from ddhub.datadog import DatadogAPIError
from ddhub.logutil import clogger, log_lambda_handler
from ddhub.services import get_artifact_store
from ddhub.sync import (
    client_from_body,
    is_source_target_request,
    optional_string,
    payloads_from_body,
    replay_dashboards,
    sync_dashboards,
)
from ddhub.utils.http import (
    LambdaResponse,
    error_response,
    json_response,
    parse_json_body,
    translate_exceptions,
)


# =============================================================================
# Lambda Handler: POST /sync/dashboards
# =============================================================================
#
# Request body, one of:
#   source+target:  sourceApiKey, sourceAppKey, sourceApiUrl|sourceRegion,
#                   targetApiKey, targetAppKey, targetApiUrl|targetRegion,
#                   filterTitle (optional)
#   payload+target: dashboardData | dashboards | s3Keys,
#                   apiKey, appKey, apiUrl|region
#
# Per-dashboard failures are reported in the body, never as an HTTP error.
#
# Error codes:
#   400 - invalid JSON, missing credentials/payloads, bad region or URL
#   404 - an s3Keys entry has no stored payload
#   502 - source account dashboards could not be listed
#   500 - S3 failure (STORAGE_ERROR) or catchall
# =============================================================================


@translate_exceptions
@log_lambda_handler("POST /sync/dashboards")
def lambda_handler(event: Dict[str, Any], context: Any) -> LambdaResponse:
    try:
        body = parse_json_body(event)
    except ValueError:
        return error_response(400, "Request body must be a JSON object", error_code="INVALID_JSON")

    # ---------------------------------------------------------------------
    # Mode 1 - Copy from a source account
    # ---------------------------------------------------------------------
    if is_source_target_request(body):
        try:
            source = client_from_body(body, "source")
            target = client_from_body(body, "target")
            filter_title = optional_string(body, "filterTitle")
        except ValueError as e:
            return error_response(400, str(e), error_code="INVALID_REQUEST")

        try:
            report = sync_dashboards(source, target, filter_title=filter_title)
        except DatadogAPIError as e:
            clogger.warning(
                "Source dashboard listing failed",
                extra={"status_code": e.status_code},
            )
            return error_response(
                502,
                f"Failed to fetch source dashboards: {e.message}",
                error_code="SOURCE_UNAVAILABLE",
            )
        return json_response(200, report.to_dict())

    # ---------------------------------------------------------------------
    # Mode 2 - Replay supplied or stored payloads
    # ---------------------------------------------------------------------
    try:
        target = client_from_body(body)
        payloads = payloads_from_body(body, "dashboardData", "dashboards")
    except ValueError as e:
        return error_response(400, str(e), error_code="INVALID_REQUEST")

    if payloads is None:
        s3_keys = body.get("s3Keys")
        if not isinstance(s3_keys, list) or not s3_keys:
            return error_response(
                400,
                "dashboardData, dashboards or s3Keys is required",
                error_code="INVALID_REQUEST",
            )

        try:
            payloads = get_artifact_store("dashboard").get_payloads(s3_keys)
        except InvalidArtifactError as e:
            return error_response(400, str(e), error_code="INVALID_REQUEST")
        except ArtifactNotFoundError as e:
            return error_response(404, str(e), error_code="NOT_FOUND")
        except ClientError:
            return error_response(500, "Failed to read stored dashboards", error_code="STORAGE_ERROR")

    report = replay_dashboards(payloads, target)
    return json_response(200, report.to_dict())
