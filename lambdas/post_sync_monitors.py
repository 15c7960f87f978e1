"""
POST /sync/monitors
Create monitors in a target Datadog account.
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
    replay_monitors,
    sync_monitors,
)
from ddhub.utils.http import (
    LambdaResponse,
    error_response,
    json_response,
    parse_json_body,
    translate_exceptions,
)


# =============================================================================
# Lambda Handler: POST /sync/monitors
# =============================================================================
#
# Same request modes as /sync/dashboards, with filterTag instead of
# filterTitle and monitorData | monitors instead of dashboardData |
# dashboards. Every monitor is cleaned (field allow-list, tag normalization,
# per-type option defaults) before it is created.
#
# Error codes:
#   400 - invalid JSON, missing credentials/payloads, bad region or URL
#   404 - an s3Keys entry has no stored payload
#   502 - source account monitors could not be listed
#   500 - S3 failure (STORAGE_ERROR) or catchall
# =============================================================================


@translate_exceptions
@log_lambda_handler("POST /sync/monitors")
def lambda_handler(event: Dict[str, Any], context: Any) -> LambdaResponse:
    try:
        body = parse_json_body(event)
    except ValueError:
        return error_response(400, "Request body must be a JSON object", error_code="INVALID_JSON")

    if is_source_target_request(body):
        try:
            source = client_from_body(body, "source")
            target = client_from_body(body, "target")
            filter_tag = optional_string(body, "filterTag")
        except ValueError as e:
            return error_response(400, str(e), error_code="INVALID_REQUEST")

        try:
            report = sync_monitors(source, target, filter_tag=filter_tag)
        except DatadogAPIError as e:
            clogger.warning(
                "Source monitor listing failed",
                extra={"status_code": e.status_code},
            )
            return error_response(
                502,
                f"Failed to fetch source monitors: {e.message}",
                error_code="SOURCE_UNAVAILABLE",
            )
        return json_response(200, report.to_dict())

    try:
        target = client_from_body(body)
        payloads = payloads_from_body(body, "monitorData", "monitors")
    except ValueError as e:
        return error_response(400, str(e), error_code="INVALID_REQUEST")

    if payloads is None:
        s3_keys = body.get("s3Keys")
        if not isinstance(s3_keys, list) or not s3_keys:
            return error_response(
                400,
                "monitorData, monitors or s3Keys is required",
                error_code="INVALID_REQUEST",
            )

        try:
            payloads = get_artifact_store("monitor").get_payloads(s3_keys)
        except InvalidArtifactError as e:
            return error_response(400, str(e), error_code="INVALID_REQUEST")
        except ArtifactNotFoundError as e:
            return error_response(404, str(e), error_code="NOT_FOUND")
        except ClientError:
            return error_response(500, "Failed to read stored monitors", error_code="STORAGE_ERROR")

    report = replay_monitors(payloads, target)
    return json_response(200, report.to_dict())
