"""
GET /aws/s3/{key}[?id=<artifact id>]
Return a stored dashboard/monitor JSON payload.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import unquote

from botocore.exceptions import ClientError

from ddhub.artifacts import ArtifactKind, ArtifactNotFoundError
from ddhub.artifacts.types import VALID_KINDS, s3_prefix
from ddhub.logutil import clogger, log_lambda_handler
from ddhub.services import get_artifact_store
from ddhub.utils.http import (
    LambdaResponse,
    error_response,
    get_query_params,
    json_response,
    translate_exceptions,
)


def _kind_for_key(key: str) -> Optional[ArtifactKind]:
    for kind in VALID_KINDS:
        if key.startswith(s3_prefix(kind)):
            return kind
    return None


# =============================================================================
# Lambda Handler: GET /aws/s3/{key}
# =============================================================================
#
# Responsibilities:
#   1. Decode the key path parameter and map it to an artifact kind
#   2. Fetch the payload from S3
#   3. When ?id= is given, bump that artifact's download counter
#
# Error codes:
#   400 - key missing or outside dashboards/ and monitors/
#   404 - no payload at that key
#   500 - S3 failure (STORAGE_ERROR) or catchall
# =============================================================================


@translate_exceptions
@log_lambda_handler("GET /aws/s3/{key}")
def lambda_handler(event: Dict[str, Any], context: Any) -> LambdaResponse:
    # ---------------------------------------------------------------------
    # Step 1 - Resolve key
    # ---------------------------------------------------------------------
    path_params = event.get("pathParameters") or {}
    key = unquote(path_params.get("key") or "")
    if not key:
        return error_response(400, "S3 key is required", error_code="INVALID_REQUEST")

    kind = _kind_for_key(key)
    if kind is None:
        return error_response(400, f"Unknown artifact key '{key}'", error_code="INVALID_REQUEST")

    store = get_artifact_store(kind)

    # ---------------------------------------------------------------------
    # Step 2 - Fetch payload
    # ---------------------------------------------------------------------
    try:
        payload = store.get_payload(key)
    except ArtifactNotFoundError:
        return error_response(404, f"No payload stored at '{key}'", error_code="NOT_FOUND")
    except ClientError as e:
        clogger.error(
            "Failed to fetch payload from S3",
            extra={"s3_key": key, "error_code": e.response.get("Error", {}).get("Code")},
        )
        return error_response(500, "Failed to get data from S3", error_code="STORAGE_ERROR")

    # ---------------------------------------------------------------------
    # Step 3 - Count the download (never fails the request)
    # ---------------------------------------------------------------------
    artifact_id = get_query_params(event).get("id")
    if artifact_id:
        try:
            downloads = store.increment_downloads(artifact_id)
            clogger.debug(
                "Download counted",
                extra={"artifact_id": artifact_id, "downloads": downloads},
            )
        except (ArtifactNotFoundError, ClientError) as e:
            clogger.warning(
                "Could not count download",
                extra={"artifact_id": artifact_id, "error_type": type(e).__name__},
            )

    return json_response(200, payload)
