"""
POST /auth/check-contributor
Report whether an email may upload/delete shared artifacts.
"""

from __future__ import annotations

from typing import Any, Dict

from botocore.exceptions import ClientError

from ddhub.logutil import clogger, log_lambda_handler
from ddhub.services import get_user_service
from ddhub.utils.http import (
    LambdaResponse,
    error_response,
    json_response,
    parse_json_body,
    translate_exceptions,
)


# =============================================================================
# Lambda Handler: POST /auth/check-contributor
# =============================================================================
#
# Request body: {"email": "..."}
#
# Responses:
#   200 - {"isContributor": true}
#   403 - {"isContributor": false, "error": ..., "error_code": "NOT_CONTRIBUTOR"}
#
# Error codes:
#   400 - malformed body or email missing
#   500 - users table unreachable (USER_LOOKUP_FAILED)
# =============================================================================


@translate_exceptions
@log_lambda_handler("POST /auth/check-contributor")
def lambda_handler(
    event: Dict[str, Any],
    context: Any,
) -> LambdaResponse:
    try:
        data = parse_json_body(event)
    except ValueError:
        return error_response(400, "Malformed JSON body", error_code="INVALID_REQUEST")

    email = data.get("email")
    if not isinstance(email, str) or not email.strip():
        return error_response(400, "Email is required", error_code="INVALID_REQUEST")

    try:
        is_contributor = get_user_service().is_contributor(email.strip())
    except ClientError as e:
        clogger.error(
            "Failed to check contributor status",
            extra={"error_code": e.response.get("Error", {}).get("Code")},
        )
        return error_response(500, "Internal server error", error_code="USER_LOOKUP_FAILED")

    if not is_contributor:
        return error_response(
            403,
            "Contributor access required to upload or delete shared artifacts",
            error_code="NOT_CONTRIBUTOR",
            isContributor=False,
        )

    return json_response(200, {"isContributor": True})
