"""
GET /auth/session
Describe the caller's session with an up-to-date contributor flag.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from botocore.exceptions import ClientError

from ddhub.auth import AuthContext, auth_required
from ddhub.logutil import clogger, log_lambda_handler
from ddhub.services import get_user_service
from ddhub.utils.http import LambdaResponse, json_response, translate_exceptions


# =============================================================================
# Lambda Handler: GET /auth/session
# =============================================================================
#
# The isContributor flag is re-read from the users table; if that read
# fails the session is still returned, with isContributor=false.
#
# Error codes:
#   401 - no/invalid session (handled by @auth_required)
#   500 - catchall (handled by @translate_exceptions)
# =============================================================================


@translate_exceptions
@log_lambda_handler("GET /auth/session")
@auth_required
def lambda_handler(
    event: Dict[str, Any],
    context: Any,
    auth: AuthContext,
) -> LambdaResponse:
    try:
        is_contributor = get_user_service().is_contributor(auth["email"])
    except ClientError as e:
        clogger.warning(
            "Contributor lookup failed; reporting isContributor=false",
            extra={"error_code": e.response.get("Error", {}).get("Code")},
        )
        is_contributor = False

    expires = auth["claims"].get("exp")
    return json_response(
        200,
        {
            "user": {
                "email": auth["email"],
                "name": auth["name"],
                "isContributor": is_contributor,
            },
            "expires": (
                datetime.fromtimestamp(expires, tz=timezone.utc).isoformat()
                if isinstance(expires, (int, float))
                else None
            ),
        },
    )
