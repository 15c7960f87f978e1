"""
POST /auth/signin
Exchange a Google ID token for a hub session token.
"""

from __future__ import annotations

from typing import Any, Dict

from botocore.exceptions import ClientError

from ddhub.auth import AuthenticationError, sign_in
from ddhub.logutil import clogger, log_lambda_handler
from ddhub.utils.http import (
    LambdaResponse,
    error_response,
    json_response,
    parse_json_body,
    translate_exceptions,
)


# =============================================================================
# Lambda Handler: POST /auth/signin
# =============================================================================
#
# Request body:
#   {"idToken": "<Google ID token>"}   ("credential" is accepted as well,
#                                        the field name Google Identity
#                                        Services uses)
#
# Responsibilities:
#   1. Parse body
#   2. Verify the Google ID token
#   3. Look up / create the user row (first sign-in: isContributor=false)
#   4. Return {sessionToken, user, expiresIn}
#
# Error codes:
#   400 - malformed body or no token
#   401 - Google token rejected
#   500 - users table unreachable; sign-in is refused (USER_LOOKUP_FAILED)
# =============================================================================


@translate_exceptions
@log_lambda_handler("POST /auth/signin")
def lambda_handler(
    event: Dict[str, Any],
    context: Any,
) -> LambdaResponse:
    # ---------------------------------------------------------------------
    # Step 1 - Parse JSON body
    # ---------------------------------------------------------------------
    try:
        data = parse_json_body(event)
    except ValueError:
        return error_response(400, "Malformed JSON body", error_code="INVALID_REQUEST")

    id_token = data.get("idToken") or data.get("credential")
    if not isinstance(id_token, str) or not id_token:
        return error_response(400, "idToken is required", error_code="INVALID_REQUEST")

    # ---------------------------------------------------------------------
    # Step 2 - Verify and open a session
    # ---------------------------------------------------------------------
    try:
        result = sign_in(id_token)
    except AuthenticationError as e:
        clogger.warning(f"Sign-in rejected: {e}")
        return error_response(401, f"Unauthorized: {e}", error_code="UNAUTHORIZED")
    except ClientError as e:
        clogger.error(
            "User lookup failed during sign-in",
            extra={"error_code": e.response.get("Error", {}).get("Code")},
        )
        return error_response(500, "Sign-in is temporarily unavailable", error_code="USER_LOOKUP_FAILED")

    return json_response(200, result)
