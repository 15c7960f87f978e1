from __future__ import annotations

import time
from functools import wraps
from typing import Any, Callable, Dict, List, Optional, TypedDict

import urllib3
from botocore.exceptions import ClientError
from jose import JWTError, jwt

from ddhub.logutil import clogger
from ddhub.services import get_user_service
from ddhub.settings import GOOGLE_CLIENT_ID, SESSION_MAX_AGE, SESSION_SECRET
from ddhub.users.user_service import UserRecord, UserService
from ddhub.utils.http import LambdaResponse, error_response, get_header

# ====================================================================================
# GOOGLE OAUTH CONSTANTS
# ====================================================================================

GOOGLE_JWKS_URL = "https://www.googleapis.com/oauth2/v3/certs"
GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")

# Google rotates keys roughly daily; re-fetch at most once an hour
JWKS_CACHE_SECONDS = 60 * 60

SESSION_ALGORITHM = "HS256"

http = urllib3.PoolManager()

_jwks_cache: Dict[str, Any] = {"keys": None, "fetched_at": 0.0}


class AuthenticationError(Exception):
    """Raised when a Google ID token or a session token is rejected."""

    pass


# ====================================================================================
# JWKS LOADING (lazy, cached per container)
# ====================================================================================


def _fetch_google_jwks() -> List[Dict[str, Any]]:
    clogger.info(f"[auth] Loading JWKS keys from {GOOGLE_JWKS_URL}")
    response = http.request("GET", GOOGLE_JWKS_URL, timeout=10.0)
    if response.status != 200:
        raise AuthenticationError(f"Could not load Google signing keys ({response.status})")
    return response.json()["keys"]


def get_google_jwks(force_refresh: bool = False) -> List[Dict[str, Any]]:
    now = time.time()
    stale = now - _jwks_cache["fetched_at"] > JWKS_CACHE_SECONDS
    if force_refresh or stale or not _jwks_cache["keys"]:
        _jwks_cache["keys"] = _fetch_google_jwks()
        _jwks_cache["fetched_at"] = now
    return _jwks_cache["keys"]


def reset_jwks_cache() -> None:
    _jwks_cache["keys"] = None
    _jwks_cache["fetched_at"] = 0.0


# ====================================================================================
# VERIFY GOOGLE ID TOKEN (sign-in)
# ====================================================================================


def verify_google_id_token(token: str) -> Dict[str, Any]:
    """
    Validate a Google ID token: RS256 signature against Google's JWKS,
    issuer, audience (our OAuth client id), expiry, and a verified email.
    """
    try:
        headers = jwt.get_unverified_header(token)
    except JWTError as e:
        raise AuthenticationError(f"Malformed ID token: {e}")

    kid = headers.get("kid")
    key = next((k for k in get_google_jwks() if k.get("kid") == kid), None)
    if key is None:
        # unknown kid usually means Google rotated keys since our last fetch
        key = next((k for k in get_google_jwks(force_refresh=True) if k.get("kid") == kid), None)
    if key is None:
        raise AuthenticationError("Invalid ID token: unknown kid")

    try:
        claims = jwt.decode(
            token,
            key,
            algorithms=["RS256"],
            audience=GOOGLE_CLIENT_ID,
            issuer=list(GOOGLE_ISSUERS),
            options={"verify_at_hash": False},
        )
    except JWTError as e:
        raise AuthenticationError(f"Invalid ID token: {e}")

    email = claims.get("email")
    if not email:
        raise AuthenticationError("ID token carries no email")
    if claims.get("email_verified") is False:
        raise AuthenticationError("Google account email is not verified")

    return claims


# ====================================================================================
# SESSION TOKENS
# ====================================================================================


class AuthContext(TypedDict):
    email: str
    name: Optional[str]
    is_contributor: bool
    claims: Dict[str, Any]
    token: str


def issue_session_token(email: str, name: Optional[str], is_contributor: bool) -> str:
    now = int(time.time())
    claims = {
        "sub": email,
        "email": email,
        "name": name,
        "isContributor": is_contributor,
        "iat": now,
        "exp": now + SESSION_MAX_AGE,
    }
    return jwt.encode(claims, SESSION_SECRET, algorithm=SESSION_ALGORITHM)


def verify_session_token(token: str) -> Dict[str, Any]:
    try:
        claims = jwt.decode(token, SESSION_SECRET, algorithms=[SESSION_ALGORITHM])
    except JWTError as e:
        raise AuthenticationError(f"Invalid session: {e}")

    if not claims.get("email"):
        raise AuthenticationError("Invalid session: no email")
    return claims


# ====================================================================================
# SIGN-IN (auth callback)
# ====================================================================================


class SignInResult(TypedDict):
    sessionToken: str
    user: Dict[str, Any]
    expiresIn: int


def sign_in(google_id_token: str, users: Optional[UserService] = None) -> SignInResult:
    """
    Verify a Google ID token, look up / create the user row, issue a session.

    A failing user lookup rejects the sign-in: the ClientError propagates.
    """
    claims = verify_google_id_token(google_id_token)
    email = claims["email"]
    name = claims.get("name")

    users = users or get_user_service()
    record: UserRecord = users.get_or_create(email)

    clogger.info(
        f"[auth] Signed in {email}",
        extra={"is_contributor": record["isContributor"]},
    )

    return {
        "sessionToken": issue_session_token(email, name, record["isContributor"]),
        "user": {
            "email": email,
            "name": name,
            "image": claims.get("picture"),
            "isContributor": record["isContributor"],
        },
        "expiresIn": SESSION_MAX_AGE,
    }


# ====================================================================================
# AUTHORIZE()
# ====================================================================================


def authorize(event: Dict[str, Any]) -> AuthContext:
    """Authenticate a request via its ``Authorization: Bearer <session>`` header."""
    token_header = get_header(event, "Authorization")

    if not token_header:
        raise AuthenticationError("Missing Authorization header")

    if not token_header.lower().startswith("bearer "):
        raise AuthenticationError("Malformed token (must start with 'bearer ')")

    raw_token = token_header.split(" ", 1)[1].strip()
    claims = verify_session_token(raw_token)

    return {
        "email": claims["email"],
        "name": claims.get("name"),
        "is_contributor": claims.get("isContributor") is True,
        "claims": claims,
        "token": raw_token,
    }


# ====================================================================================
# AUTH REQUIRED DECORATOR
# ====================================================================================
# Wraps a Lambda handler:
#   1. Validates the session token from the Authorization header
#   2. Injects `auth` into the handler
#
# Invalid or missing session → 401 Unauthorized
#
# Usage:
#     @auth_required
#     def lambda_handler(event, context, auth):
#         ...
# ------------------------------------------------------------------------------------


def auth_required(
    func: Callable[..., Any],
) -> Callable[[Dict[str, Any], Any], LambdaResponse]:
    """Require a valid session."""

    @wraps(func)
    def wrapper(event: Dict[str, Any], context: Any) -> LambdaResponse:
        try:
            auth = authorize(event)
        except AuthenticationError as e:
            clogger.warning(f"[auth_required] Unauthorized: {e}")
            return error_response(401, f"Unauthorized: {e}", error_code="UNAUTHORIZED")
        return func(event, context, auth=auth)

    return wrapper


# ====================================================================================
# CONTRIBUTOR REQUIRED DECORATOR (AUTH + STORED FLAG)
# ====================================================================================
# The isContributor claim inside the session may be up to SESSION_MAX_AGE old,
# so the flag is re-read from the users table on every call.
#
# Invalid or missing session → 401 Unauthorized
# Flag not set             → 403 Forbidden
# Users table unreachable  → 500 (fails closed)
# ------------------------------------------------------------------------------------


def contributor_required(
    func: Callable[..., Any],
) -> Callable[[Dict[str, Any], Any], LambdaResponse]:
    """Require a valid session belonging to a contributor."""

    @wraps(func)
    def wrapper(event: Dict[str, Any], context: Any) -> LambdaResponse:
        try:
            auth = authorize(event)
        except AuthenticationError as e:
            clogger.warning(f"[contributor_required] Unauthorized: {e}")
            return error_response(401, f"Unauthorized: {e}", error_code="UNAUTHORIZED")

        try:
            allowed = get_user_service().is_contributor(auth["email"])
        except ClientError as e:
            clogger.error(f"[contributor_required] Contributor lookup failed: {e}")
            return error_response(
                500,
                "Could not verify contributor status",
                error_code="USER_LOOKUP_FAILED",
            )

        if not allowed:
            clogger.warning(f"[contributor_required] {auth['email']} is not a contributor")
            return error_response(
                403,
                "Forbidden: contributor access required",
                error_code="NOT_CONTRIBUTOR",
            )

        auth["is_contributor"] = True
        return func(event, context, auth=auth)

    return wrapper
