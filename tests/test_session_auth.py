"""
Tests for ddhub/auth.py: Google ID token verification, session tokens,
sign-in and the handler decorators.
"""

import json
import time
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt

import ddhub.auth as auth
from ddhub.auth import (
    _fetch_google_jwks,
    AuthenticationError,
    auth_required,
    authorize,
    contributor_required,
    issue_session_token,
    sign_in,
    verify_google_id_token,
    verify_session_token,
)
from ddhub.settings import GOOGLE_CLIENT_ID, SESSION_SECRET

KID = "test-kid"


@pytest.fixture(scope="module")
def rsa_keys():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    public_jwk = {**jwk.construct(public_pem, "RS256").to_dict(), "kid": KID}
    return SimpleNamespace(private_pem=private_pem, public_jwk=public_jwk)


@pytest.fixture(autouse=True)
def google_jwks(rsa_keys):
    auth.reset_jwks_cache()
    with patch("ddhub.auth._fetch_google_jwks", return_value=[rsa_keys.public_jwk]) as fetch:
        yield fetch
    auth.reset_jwks_cache()


def _google_token(rsa_keys, **overrides):
    now = int(time.time())
    claims = {
        "iss": "https://accounts.google.com",
        "aud": GOOGLE_CLIENT_ID,
        "sub": "1234567890",
        "email": "dev@example.com",
        "email_verified": True,
        "name": "Dev Eloper",
        "picture": "https://lh3.googleusercontent.com/a/pic",
        "iat": now,
        "exp": now + 600,
    }
    claims.update(overrides)
    return jwt.encode(claims, rsa_keys.private_pem, algorithm="RS256", headers={"kid": KID})


def _event_with_token(token):
    return {"headers": {"authorization": f"Bearer {token}"}}


# =============================================================================
# Google ID tokens
# =============================================================================
class TestVerifyGoogleIdToken:
    def test_valid_token(self, rsa_keys):
        claims = verify_google_id_token(_google_token(rsa_keys))

        assert claims["email"] == "dev@example.com"

    def test_issuer_without_scheme_is_accepted(self, rsa_keys):
        verify_google_id_token(_google_token(rsa_keys, iss="accounts.google.com"))

    @pytest.mark.parametrize(
        "overrides",
        [
            {"aud": "someone-else"},
            {"iss": "https://evil.example.com"},
            {"exp": int(time.time()) - 60},
            {"email": None},
            {"email_verified": False},
        ],
    )
    def test_rejected_claims(self, rsa_keys, overrides):
        with pytest.raises(AuthenticationError):
            verify_google_id_token(_google_token(rsa_keys, **overrides))

    def test_garbage_token(self):
        with pytest.raises(AuthenticationError):
            verify_google_id_token("not-a-jwt")

    def test_unknown_kid_refetches_once(self, rsa_keys, google_jwks):
        token = jwt.encode(
            {"email": "x@example.com"}, rsa_keys.private_pem, algorithm="RS256", headers={"kid": "rotated"}
        )

        with pytest.raises(AuthenticationError, match="unknown kid"):
            verify_google_id_token(token)

        assert google_jwks.call_count == 2

    def test_jwks_cached_between_calls(self, rsa_keys, google_jwks):
        verify_google_id_token(_google_token(rsa_keys))
        verify_google_id_token(_google_token(rsa_keys))

        assert google_jwks.call_count == 1


def test_fetch_google_jwks_non_200():
    with patch.object(auth.http, "request", return_value=MagicMock(status=503)):
        with pytest.raises(AuthenticationError):
            _fetch_google_jwks()


# =============================================================================
# Session tokens
# =============================================================================
class TestSessionTokens:
    def test_round_trip(self):
        token = issue_session_token("dev@example.com", "Dev", True)

        claims = verify_session_token(token)

        assert claims["email"] == "dev@example.com"
        assert claims["isContributor"] is True
        assert claims["exp"] - claims["iat"] == 30 * 24 * 60 * 60

    def test_wrong_secret(self):
        forged = jwt.encode({"email": "x@example.com"}, "not-the-secret", algorithm="HS256")

        with pytest.raises(AuthenticationError):
            verify_session_token(forged)

    def test_expired(self):
        expired = jwt.encode(
            {"email": "x@example.com", "exp": int(time.time()) - 10}, SESSION_SECRET, algorithm="HS256"
        )

        with pytest.raises(AuthenticationError):
            verify_session_token(expired)


class TestAuthorize:
    def test_bearer_header_case_insensitive(self):
        token = issue_session_token("dev@example.com", "Dev", False)

        ctx = authorize({"headers": {"AUTHORIZATION": f"bearer {token}"}})

        assert ctx["email"] == "dev@example.com"
        assert ctx["is_contributor"] is False
        assert ctx["token"] == token

    @pytest.mark.parametrize(
        "headers",
        [None, {}, {"Authorization": "Basic abc"}, {"Authorization": "Bearer nope"}],
    )
    def test_rejections(self, headers):
        with pytest.raises(AuthenticationError):
            authorize({"headers": headers})


# =============================================================================
# Sign-in
# =============================================================================
class TestSignIn:
    def test_creates_user_and_issues_session(self, rsa_keys):
        users = MagicMock()
        users.get_or_create.return_value = {
            "email": "dev@example.com",
            "isContributor": False,
            "createdAt": "t",
        }

        result = sign_in(_google_token(rsa_keys), users=users)

        users.get_or_create.assert_called_once_with("dev@example.com")
        assert result["user"]["isContributor"] is False
        assert verify_session_token(result["sessionToken"])["email"] == "dev@example.com"

    def test_lookup_failure_rejects_sign_in(self, rsa_keys):
        users = MagicMock()
        users.get_or_create.side_effect = ClientError(
            {"Error": {"Code": "InternalServerError", "Message": "down"}}, "GetItem"
        )

        with pytest.raises(ClientError):
            sign_in(_google_token(rsa_keys), users=users)


# =============================================================================
# Decorators
# =============================================================================
def _echo(event, context, auth):
    return {"statusCode": 200, "headers": {}, "body": json.dumps({"email": auth["email"]})}


class TestDecorators:
    def test_auth_required_injects_context(self):
        handler = auth_required(_echo)
        token = issue_session_token("dev@example.com", None, False)

        response = handler(_event_with_token(token), None)

        assert response["statusCode"] == 200
        assert json.loads(response["body"]) == {"email": "dev@example.com"}

    def test_auth_required_401(self):
        response = auth_required(_echo)({"headers": {}}, None)

        assert response["statusCode"] == 401
        assert json.loads(response["body"])["error_code"] == "UNAUTHORIZED"

    def test_contributor_required_rechecks_stored_flag(self):
        # the session claims contributor, but the stored flag was revoked since
        token = issue_session_token("dev@example.com", None, True)
        users = MagicMock()
        users.is_contributor.return_value = False

        with patch("ddhub.auth.get_user_service", return_value=users):
            response = contributor_required(_echo)(_event_with_token(token), None)

        assert response["statusCode"] == 403
        assert json.loads(response["body"])["error_code"] == "NOT_CONTRIBUTOR"
        users.is_contributor.assert_called_once_with("dev@example.com")

    def test_contributor_required_allows_contributor(self):
        token = issue_session_token("dev@example.com", None, False)
        users = MagicMock()
        users.is_contributor.return_value = True

        with patch("ddhub.auth.get_user_service", return_value=users):
            response = contributor_required(_echo)(_event_with_token(token), None)

        assert response["statusCode"] == 200

    def test_contributor_required_fails_closed(self):
        token = issue_session_token("dev@example.com", None, True)
        users = MagicMock()
        users.is_contributor.side_effect = ClientError(
            {"Error": {"Code": "InternalServerError", "Message": "down"}}, "GetItem"
        )

        with patch("ddhub.auth.get_user_service", return_value=users):
            response = contributor_required(_echo)(_event_with_token(token), None)

        assert response["statusCode"] == 500

    def test_contributor_required_401_without_session(self):
        response = contributor_required(_echo)({"headers": {}}, None)

        assert response["statusCode"] == 401
