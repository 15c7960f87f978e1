"""
Conftest for lambda tests - API Gateway event builder and session fixtures.
"""

import json

import pytest

from ddhub.auth import issue_session_token

CONTRIBUTOR_EMAIL = "contributor@example.com"
VIEWER_EMAIL = "viewer@example.com"


# ====================================================================================
# FIXTURE: API Gateway proxy event builder
# ====================================================================================
@pytest.fixture
def make_event():
    """
    Usage:
        event = make_event("POST", "/aws/dashboards", body={...}, token=contributor_token)
    """

    def _make(method="GET", path="/", body=None, query=None, path_params=None, token=None):
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return {
            "httpMethod": method,
            "path": path,
            "headers": headers,
            "queryStringParameters": query,
            "pathParameters": path_params,
            "body": json.dumps(body) if body is not None else None,
            "isBase64Encoded": False,
        }

    return _make


# ====================================================================================
# FIXTURE: Signed-in users (rows live in the moto users table)
# ====================================================================================
@pytest.fixture
def contributor_token(aws):
    aws.users.put_item(Item={"email": CONTRIBUTOR_EMAIL, "isContributor": True, "createdAt": "t"})
    return issue_session_token(CONTRIBUTOR_EMAIL, "Contributor", True)


@pytest.fixture
def viewer_token(aws):
    aws.users.put_item(Item={"email": VIEWER_EMAIL, "isContributor": False, "createdAt": "t"})
    return issue_session_token(VIEWER_EMAIL, "Viewer", False)
