import os
from types import SimpleNamespace

import boto3
import pytest
from moto import mock_aws


def pytest_configure(config):
    # ddhub.settings reads these at import time
    os.environ.setdefault("AWS_REGION", "us-east-1")
    os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
    os.environ.setdefault("ARTIFACTS_BUCKET", "ddhub-test-bucket")
    os.environ.setdefault("DASHBOARDS_TABLE", "DashboardsTestTable")
    os.environ.setdefault("MONITORS_TABLE", "MonitorsTestTable")
    os.environ.setdefault("USERS_TABLE", "UsersTestTable")
    os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client.apps.googleusercontent.com")
    os.environ.setdefault("SESSION_SECRET", "test-session-secret")
    os.environ.setdefault("LOG_LEVEL", "OFF")


@pytest.fixture(autouse=True)
def reset_aws_clients():
    """
    Reset cached AWS clients before each test.

    A client cached outside a mock_aws context would otherwise persist and
    point to real AWS instead of the mocked AWS.
    """
    from ddhub.aws.clients import reset_clients

    reset_clients()
    yield
    reset_clients()


def _create_table(dynamodb, name, key):
    return dynamodb.create_table(
        TableName=name,
        KeySchema=[{"AttributeName": key, "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": key, "AttributeType": "S"}],
        BillingMode="PAY_PER_REQUEST",
    )


@pytest.fixture
def aws():
    """
    moto-backed bucket and tables matching the test environment.

    Yields a namespace with the S3 client, the three Table resources and
    the bucket name.
    """
    with mock_aws():
        region = os.environ["AWS_REGION"]
        s3 = boto3.client("s3", region_name=region)
        if region == "us-east-1":
            s3.create_bucket(Bucket=os.environ["ARTIFACTS_BUCKET"])
        else:
            s3.create_bucket(
                Bucket=os.environ["ARTIFACTS_BUCKET"],
                CreateBucketConfiguration={"LocationConstraint": region},
            )

        dynamodb = boto3.resource("dynamodb", region_name=region)
        yield SimpleNamespace(
            s3=s3,
            bucket=os.environ["ARTIFACTS_BUCKET"],
            dashboards=_create_table(dynamodb, os.environ["DASHBOARDS_TABLE"], "id"),
            monitors=_create_table(dynamodb, os.environ["MONITORS_TABLE"], "id"),
            users=_create_table(dynamodb, os.environ["USERS_TABLE"], "email"),
        )


@pytest.fixture
def sample_dashboard():
    return {
        "id": "abc-def-ghi",
        "title": "Service Overview",
        "description": "Latency and errors per service",
        "layout_type": "ordered",
        "widgets": [{"definition": {"type": "timeseries", "requests": []}}],
        "author_handle": "someone@example.com",
        "created_at": "2024-01-01T00:00:00Z",
        "url": "/dashboard/abc-def-ghi",
    }


@pytest.fixture
def sample_monitor():
    return {
        "id": 12345,
        "name": "High error rate on checkout",
        "type": "trace-analytics alert",
        "query": 'trace-analytics("service:checkout").rollup("count").last("5m") > 20',
        "message": "@slack-oncall checkout errors",
        "tags": ["team:payments"],
        "options": {"notify_no_data": False},
        "overall_state": "OK",
        "creator": {"email": "someone@example.com"},
    }
