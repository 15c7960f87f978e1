"""
Centralized AWS client factory with lazy initialization and caching.

Handlers call these once per invocation and hand the results to the
services (ArtifactStore, UserService), which never look clients up
themselves.
"""

from __future__ import annotations

from typing import Any, Optional

import boto3
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource
from mypy_boto3_s3 import S3Client

from ddhub.settings import AWS_REGION


# -------------------------------------------------------------------------------------
# Lazy-initialized client caches
# -------------------------------------------------------------------------------------
_dynamodb_resource: Optional[DynamoDBServiceResource] = None
_s3_client: Optional[S3Client] = None


# -------------------------------------------------------------------------------------
# DynamoDB
# -------------------------------------------------------------------------------------
def get_dynamodb() -> DynamoDBServiceResource:
    """
    Returns a cached DynamoDB resource.
    """
    global _dynamodb_resource

    if boto3 is None:
        raise RuntimeError("boto3 is not available in this environment")

    if _dynamodb_resource is None:
        _dynamodb_resource = boto3.resource("dynamodb", region_name=AWS_REGION)  # type: ignore

    return _dynamodb_resource


def get_ddb_table(table_name: str) -> Any:
    """
    Convenience wrapper for DynamoDB table access.
    Returns a boto3 Table object.
    """
    dynamo: DynamoDBServiceResource = get_dynamodb()
    return dynamo.Table(table_name)  # type: ignore[no-any-return]


# -------------------------------------------------------------------------------------
# S3
# -------------------------------------------------------------------------------------
def get_s3() -> S3Client:
    """
    Returns a cached S3 client.
    """
    global _s3_client

    if boto3 is None:
        raise RuntimeError("boto3 is not available in this environment")

    if _s3_client is None:
        _s3_client = boto3.client("s3", region_name=AWS_REGION)

    return _s3_client


# -------------------------------------------------------------------------------------
# Testing support
# -------------------------------------------------------------------------------------
def reset_clients() -> None:
    """
    Drop every cached client so the next call builds a fresh one.
    Needed when moto's mock_aws starts after a client was cached.
    """
    global _dynamodb_resource, _s3_client

    _dynamodb_resource = None
    _s3_client = None
