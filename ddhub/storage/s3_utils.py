"""
S3 storage utilities for artifact payloads.

Payloads are small JSON documents, so they are written and read in memory
(put_object / get_object) rather than through temp files.
"""

from __future__ import annotations

import json
from typing import Any, Iterator

from botocore.exceptions import ClientError
from mypy_boto3_s3 import S3Client

from ddhub.logutil import clogger


class ObjectNotFoundError(Exception):
    """Raised when an S3 key does not exist."""

    pass


# =====================================================================================
# JSON objects
# =====================================================================================
def put_json_object(s3: S3Client, bucket: str, key: str, payload: Any) -> None:
    """
    Serialize ``payload`` and store it at s3://bucket/key.
    """
    try:
        clogger.debug(f"Uploading JSON to s3://{bucket}/{key}")
        s3.put_object(
            Bucket=bucket,
            Key=key,
            Body=json.dumps(payload).encode("utf-8"),
            ContentType="application/json",
        )
        clogger.info(f"Upload successful: s3://{bucket}/{key}")
    except ClientError as e:
        clogger.error(f"Failed to upload s3://{bucket}/{key}: {e}")
        raise


def get_json_object(s3: S3Client, bucket: str, key: str) -> Any:
    """
    Fetch and decode the JSON document at s3://bucket/key.

    Raises:
        ObjectNotFoundError: the key does not exist
        ClientError: any other S3 failure
    """
    try:
        response = s3.get_object(Bucket=bucket, Key=key)
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code")
        if code in ("NoSuchKey", "404", "NotFound"):
            raise ObjectNotFoundError(f"s3://{bucket}/{key} does not exist") from e
        clogger.error(f"Failed to download s3://{bucket}/{key}: {e}")
        raise

    body = response["Body"].read()
    clogger.debug(f"Downloaded s3://{bucket}/{key} ({len(body)} bytes)")
    return json.loads(body)


def delete_object(s3: S3Client, bucket: str, key: str) -> None:
    """
    Delete a single object. S3 deletes of missing keys succeed silently.
    """
    try:
        s3.delete_object(Bucket=bucket, Key=key)
        clogger.info(f"Deleted s3://{bucket}/{key}")
    except ClientError as e:
        clogger.error(f"Failed to delete s3://{bucket}/{key}: {e}")
        raise


def list_keys(s3: S3Client, bucket: str, prefix: str) -> Iterator[str]:
    """
    Yield every key under ``prefix``, following pagination.
    """
    paginator = s3.get_paginator("list_objects_v2")
    for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
        for obj in page.get("Contents", []):
            yield obj["Key"]
