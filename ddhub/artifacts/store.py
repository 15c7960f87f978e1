"""
Artifact store: JSON payloads in S3, metadata rows in DynamoDB.

One ``ArtifactStore`` serves one artifact kind. The S3 client and the
DynamoDB table are passed in by the caller; nothing here reaches for a
module-level client.

Writes touch two services and cannot be atomic. Each two-step write runs a
compensating action when its second step fails:

- upload: blob written, row write fails → blob deleted, error re-raised
- delete: blob deleted, row delete fails → blob restored, error re-raised

``find_orphans`` detects whatever still slips through (for example a
crash between the two steps).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError
from mypy_boto3_s3 import S3Client

from ddhub.artifacts.base_artifact import BaseArtifact, InvalidArtifactError
from ddhub.artifacts.types import ArtifactKind, s3_prefix
from ddhub.logutil import clogger, log_operation
from ddhub.storage.dynamo_utils import (
    delete_item,
    from_dynamo,
    increment_counter,
    load_item,
    save_item,
    scan_table,
)
from ddhub.storage.s3_utils import (
    ObjectNotFoundError,
    delete_object,
    get_json_object,
    list_keys,
    put_json_object,
)

__all__ = [
    "ArtifactStore",
    "ArtifactNotFoundError",
    "InvalidArtifactError",
    "OrphanReport",
]


class ArtifactNotFoundError(Exception):
    """Raised when an artifact row or payload does not exist."""

    pass


@dataclass
class OrphanReport:
    """Result of a reconciliation sweep."""

    orphaned_blobs: List[str] = field(default_factory=list)
    missing_blobs: List[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.orphaned_blobs and not self.missing_blobs


class ArtifactStore:
    """
    CRUD for one artifact kind.

    Args:
        kind: "dashboard" or "monitor"
        s3: boto3 S3 client
        table: boto3 DynamoDB Table resource holding the metadata rows
        bucket: S3 bucket holding the payloads
    """

    def __init__(self, kind: ArtifactKind, s3: S3Client, table: Any, bucket: str):
        self.kind = kind
        self.artifact_class = BaseArtifact.class_for(kind)
        self.s3 = s3
        self.table = table
        self.bucket = bucket

    # =========================================================================
    # Reads
    # =========================================================================
    def list(self) -> List[Dict[str, Any]]:
        """
        Scan every metadata row and return it in API shape
        (downloads as int, tags as list, monitor options parsed).
        """
        with log_operation(f"list_{self.kind}s"):
            rows = scan_table(self.table)

        artifacts = [self.artifact_class.from_item(from_dynamo(row)) for row in rows]
        artifacts.sort(key=lambda a: a.created_at, reverse=True)
        clogger.info(f"[store] Listed {len(artifacts)} {self.kind}s")
        return [artifact.to_json() for artifact in artifacts]

    def get(self, artifact_id: str) -> Optional[BaseArtifact]:
        item = load_item(self.table, {"id": artifact_id})
        if item is None:
            return None
        return self.artifact_class.from_item(from_dynamo(item))

    def get_payload(self, key: str) -> Any:
        """
        Fetch the raw JSON payload stored at ``key``.

        Raises:
            ArtifactNotFoundError: no object at that key
        """
        try:
            return get_json_object(self.s3, self.bucket, key)
        except ObjectNotFoundError as e:
            raise ArtifactNotFoundError(str(e)) from e

    def get_payloads(self, keys: List[Any]) -> List[Any]:
        """
        Fetch several stored payloads, in order.

        Raises:
            InvalidArtifactError: a key is not a string under this kind's prefix
            ArtifactNotFoundError: a key has no object
        """
        prefix = s3_prefix(self.kind)
        for key in keys:
            if not isinstance(key, str) or not key.startswith(prefix):
                raise InvalidArtifactError(f"Invalid {self.kind} key '{key}'")
        return [self.get_payload(key) for key in keys]

    # =========================================================================
    # Writes
    # =========================================================================
    def upload(self, payload: Dict[str, Any], metadata: Dict[str, Any]) -> Dict[str, str]:
        """
        Store a new artifact: blob first, then metadata row.

        Returns:
            {"id": <new id>, "s3Key": <blob key>}

        Raises:
            InvalidArtifactError: payload or metadata unusable
            ClientError: S3/DynamoDB failure (after compensation)
        """
        artifact = self.artifact_class.from_upload(payload, metadata)

        with log_operation(f"upload_{self.kind}", audit=True, artifact_id=artifact.artifact_id):
            put_json_object(self.s3, self.bucket, artifact.s3_key, payload)

            try:
                save_item(self.table, artifact.to_item())
            except ClientError:
                clogger.warning(
                    "[store] Metadata write failed; removing uploaded blob",
                    extra={"artifact_id": artifact.artifact_id, "s3_key": artifact.s3_key},
                )
                self._compensate(lambda: delete_object(self.s3, self.bucket, artifact.s3_key))
                raise

        return {"id": artifact.artifact_id, "s3Key": artifact.s3_key}

    def delete(self, artifact_id: str, key: str) -> None:
        """
        Remove an artifact: blob first, then metadata row.

        The blob is read before deletion so it can be put back if the row
        delete fails.
        """
        if not key.startswith(s3_prefix(self.kind)):
            raise InvalidArtifactError(f"s3Key must live under {s3_prefix(self.kind)}")

        with log_operation(f"delete_{self.kind}", audit=True, artifact_id=artifact_id):
            try:
                backup: Any = get_json_object(self.s3, self.bucket, key)
            except ObjectNotFoundError:
                backup = None
                clogger.warning(
                    "[store] Blob already missing; deleting metadata only",
                    extra={"artifact_id": artifact_id, "s3_key": key},
                )

            if backup is not None:
                delete_object(self.s3, self.bucket, key)

            try:
                delete_item(self.table, {"id": artifact_id})
            except ClientError:
                if backup is not None:
                    clogger.warning(
                        "[store] Metadata delete failed; restoring blob",
                        extra={"artifact_id": artifact_id, "s3_key": key},
                    )
                    self._compensate(lambda: put_json_object(self.s3, self.bucket, key, backup))
                raise

    def increment_downloads(self, artifact_id: str) -> int:
        """
        Atomically bump the download counter.

        Raises:
            ArtifactNotFoundError: no row with that id
        """
        try:
            return increment_counter(self.table, {"id": artifact_id}, "downloads")
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise ArtifactNotFoundError(f"{self.kind} '{artifact_id}' does not exist") from e
            raise

    # =========================================================================
    # Reconciliation
    # =========================================================================
    def find_orphans(self) -> OrphanReport:
        """
        Compare blobs under the kind's prefix with the metadata rows.

        orphaned_blobs: keys in S3 that no row points to
        missing_blobs:  ids of rows whose s3Key has no object
        """
        rows = scan_table(self.table)
        keys = set(list_keys(self.s3, self.bucket, s3_prefix(self.kind)))
        referenced = {row.get("s3Key"): row["id"] for row in rows}

        report = OrphanReport(
            orphaned_blobs=sorted(keys - set(referenced)),
            missing_blobs=sorted(
                artifact_id for key, artifact_id in referenced.items() if key not in keys
            ),
        )
        if not report.is_clean:
            clogger.warning(
                f"[store] Inconsistent {self.kind} storage",
                extra={
                    "orphaned_blobs": len(report.orphaned_blobs),
                    "missing_blobs": len(report.missing_blobs),
                },
            )
        return report

    @staticmethod
    def _compensate(action: Any) -> None:
        # The original failure is what the caller needs to see
        try:
            action()
        except ClientError as e:
            clogger.error(f"[store] Compensating action failed: {e}")
