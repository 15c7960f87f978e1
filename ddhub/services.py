"""
Service construction for Lambda handlers.

Handlers call these per invocation; tests patch them (or construct the
services directly with moto-backed clients).
"""

from __future__ import annotations

from ddhub.artifacts.store import ArtifactStore
from ddhub.artifacts.types import ArtifactKind
from ddhub.aws.clients import get_ddb_table, get_s3
from ddhub.settings import ARTIFACTS_BUCKET, DASHBOARDS_TABLE, MONITORS_TABLE, USERS_TABLE
from ddhub.users.user_service import UserService

_TABLES = {
    "dashboard": DASHBOARDS_TABLE,
    "monitor": MONITORS_TABLE,
}


def get_artifact_store(kind: ArtifactKind) -> ArtifactStore:
    return ArtifactStore(
        kind=kind,
        s3=get_s3(),
        table=get_ddb_table(_TABLES[kind]),
        bucket=ARTIFACTS_BUCKET,
    )


def get_user_service() -> UserService:
    return UserService(get_ddb_table(USERS_TABLE))
