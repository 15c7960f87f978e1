"""
Scheduled (EventBridge) storage reconciliation.

Reports dashboard/monitor blobs without a metadata row and rows whose blob
is missing. Read-only: nothing is repaired automatically.
"""

from __future__ import annotations

from typing import Any, Dict

from ddhub.artifacts.types import VALID_KINDS
from ddhub.logutil import clogger, log_operation
from ddhub.logutil.context import correlation_id
from ddhub.services import get_artifact_store


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    correlation_id.set(getattr(context, "aws_request_id", None) or "reconcile")

    summary: Dict[str, Any] = {}
    with log_operation("reconcile_storage", audit=True):
        for kind in VALID_KINDS:
            report = get_artifact_store(kind).find_orphans()
            summary[f"{kind}s"] = {
                "orphanedBlobs": report.orphaned_blobs,
                "missingBlobs": report.missing_blobs,
            }

    clean = all(not (v["orphanedBlobs"] or v["missingBlobs"]) for v in summary.values())
    if clean:
        clogger.info("Artifact storage is consistent")
    return {"clean": clean, **summary}
