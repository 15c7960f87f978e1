"""
Type definitions for the artifact system.
"""

from typing import Literal, Tuple

# Strictly define allowed artifact kinds
ArtifactKind = Literal["dashboard", "monitor"]

VALID_KINDS: Tuple[ArtifactKind, ...] = ("dashboard", "monitor")


def s3_prefix(kind: ArtifactKind) -> str:
    """Bucket namespace for a kind: dashboards/ or monitors/."""
    return f"{kind}s/"


def s3_key_for(kind: ArtifactKind, artifact_id: str) -> str:
    return f"{s3_prefix(kind)}{artifact_id}.json"
