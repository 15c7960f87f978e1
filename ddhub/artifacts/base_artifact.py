"""
Base artifact class providing common functionality for dashboards and monitors.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Type, Union

from ddhub.artifacts.types import VALID_KINDS, ArtifactKind, s3_key_for
from ddhub.logutil import clogger

# DynamoDB string sets cannot be empty
UNTAGGED = "untagged"

Priority = Union[int, float, str, None]


class InvalidArtifactError(ValueError):
    """Raised when an uploaded payload or its metadata is unusable."""

    pass


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_tags(tags: Any) -> List[str]:
    """Stringify tags; an empty or missing list becomes ["untagged"]."""
    if isinstance(tags, (list, tuple, set)) and tags:
        return sorted({str(tag) for tag in tags})
    return [UNTAGGED]


class BaseArtifact(ABC):
    """
    Abstract base class for the two shareable artifact kinds.

    Provides:
    - Common metadata fields (id, contributor, target, language, tags, ...)
    - Serialization to/from DynamoDB items (to_item/from_item)
    - Factory lookup for the kind-specific subclass
    """

    kind: ArtifactKind

    # metadata keys every upload must carry (besides the kind-specific title)
    REQUIRED_METADATA: Iterable[str] = ("contributor",)

    def __init__(
        self,
        contributor: str,
        target: str = "",
        language: str = "",
        tags: Optional[Iterable[str]] = None,
        priority: Priority = None,
        artifact_id: Optional[str] = None,
        s3_key: Optional[str] = None,
        downloads: int = 0,
        created_at: Optional[str] = None,
        updated_at: Optional[str] = None,
    ):
        self.artifact_id = artifact_id or str(uuid.uuid4())
        self.contributor = contributor
        self.target = target or ""
        self.language = language or ""
        self.tags = normalize_tags(list(tags) if tags is not None else None)
        self.priority = priority
        self.s3_key = s3_key or s3_key_for(self.kind, self.artifact_id)
        self.downloads = int(downloads)
        self.created_at = created_at or _now_iso()
        self.updated_at = updated_at or self.created_at

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------
    @staticmethod
    def class_for(kind: str) -> Type["BaseArtifact"]:
        """
        Return the subclass handling ``kind``.

        Raises:
            ValueError: If kind is not "dashboard" or "monitor"
        """
        from .dashboard_artifact import DashboardArtifact
        from .monitor_artifact import MonitorArtifact

        artifact_map: Dict[str, Type[BaseArtifact]] = {
            "dashboard": DashboardArtifact,
            "monitor": MonitorArtifact,
        }

        if kind not in artifact_map:
            clogger.error(f"Invalid artifact kind in factory: {kind}")
            raise ValueError(f"Invalid artifact kind: {kind}. Must be one of {VALID_KINDS}")

        return artifact_map[kind]

    # ------------------------------------------------------------------
    # Upload validation
    # ------------------------------------------------------------------
    @classmethod
    def _check_upload(cls, payload: Any, metadata: Any, title_field: str) -> None:
        if not isinstance(payload, dict) or not payload:
            raise InvalidArtifactError(f"{cls.kind} data must be a non-empty JSON object")
        if not isinstance(metadata, dict):
            raise InvalidArtifactError("metadata must be a JSON object")

        for field in (title_field, *cls.REQUIRED_METADATA):
            value = metadata.get(field)
            if not isinstance(value, str) or not value.strip():
                raise InvalidArtifactError(f"metadata.{field} is required")

    @classmethod
    @abstractmethod
    def from_upload(cls, payload: Dict[str, Any], metadata: Dict[str, Any]) -> "BaseArtifact":
        """Build a new artifact from an uploaded payload and its form metadata."""

    @classmethod
    @abstractmethod
    def from_item(cls, item: Dict[str, Any]) -> "BaseArtifact":
        """Rebuild an artifact from a stored DynamoDB item."""

    @abstractmethod
    def to_item(self) -> Dict[str, Any]:
        """
        Serialize artifact to a DynamoDB item.
        Subclasses extend the common fields with their own.
        """

    @property
    @abstractmethod
    def title(self) -> str:
        """Display name (dashboard title / monitor name)."""

    def to_json(self) -> Dict[str, Any]:
        """Shape returned by the list endpoints."""
        return {**self.to_item(), "tags": list(self.tags)}

    # ------------------------------------------------------------------
    # Shared (de)serialization helpers
    # ------------------------------------------------------------------
    def _base_to_item(self) -> Dict[str, Any]:
        return {
            "id": self.artifact_id,
            "target": self.target,
            "language": self.language,
            "contributor": self.contributor,
            "tags": set(self.tags),
            "priority": self.priority,
            "s3Key": self.s3_key,
            "downloads": self.downloads,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @staticmethod
    def _base_kwargs(item: Dict[str, Any]) -> Dict[str, Any]:
        tags = item.get("tags")
        return {
            "artifact_id": item["id"],
            "contributor": item.get("contributor", ""),
            "target": item.get("target", ""),
            "language": item.get("language", ""),
            "tags": sorted(tags) if tags else None,
            "priority": item.get("priority"),
            "s3_key": item.get("s3Key"),
            "downloads": int(item.get("downloads") or 0),
            "created_at": item.get("createdAt"),
            "updated_at": item.get("updatedAt"),
        }

    @staticmethod
    def _base_upload_kwargs(metadata: Dict[str, Any]) -> Dict[str, Any]:
        priority = metadata.get("priority")
        if priority is not None and not isinstance(priority, (int, float, str)):
            priority = str(priority)
        return {
            "contributor": metadata["contributor"],
            "target": metadata.get("target") or "",
            "language": metadata.get("language") or "",
            "tags": metadata.get("tags") if isinstance(metadata.get("tags"), list) else None,
            "priority": priority,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(artifact_id='{self.artifact_id}', title='{self.title}')"
