"""
Dashboard artifact class.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ddhub.artifacts.base_artifact import BaseArtifact


class DashboardArtifact(BaseArtifact):
    """
    A shared Datadog dashboard definition.

    The DynamoDB row holds the title/description shown in the catalogue;
    the full dashboard JSON lives in S3 under ``dashboards/<id>.json``.
    """

    kind = "dashboard"

    def __init__(
        self,
        title: str,
        contributor: str,
        description: str = "",
        shared_url: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(contributor=contributor, **kwargs)
        self._title = title
        self.description = description or ""
        self.shared_url = shared_url

    @property
    def title(self) -> str:
        return self._title

    @classmethod
    def from_upload(cls, payload: Dict[str, Any], metadata: Dict[str, Any]) -> "DashboardArtifact":
        cls._check_upload(payload, metadata, "title")
        return cls(
            title=metadata["title"],
            description=metadata.get("description") or "",
            shared_url=metadata.get("sharedUrl") or None,
            **cls._base_upload_kwargs(metadata),
        )

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "DashboardArtifact":
        return cls(
            title=item.get("title", ""),
            description=item.get("description", ""),
            shared_url=item.get("sharedUrl"),
            **cls._base_kwargs(item),
        )

    def to_item(self) -> Dict[str, Any]:
        item = self._base_to_item()
        item.update(
            {
                "title": self.title,
                "description": self.description,
                "sharedUrl": self.shared_url,
            }
        )
        return item
