"""
Monitor artifact class.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from ddhub.artifacts.base_artifact import BaseArtifact
from ddhub.logutil import clogger


class MonitorArtifact(BaseArtifact):
    """
    A shared Datadog monitor definition.

    Besides the common metadata, the row copies ``type``, ``query`` and
    ``message`` out of the payload so the catalogue can show them without
    fetching S3. ``options`` is stored as a JSON string and parsed back on
    read.
    """

    kind = "monitor"

    def __init__(
        self,
        name: str,
        contributor: str,
        monitor_type: str = "unknown",
        query: str = "",
        message: str = "",
        options: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ):
        super().__init__(contributor=contributor, **kwargs)
        self.name = name
        self.monitor_type = monitor_type or "unknown"
        self.query = query or ""
        self.message = message or ""
        self.options = options or {}

    @property
    def title(self) -> str:
        return self.name

    @staticmethod
    def _parse_options(raw: Any) -> Dict[str, Any]:
        if isinstance(raw, dict):
            return raw
        if not raw:
            return {}
        try:
            parsed = json.loads(raw)
        except (TypeError, ValueError):
            clogger.warning("Stored monitor options are not valid JSON; returning {}")
            return {}
        return parsed if isinstance(parsed, dict) else {}

    @classmethod
    def from_upload(cls, payload: Dict[str, Any], metadata: Dict[str, Any]) -> "MonitorArtifact":
        cls._check_upload(payload, metadata, "name")
        return cls(
            name=metadata["name"],
            monitor_type=str(payload.get("type") or "unknown"),
            query=str(payload.get("query") or ""),
            message=str(payload.get("message") or ""),
            options=payload.get("options") if isinstance(payload.get("options"), dict) else {},
            **cls._base_upload_kwargs(metadata),
        )

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "MonitorArtifact":
        return cls(
            name=item.get("name", ""),
            monitor_type=item.get("type", "unknown"),
            query=item.get("query", ""),
            message=item.get("message", ""),
            options=cls._parse_options(item.get("options")),
            **cls._base_kwargs(item),
        )

    def to_item(self) -> Dict[str, Any]:
        item = self._base_to_item()
        item.update(
            {
                "name": self.name,
                "type": self.monitor_type,
                "query": self.query,
                "message": self.message,
                "options": json.dumps(self.options),
            }
        )
        return item

    def to_json(self) -> Dict[str, Any]:
        data = super().to_json()
        data["options"] = self.options
        return data
