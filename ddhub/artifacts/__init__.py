"""
Shareable Datadog artifacts (dashboards and monitors).
"""

from .base_artifact import BaseArtifact, InvalidArtifactError
from .dashboard_artifact import DashboardArtifact
from .monitor_artifact import MonitorArtifact
from .store import ArtifactNotFoundError, ArtifactStore, OrphanReport
from .types import ArtifactKind

__all__ = [
    "BaseArtifact",
    "DashboardArtifact",
    "MonitorArtifact",
    "ArtifactStore",
    "ArtifactNotFoundError",
    "InvalidArtifactError",
    "OrphanReport",
    "ArtifactKind",
]
