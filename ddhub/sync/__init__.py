"""
Cross-account dashboard/monitor synchronization.
"""

from .request_body import (
    client_from_body,
    is_source_target_request,
    optional_string,
    payloads_from_body,
)
from .engine import (
    STATUS_FAILED,
    STATUS_SUCCESS,
    SyncItemResult,
    SyncReport,
    replay_dashboards,
    replay_monitors,
    sync_dashboards,
    sync_monitors,
)

__all__ = [
    "STATUS_FAILED",
    "STATUS_SUCCESS",
    "SyncItemResult",
    "SyncReport",
    "client_from_body",
    "is_source_target_request",
    "optional_string",
    "payloads_from_body",
    "replay_dashboards",
    "replay_monitors",
    "sync_dashboards",
    "sync_monitors",
]
