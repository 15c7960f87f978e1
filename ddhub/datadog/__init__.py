"""
Datadog REST API access and payload normalization.
"""

from .client import DATADOG_SITES, DatadogAPIError, DatadogClient, resolve_api_url
from .payloads import (
    MONITOR_TYPE_DEFAULTS,
    apply_monitor_type_defaults,
    build_dashboard_request,
    clean_monitor,
)

__all__ = [
    "DATADOG_SITES",
    "DatadogAPIError",
    "DatadogClient",
    "resolve_api_url",
    "MONITOR_TYPE_DEFAULTS",
    "apply_monitor_type_defaults",
    "build_dashboard_request",
    "clean_monitor",
]
