"""
Turn stored or exported dashboard/monitor JSON into create-request bodies.

Exports from the Datadog UI carry read-only fields (id, author_handle,
created_at, overall_state, ...) that the create endpoints reject, so only
an allow-list of fields is forwarded.

Some monitor types are rejected when their ``options`` are underspecified.
``MONITOR_TYPE_DEFAULTS`` lists, per monitor type, the option values to
fill in when the payload does not set them.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Tuple

DASHBOARD_FIELDS: Tuple[str, ...] = (
    "title",
    "description",
    "widgets",
    "layout_type",
    "template_variable_presets",
    "template_variables",
    "notify_list",
    "reflow_type",
    "tags",
)

MONITOR_FIELDS: Tuple[str, ...] = (
    "name",
    "type",
    "query",
    "message",
    "tags",
    "options",
    "priority",
)

_TRACE_ANALYTICS_VARIABLES = [
    {
        "data_source": "spans",
        "name": "query",
        "compute": {"aggregation": "count"},
        "group_by": [
            {
                "facet": "resource_name",
                "limit": 1000,
                "sort": {"order": "desc", "aggregation": "count"},
            }
        ],
        "search": {"query": "@_trace_root:1"},
        "storage": "hot",
    }
]

_NETWORK_PERFORMANCE_VARIABLES = [
    {
        "data_source": "network",
        "name": "a",
        "search": {"query": ""},
        "compute": {"metric": "network.retransmits", "aggregation": "sum"},
        "indexes": ["netflow-search-v2"],
        "group_by": [
            {
                "should_exclude_missing": True,
                "limit": 10,
                "facet": "network.client.auto_grouping_tags",
            },
            {
                "should_exclude_missing": True,
                "limit": 10,
                "facet": "network.server.auto_grouping_tags",
            },
        ],
        "storage": "hot",
    }
]

_COMMON_QUERY_MONITOR_OPTIONS: Dict[str, Any] = {
    "thresholds": {"critical": 20},
    "groupby_simple_monitor": False,
    "silenced": {},
}

# monitor type -> options defaults, applied key by key when absent
MONITOR_TYPE_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "trace-analytics alert": {
        "variables": _TRACE_ANALYTICS_VARIABLES,
        **_COMMON_QUERY_MONITOR_OPTIONS,
    },
    "network-performance alert": {
        "variables": _NETWORK_PERFORMANCE_VARIABLES,
        **_COMMON_QUERY_MONITOR_OPTIONS,
    },
}


def _option_missing(options: Dict[str, Any], key: str, default: Any) -> bool:
    if key not in options or options[key] is None:
        return True
    # a non-list variables value is as good as missing
    return isinstance(default, list) and not isinstance(options[key], list)


def build_dashboard_request(dashboard: Dict[str, Any]) -> Dict[str, Any]:
    """
    Keep only the fields the create-dashboard endpoint accepts.
    Fields absent from the source are left out rather than sent as null.
    """
    return {
        key: copy.deepcopy(dashboard[key])
        for key in DASHBOARD_FIELDS
        if dashboard.get(key) is not None
    }


def apply_monitor_type_defaults(monitor: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fill option defaults for the monitor's type (in place).
    Types without an entry in MONITOR_TYPE_DEFAULTS are untouched.
    """
    defaults = MONITOR_TYPE_DEFAULTS.get(monitor.get("type") or "")
    if not defaults:
        return monitor

    options = monitor.get("options")
    if not isinstance(options, dict):
        options = {}
        monitor["options"] = options

    for key, default in defaults.items():
        if _option_missing(options, key, default):
            options[key] = copy.deepcopy(default)

    return monitor


def clean_monitor(monitor: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build a create-monitor body from a stored or exported monitor.

    - drops every field outside MONITOR_FIELDS
    - ``tags`` becomes None unless it is a non-empty list
    - applies MONITOR_TYPE_DEFAULTS for the monitor's type

    The input is never modified.
    """
    cleaned = {
        key: copy.deepcopy(value)
        for key, value in monitor.items()
        if key in MONITOR_FIELDS
    }

    tags = cleaned.get("tags")
    if not isinstance(tags, list) or not tags:
        cleaned["tags"] = None

    return apply_monitor_type_defaults(cleaned)
