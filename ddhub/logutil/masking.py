"""
Sensitive data masking utilities for secure logging.

Sync requests carry Datadog API/application keys for two accounts, and
auth requests carry Google ID tokens. Everything that reaches a log sink
goes through ``mask_sensitive_data`` first.
"""

import re
from typing import Any, List, Set, Tuple

# Field names (compared lower-cased) that are always masked
SENSITIVE_FIELDS: Set[str] = {
    "password",
    "secret",
    "token",
    "authorization",
    "id_token",
    "idtoken",
    "credential",
    "session_token",
    "sessiontoken",
    "dd-api-key",
    "dd-application-key",
}

# Any key ending in one of these is masked too (apiKey, sourceAppKey, ...)
SENSITIVE_SUFFIXES: Tuple[str, ...] = ("apikey", "appkey", "api_key", "app_key")

# Regex patterns for masking sensitive data in strings
SENSITIVE_PATTERNS: List[Tuple[str, str]] = [
    (r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", "bearer [REDACTED]"),
]

__all__ = ["mask_sensitive_data", "is_sensitive_key", "SENSITIVE_FIELDS", "SENSITIVE_PATTERNS"]


def is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return lowered in SENSITIVE_FIELDS or lowered.endswith(SENSITIVE_SUFFIXES)


def mask_sensitive_data(data: Any, max_depth: int = 5) -> Any:
    """
    Recursively mask sensitive data in dicts, lists, and strings.

    Args:
        data: Data structure to mask (dict, list, str, or primitive)
        max_depth: Maximum recursion depth to prevent infinite loops

    Returns:
        Deep copy with sensitive values masked
    """
    if max_depth <= 0:
        return "[MAX_DEPTH_EXCEEDED]"

    if isinstance(data, dict):
        return {
            k: (
                "[REDACTED]"
                if isinstance(k, str) and is_sensitive_key(k)
                else mask_sensitive_data(v, max_depth - 1)
            )
            for k, v in data.items()
        }

    elif isinstance(data, list):
        return [mask_sensitive_data(item, max_depth - 1) for item in data]

    elif isinstance(data, str):
        masked = data
        for pattern, replacement in SENSITIVE_PATTERNS:
            masked = re.sub(pattern, replacement, masked, flags=re.IGNORECASE)
        return masked

    else:
        return data
