"""
Global application settings loaded from environment variables.
Used throughout the Lambda functions and shared utility modules.
"""

from __future__ import annotations

import os


# -----------------------------------------------------------------------------
# Helper: Fetch Required Environment Variables
# -----------------------------------------------------------------------------
def _require_env(name: str) -> str:
    """
    Fetch a REQUIRED environment variable or raise a descriptive error.
    """
    value = os.environ.get(name)
    if value is None:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


# -----------------------------------------------------------------------------
# Core AWS Settings
# -----------------------------------------------------------------------------
AWS_REGION: str = _require_env("AWS_REGION")

# DynamoDB tables
DASHBOARDS_TABLE: str = _require_env("DASHBOARDS_TABLE")
MONITORS_TABLE: str = _require_env("MONITORS_TABLE")
USERS_TABLE: str = _require_env("USERS_TABLE")

# S3 bucket holding dashboards/<id>.json and monitors/<id>.json
ARTIFACTS_BUCKET: str = _require_env("ARTIFACTS_BUCKET")


# -----------------------------------------------------------------------------
# Authentication
# -----------------------------------------------------------------------------
GOOGLE_CLIENT_ID: str = _require_env("GOOGLE_CLIENT_ID")
SESSION_SECRET: str = _require_env("SESSION_SECRET")

# Session tokens live for 30 days unless overridden
SESSION_MAX_AGE: int = int(os.environ.get("SESSION_MAX_AGE", str(30 * 24 * 60 * 60)))


# -----------------------------------------------------------------------------
# Datadog API
# -----------------------------------------------------------------------------
# Seconds before a single Datadog API call is abandoned
DATADOG_TIMEOUT: float = float(os.environ.get("DATADOG_TIMEOUT", "30"))

# Logging Configuration (Optional)
LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")
