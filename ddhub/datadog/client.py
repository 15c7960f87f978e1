"""
Minimal Datadog REST API (v1) client for dashboards and monitors.

Each client is bound to one account: an API key, an application key and a
regional base URL. Sync runs build one client for the source account and
one for the target account.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from ddhub.logutil import clogger
from ddhub.settings import DATADOG_TIMEOUT

# Region code → API host (the hub's region picker)
DATADOG_SITES: Dict[str, str] = {
    "US1": "https://api.datadoghq.com",
    "US3": "https://api.us3.datadoghq.com",
    "US5": "https://api.us5.datadoghq.com",
    "EU": "https://api.datadoghq.eu",
    "AP1": "https://api.ap1.datadoghq.com",
    "US1-FED": "https://api.ddog-gov.com",
}

API_PREFIX = "/api/v1"


class DatadogAPIError(Exception):
    """
    Raised when a Datadog call fails.

    ``status_code`` is the HTTP status for upstream errors and None for
    transport failures (DNS, TLS, timeout, ...).
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def resolve_api_url(api_url: Optional[str] = None, region: Optional[str] = None) -> str:
    """
    Return the ``.../api/v1`` base URL for an account.

    An explicit ``api_url`` wins; both ``https://api.datadoghq.com`` and
    ``https://api.datadoghq.com/api/v1`` are accepted. Otherwise ``region``
    is looked up in DATADOG_SITES.

    Raises:
        ValueError: neither given, unknown region, or a non-http(s) URL
    """
    if api_url:
        if not isinstance(api_url, str):
            raise ValueError("Datadog API URL must be a string")
        base = api_url.strip().rstrip("/")
        if not base.startswith(("https://", "http://")):
            raise ValueError(f"Invalid Datadog API URL: {api_url}")
        if not base.endswith(API_PREFIX):
            base = f"{base}{API_PREFIX}"
        return base

    if region:
        if not isinstance(region, str):
            raise ValueError("Datadog region must be a string")
        host = DATADOG_SITES.get(region.upper())
        if host is None:
            raise ValueError(
                f"Unknown Datadog region '{region}'. Expected one of {sorted(DATADOG_SITES)}"
            )
        return f"{host}{API_PREFIX}"

    raise ValueError("A Datadog API URL or region is required")


def _extract_error_message(response: requests.Response) -> str:
    """Pull the human-readable part out of a Datadog error body."""
    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        errors = data.get("errors")
        if isinstance(errors, list) and errors:
            return "; ".join(str(e) for e in errors)
        if isinstance(errors, str) and errors:
            return errors

    text = (response.text or "").strip()
    return text[:500] if text else (response.reason or "Unknown error")


class DatadogClient:
    """
    Dashboard/monitor CRUD against one Datadog account.

    Authentication is the static ``DD-API-KEY`` / ``DD-APPLICATION-KEY``
    header pair sent with every call.
    """

    def __init__(
        self,
        api_key: str,
        app_key: str,
        api_url: str,
        timeout: float = DATADOG_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        if not api_key or not app_key:
            raise ValueError("Datadog API key and application key are required")

        self.base_url = resolve_api_url(api_url)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "DD-API-KEY": api_key,
                "DD-APPLICATION-KEY": app_key,
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )

    def __repr__(self) -> str:
        return f"DatadogClient(base_url='{self.base_url}')"

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _request(self, method: str, path: str, json_body: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        clogger.debug(f"[Datadog] {method} {url}")

        try:
            response = self.session.request(method, url, json=json_body, timeout=self.timeout)
        except requests.RequestException as e:
            clogger.warning(f"[Datadog] {method} {path} transport error: {type(e).__name__}")
            raise DatadogAPIError(f"Request to Datadog failed: {e}") from e

        if not response.ok:
            message = _extract_error_message(response)
            clogger.warning(
                f"[Datadog] {method} {path} -> {response.status_code}",
                extra={"status_code": response.status_code, "error": message},
            )
            raise DatadogAPIError(
                f"Datadog API returned {response.status_code}: {message}",
                status_code=response.status_code,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise DatadogAPIError(
                "Invalid response from Datadog API", status_code=response.status_code
            ) from e

    # ------------------------------------------------------------------
    # Dashboards
    # ------------------------------------------------------------------
    def list_dashboards(self) -> List[Dict[str, Any]]:
        """Dashboard summaries (id, title, ...) without widgets."""
        data = self._request("GET", "/dashboard")
        return list(data.get("dashboards") or []) if isinstance(data, dict) else []

    def get_dashboard(self, dashboard_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/dashboard/{dashboard_id}")

    def create_dashboard(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/dashboard", payload)

    # ------------------------------------------------------------------
    # Monitors
    # ------------------------------------------------------------------
    def list_monitors(self) -> List[Dict[str, Any]]:
        data = self._request("GET", "/monitor")
        return list(data) if isinstance(data, list) else []

    def create_monitor(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/monitor", payload)
