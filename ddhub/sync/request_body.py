"""
Read sync request bodies: Datadog credentials and inline payloads.

Source+target requests carry ``sourceApiKey`` / ``targetApiKey`` style
fields; single-account requests carry plain ``apiKey`` / ``appKey``.
Either way the endpoint is ``...ApiUrl`` or a ``...Region`` code.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ddhub.datadog.client import DatadogClient, resolve_api_url


def _field(prefix: str, name: str) -> str:
    # ("source", "apiKey") -> "sourceApiKey"; ("", "apiKey") -> "apiKey"
    if not prefix:
        return name
    return f"{prefix}{name[0].upper()}{name[1:]}"


def optional_string(body: Dict[str, Any], name: str) -> Optional[str]:
    """
    Raises:
        ValueError: ``name`` is present but not a string
    """
    value = body.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    return value


def client_from_body(body: Dict[str, Any], prefix: str = "") -> DatadogClient:
    """
    Raises:
        ValueError: keys missing or the endpoint cannot be resolved
    """
    api_key = optional_string(body, _field(prefix, "apiKey"))
    app_key = optional_string(body, _field(prefix, "appKey"))
    if not api_key or not app_key:
        raise ValueError(
            f"{_field(prefix, 'apiKey')} and {_field(prefix, 'appKey')} are required"
        )

    api_url = resolve_api_url(
        api_url=optional_string(body, _field(prefix, "apiUrl")),
        region=optional_string(body, _field(prefix, "region")),
    )
    return DatadogClient(api_key=api_key, app_key=app_key, api_url=api_url)


def is_source_target_request(body: Dict[str, Any]) -> bool:
    return bool(body.get("sourceApiKey") or body.get("sourceAppKey"))


def payloads_from_body(
    body: Dict[str, Any], single_field: str, list_field: str
) -> Optional[List[Any]]:
    """
    Inline payloads of a single-account request: ``single_field`` holds one
    payload, ``list_field`` a list of them. None when neither is present.

    Raises:
        ValueError: ``list_field`` is present but not a list
    """
    single = body.get(single_field)
    if single:
        return [single]

    if list_field in body:
        many = body[list_field]
        if not isinstance(many, list):
            raise ValueError(f"{list_field} must be a list")
        return many

    return None
