# maintdesk/api/_api_http.py
from __future__ import annotations

"""
Shared HTTP plumbing for the repositories.

Settings are read lazily (inside the calls), so importing a repository never
triggers get_settings().

- api_url()       full URL from API_BASE_URL and a relative path
- build_query()   query params without empty values
- build_url()     path + encoded query string
- request_json()  exactly one HTTP request, decoded JSON body
"""

import logging
from typing import Any, Mapping
from urllib.parse import urlencode

import httpx

from ..clients import get_http
from ..http_retry import API_HTTP_RETRY
from ..settings import get_settings


logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

QueryValue = str | int | float | bool | None


def api_base_url() -> str:
    """Base API URL without the trailing '/'."""
    return get_settings().API_BASE_URL.rstrip("/")


def api_timeout_s(fallback: float = 0.0) -> float:
    """Caller timeout when > 0, otherwise the configured one."""
    if fallback and fallback > 0:
        return fallback
    return float(get_settings().API_HTTP_TIMEOUT_S)


def api_url(path: str) -> str:
    """
    Full URL for a relative API path.

    Example:
        api_url("/api/v1/incidents/12")
    """
    base = api_base_url()
    if not path.startswith("/"):
        path = "/" + path
    return f"{base}{path}"


def build_query(params: Mapping[str, QueryValue] | None) -> dict[str, str]:
    """Drop None / '' values, stringify the rest (bools as 1/0)."""
    if not params:
        return {}

    query: dict[str, str] = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            query[key] = "1" if value else "0"
        else:
            query[key] = str(value)
    return query


def build_url(path: str, params: Mapping[str, QueryValue] | None = None) -> str:
    """Path with the encoded query string, or the bare path if nothing is left."""
    query = build_query(params)
    if not query:
        return path
    return f"{path}?{urlencode(query)}"


@API_HTTP_RETRY
async def request_json(
    method: str,
    path: str,
    *,
    params: Mapping[str, QueryValue] | None = None,
    json: Any = None,
) -> Any:
    """Perform one request and return the decoded JSON body (None when empty)."""
    client = get_http()
    url = api_url(build_url(path, params))
    timeout_s = api_timeout_s(0.0)

    logger.debug("%s %s", method, url)
    resp = await client.request(
        method,
        url,
        json=json,
        timeout=httpx.Timeout(timeout_s),
    )
    resp.raise_for_status()

    if resp.status_code == 204 or not resp.content:
        return None

    try:
        return resp.json()
    except Exception as e:
        raise ValueError(f"Invalid JSON from API: {e}") from e
