"""Process-wide HTTP client for the maintenance REST API.

One ``httpx.AsyncClient`` is created at startup and reused by every
repository call, so keep-alive connections are shared and the socket pool is
closed exactly once.

Usage:
1) On startup:
      await init_clients()

2) Anywhere in the project:
      client = get_http()
      resp = await client.get(...)

3) On shutdown:
      await close_clients()
"""

import logging

import httpx

from .settings import get_settings


logger = logging.getLogger(__name__)

_http: httpx.AsyncClient | None = None


def _default_headers() -> dict[str, str]:
    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "X-Requested-With": "XMLHttpRequest",
    }
    token = get_settings().API_TOKEN
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


async def init_clients(transport: httpx.AsyncBaseTransport | None = None) -> None:
    """Initialize the shared HTTP client.

    ``transport`` replaces the network transport (``httpx.MockTransport`` in
    tests).
    """
    global _http

    if _http is not None:
        logger.debug("HTTP client already initialized")
        return

    timeout = httpx.Timeout(connect=3.0, read=10.0, write=10.0, pool=3.0)
    limits = httpx.Limits(max_connections=100, max_keepalive_connections=20)

    _http = httpx.AsyncClient(
        timeout=timeout,
        limits=limits,
        headers=_default_headers(),
        transport=transport,
    )
    logger.info("HTTP client initialized")


def get_http() -> httpx.AsyncClient:
    """Return the shared HTTP client."""
    if _http is None:
        logger.error("HTTP client requested before initialization")
        raise RuntimeError(
            "HTTP client is not initialized. "
            "Call init_clients() on startup (e.g. in main.py)."
        )
    return _http


async def close_clients() -> None:
    """Close the shared HTTP client."""
    global _http

    if _http is None:
        logger.debug("HTTP client already closed")
        return

    await _http.aclose()
    _http = None
    logger.info("HTTP client closed")
