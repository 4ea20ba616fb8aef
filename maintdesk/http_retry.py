# maintdesk/http_retry.py
from __future__ import annotations

"""
Transport-level retry for REST API requests.

Only idempotent methods are retried; a POST is sent exactly once, since a
gateway timeout may arrive after the backend already stored the row.

The tenacity configuration depends on settings, so it must not be built at
import time (env may not be loaded yet). The decorator below builds the
tenacity policy on the first call and caches it. The decorated coroutine
takes the HTTP method as its first argument:

    from maintdesk.http_retry import API_HTTP_RETRY

    @API_HTTP_RETRY
    async def call(method, path, ...):
        ...
"""

import functools
import logging
from functools import lru_cache
from typing import Any, Awaitable, Callable, TypeVar, cast

import httpx
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential_jitter

from .settings import get_settings

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})


def _is_retryable(exc: BaseException) -> bool:
    """Which failures are worth another attempt."""
    # Network / timeouts
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError)):
        return True

    # Bad status after raise_for_status()
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or 500 <= status < 600

    return False


@lru_cache(maxsize=1)
def _get_api_retry_decorator():
    """Build and cache the configured tenacity.retry decorator."""
    s = get_settings()

    def _log_before_sleep(rs) -> None:
        exc = rs.outcome.exception()
        logger.warning(
            "HTTP retry: %r | attempt=%s/%s sleep=%.1fs",
            exc,
            rs.attempt_number,
            s.API_HTTP_RETRIES,
            rs.next_action.sleep,
        )

    return retry(
        reraise=True,
        stop=stop_after_attempt(s.API_HTTP_RETRIES),
        wait=wait_exponential_jitter(
            initial=s.API_RETRY_MIN_DELAY_S,
            max=s.API_RETRY_MAX_DELAY_S,
        ),
        retry=retry_if_exception(_is_retryable),
        before_sleep=_log_before_sleep,
    )


def reset_retry_policy() -> None:
    """Forget the cached policy (after settings changed)."""
    _get_api_retry_decorator.cache_clear()


def API_HTTP_RETRY(fn: F) -> F:
    """
    Looks like tenacity.retry, but the tenacity policy is resolved when the
    wrapped coroutine is first awaited, not when the module is imported.
    Non-idempotent methods bypass it.
    """

    @functools.wraps(fn)
    async def wrapper(method: str, *args: Any, **kwargs: Any) -> Any:
        if method.upper() not in IDEMPOTENT_METHODS:
            return await fn(method, *args, **kwargs)
        dec = _get_api_retry_decorator()
        return await dec(fn)(method, *args, **kwargs)

    return cast(F, wrapper)
