"""Turning raised API errors into display strings and short codes.

Repositories let exceptions through; managers call into this module to
build the ``err(...)`` payload:

- handle_api_error()           human-readable message (never empty)
- extract_validation_errors()  field -> message map for 422 responses
- code_from_exception()        short machine code
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ._api_result import GENERIC_ERROR, ErrorMeta, ErrorPayload, err


logger = logging.getLogger(__name__)

NETWORK_ERROR = "Network error. Please check your connection."
INVALID_RESPONSE_ERROR = "Invalid response from server"

_STATUS_MESSAGES = {
    401: "Invalid credentials",
    403: "Access forbidden",
    404: "Resource not found",
    422: "Validation error",
    429: "Too many attempts. Please try again later.",
}
_SERVER_ERROR = "Server error. Please try again later."


def _response_body(exc: httpx.HTTPStatusError) -> dict[str, Any]:
    try:
        body = exc.response.json()
    except Exception:
        return {}
    return body if isinstance(body, dict) else {}


def _flatten_errors(errors: Any) -> list[str]:
    if not isinstance(errors, dict):
        return []
    out: list[str] = []
    for messages in errors.values():
        if isinstance(messages, list):
            out.extend(str(m) for m in messages if m)
        elif messages:
            out.append(str(messages))
    return out


def handle_api_error(exc: BaseException) -> str:
    """Display string for any error raised below the manager."""
    if isinstance(exc, httpx.HTTPStatusError):
        body = _response_body(exc)

        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message

        flat = _flatten_errors(body.get("errors"))
        if flat:
            return ", ".join(flat)

        status = exc.response.status_code
        if status in _STATUS_MESSAGES:
            return _STATUS_MESSAGES[status]
        if 500 <= status <= 599:
            return _SERVER_ERROR
        return GENERIC_ERROR

    if isinstance(exc, httpx.RequestError):
        return NETWORK_ERROR

    if isinstance(exc, ValueError):
        return INVALID_RESPONSE_ERROR

    return GENERIC_ERROR


def extract_validation_errors(exc: BaseException) -> dict[str, str] | None:
    """First message per field of a 422 response, or None."""
    if not isinstance(exc, httpx.HTTPStatusError):
        return None
    if exc.response.status_code != 422:
        return None

    errors = _response_body(exc).get("errors")
    if not isinstance(errors, dict):
        return None

    out: dict[str, str] = {}
    for field, messages in errors.items():
        if isinstance(messages, list):
            first = next((str(m) for m in messages if m), "")
        else:
            first = str(messages) if messages else ""
        if first:
            out[str(field)] = first
    return out or None


def _code_from_status(status: int) -> str:
    if status == 401:
        return "unauthorized"
    if status == 403:
        return "forbidden"
    if status == 404:
        return "not_found"
    if status == 409:
        return "conflict"
    if status == 422:
        return "validation_error"
    if status == 429:
        return "rate_limited"
    if 500 <= status <= 599:
        return "server_error"
    return "api_error"


def code_from_exception(exc: BaseException) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return _code_from_status(exc.response.status_code)
    if isinstance(exc, httpx.RequestError):
        return "network_error"
    if isinstance(exc, ValueError):
        return "invalid_response"
    return "internal_error"


def error_payload(exc: BaseException, *, op: str) -> ErrorPayload:
    """Log the failure of ``op`` and build its err(...) payload."""
    meta: ErrorMeta = {}

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        logger.warning(
            "%s http error status=%s body=%s",
            op,
            status,
            (exc.response.text or "")[:500],
        )
        meta["status"] = status
        meta["retriable"] = status == 429 or 500 <= status <= 599
    elif isinstance(exc, httpx.RequestError):
        logger.warning("%s request error: %s", op, exc)
        meta["retriable"] = True
    elif isinstance(exc, ValueError):
        logger.error("%s bad response: %s", op, exc)
    else:
        logger.exception("%s unexpected error: %s", op, exc, exc_info=exc)

    return err(
        code=code_from_exception(exc),
        error=handle_api_error(exc),
        validation_errors=extract_validation_errors(exc),
        meta=meta or None,
    )
