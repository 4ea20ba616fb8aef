# _api_result.py
# ============================================================================
# Uniform result format of every manager operation
#
# SUCCESS:
#   {"success": True, "data": <T>}
#
# FAILURE:
#   {
#     "success": False,
#     "code": "<short machine code>",
#     "error": "<human-readable message>",
#     "validation_errors": {field: message}   # optional, 422 only
#     "meta": { ... }                         # optional (status, retriable)
#   }
#
# Rules:
# - error is ALWAYS a non-empty str
# - validation_errors/meta only appear on failures
# - never build these dicts by hand: use ok()/err()
# ============================================================================

from __future__ import annotations

from typing import Any, Generic, Literal, NotRequired, TypeGuard, TypeVar

from typing_extensions import TypedDict


T = TypeVar("T")

GENERIC_ERROR = "An unexpected error occurred"


class ErrorMeta(TypedDict, total=False):
    retriable: bool
    status: int


class ErrorPayload(TypedDict):
    success: Literal[False]
    code: str
    error: str
    validation_errors: NotRequired[dict[str, str]]
    meta: NotRequired[ErrorMeta]


class OkPayload(TypedDict, Generic[T]):
    success: Literal[True]
    data: T


Payload = ErrorPayload | OkPayload[T]


def ok(data: T) -> OkPayload[T]:
    return {"success": True, "data": data}


def err(
    *,
    code: str,
    error: str,
    validation_errors: dict[str, str] | None = None,
    meta: ErrorMeta | None = None,
) -> ErrorPayload:
    out: ErrorPayload = {"success": False, "code": code, "error": error or GENERIC_ERROR}
    if validation_errors:
        out["validation_errors"] = validation_errors
    if meta:
        out["meta"] = meta
    return out


def is_ok(payload: Payload[Any]) -> TypeGuard[OkPayload[Any]]:
    return payload.get("success") is True
