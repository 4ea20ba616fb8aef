"""Envelope types shared by every resource and the page decoder."""

from __future__ import annotations

import math
from typing import Any, Generic, Literal, TypeVar

from typing_extensions import NotRequired, TypedDict


T = TypeVar("T")

SortDirection = Literal["asc", "desc"]

_META_INT_KEYS = ("current_page", "last_page", "per_page", "total")


PaginationMeta = TypedDict(
    "PaginationMeta",
    {
        "current_page": int,
        "last_page": int,
        "per_page": int,
        "total": int,
        "from": int | None,
        "to": int | None,
    },
)


class PaginatedResponse(TypedDict, Generic[T]):
    data: list[T]
    meta: PaginationMeta
    links: NotRequired[dict[str, Any]]


class SingleResponse(TypedDict, Generic[T]):
    data: T


class BaseFilters(TypedDict, total=False):
    page: int
    per_page: int
    search: str
    sort_by: str
    sort_direction: SortDirection


class NamedRef(TypedDict):
    """``{id, name}`` summary of a related entity."""

    id: int
    name: str


class LabeledOption(TypedDict):
    value: str
    label: str


def build_page_meta(
    current_page: int, per_page: int, total: int, **extra: Any
) -> dict[str, Any]:
    """Meta block for one page of ``total`` rows.

    Page 1 of 20 rows with per_page=8 gives
    ``{current_page: 1, last_page: 3, per_page: 8, total: 20, from: 1, to: 8}``.
    An empty result set has ``last_page == 0`` and ``from``/``to`` set to None.
    """
    if per_page < 1:
        raise ValueError(f"per_page must be >= 1, got {per_page}")
    if total < 0:
        raise ValueError(f"total must be >= 0, got {total}")

    last_page = math.ceil(total / per_page)
    if total == 0:
        first = last = None
    else:
        if not 1 <= current_page <= last_page:
            raise ValueError(f"current_page {current_page} not in [1, {last_page}]")
        first = (current_page - 1) * per_page + 1
        last = min(current_page * per_page, total)

    meta: dict[str, Any] = {
        "current_page": current_page,
        "last_page": last_page,
        "per_page": per_page,
        "total": total,
        "from": first,
        "to": last,
    }
    meta.update(extra)
    return meta


def parse_paginated(body: Any) -> PaginatedResponse[Any]:
    """Check the ``{data, meta}`` envelope; ValueError when it is malformed."""
    if not isinstance(body, dict):
        raise ValueError(f"Unexpected JSON type for a page: {type(body)}")

    data = body.get("data")
    meta = body.get("meta")
    if not isinstance(data, list):
        raise ValueError("Paginated response has no 'data' list")
    if not isinstance(meta, dict):
        raise ValueError("Paginated response has no 'meta' object")

    for key in _META_INT_KEYS:
        if not isinstance(meta.get(key), int):
            raise ValueError(f"Pagination meta field {key!r} is missing or not an int")

    if len(data) > meta["per_page"]:
        raise ValueError(
            f"Page holds {len(data)} rows but per_page is {meta['per_page']}"
        )

    return body  # type: ignore[return-value]


def parse_single(body: Any) -> Any:
    """Unwrap ``{data: ...}``; ValueError when the envelope is missing."""
    if not isinstance(body, dict) or "data" not in body:
        raise ValueError("Response has no 'data' envelope")
    return body["data"]


def parse_options(body: Any) -> list[Any]:
    """Unwrap ``{data: [...]}`` option lists."""
    data = parse_single(body)
    if not isinstance(data, list):
        raise ValueError(f"Expected an option list, got {type(data)}")
    return data
