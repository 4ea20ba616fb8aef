"""Generic repository/manager pair shared by every REST resource.

Repository: one logical operation -> exactly one HTTP request. No retries of
its own, no error translation; exceptions go up as raised.

Manager: wraps each repository call and returns the uniform contract:
- ok(data)                          the call went through
- err(code, error[, validation])    anything failed on the way

A manager never raises to its caller (CancelledError excepted, it is needed
for a clean shutdown) and keeps no state between calls.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Generic, Mapping, TypeVar

from ._api_http import API_PREFIX, QueryValue, request_json
from ._api_result import Payload, err, ok
from .errors import error_payload
from .types import (
    PaginatedResponse,
    SingleResponse,
    parse_options,
    parse_paginated,
    parse_single,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")
EntityT = TypeVar("EntityT")
DetailT = TypeVar("DetailT")
FormT = TypeVar("FormT")

BASE_FILTER_KEYS: tuple[str, ...] = (
    "page",
    "per_page",
    "search",
    "sort_by",
    "sort_direction",
)


def list_params(
    filters: Mapping[str, Any] | None, allowed: tuple[str, ...]
) -> dict[str, QueryValue]:
    """Query params for a list call.

    Only ``allowed`` keys survive, and ``sort_direction`` is dropped unless
    ``sort_by`` is set.
    """
    if not filters:
        return {}

    params: dict[str, QueryValue] = {
        key: filters.get(key) for key in allowed if key in filters
    }
    if not params.get("sort_by"):
        params.pop("sort_by", None)
        params.pop("sort_direction", None)
    return params


class ResourceRepository(Generic[EntityT, DetailT, FormT]):
    """Raw REST calls of one resource (``/api/v1/<name>``)."""

    name: str = ""
    filter_keys: tuple[str, ...] = BASE_FILTER_KEYS

    def __init__(self, name: str | None = None, filter_keys: tuple[str, ...] | None = None):
        if name is not None:
            self.name = name
        if filter_keys is not None:
            self.filter_keys = filter_keys
        if not self.name:
            raise ValueError("resource name is required")

    @property
    def base_path(self) -> str:
        return f"{API_PREFIX}/{self.name}"

    def detail_path(self, resource_id: int) -> str:
        return f"{self.base_path}/{resource_id}"

    async def get_all(
        self, filters: Mapping[str, Any] | None = None
    ) -> PaginatedResponse[EntityT]:
        body = await request_json(
            "GET", self.base_path, params=list_params(filters, self.filter_keys)
        )
        return parse_paginated(body)

    async def get_by_id(self, resource_id: int) -> SingleResponse[DetailT]:
        body = await request_json("GET", self.detail_path(resource_id))
        return {"data": parse_single(body)}

    async def create(self, data: FormT) -> SingleResponse[DetailT]:
        body = await request_json("POST", self.base_path, json=data)
        return {"data": parse_single(body)}

    async def update(
        self, resource_id: int, data: Mapping[str, Any]
    ) -> SingleResponse[DetailT]:
        # partial patch: only the keys the caller supplied are sent
        body = await request_json("PUT", self.detail_path(resource_id), json=dict(data))
        return {"data": parse_single(body)}

    async def delete(self, resource_id: int) -> None:
        await request_json("DELETE", self.detail_path(resource_id))

    async def _get_options(
        self, path: str, params: Mapping[str, QueryValue] | None = None
    ) -> list[Any]:
        body = await request_json("GET", path, params=params)
        return parse_options(body)

    async def _get_page(
        self, path: str, params: Mapping[str, QueryValue] | None = None
    ) -> PaginatedResponse[Any]:
        body = await request_json("GET", path, params=params)
        return parse_paginated(body)


class ResourceManager(Generic[EntityT, DetailT, FormT]):
    """Non-raising facade over a ResourceRepository."""

    def __init__(self, repository: ResourceRepository[EntityT, DetailT, FormT]):
        self.repository = repository

    async def _guard(self, op: str, call: Callable[[], Awaitable[T]]) -> Payload[T]:
        try:
            return ok(await call())
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            return error_payload(exc, op=f"{self.repository.name}.{op}")

    async def get_all(
        self, filters: Mapping[str, Any] | None = None
    ) -> Payload[PaginatedResponse[EntityT]]:
        return await self._guard("get_all", lambda: self.repository.get_all(filters))

    async def get_by_id(self, resource_id: int) -> Payload[DetailT]:
        async def call() -> DetailT:
            return (await self.repository.get_by_id(resource_id))["data"]

        return await self._guard("get_by_id", call)

    async def create(self, data: FormT) -> Payload[DetailT]:
        async def call() -> DetailT:
            return (await self.repository.create(data))["data"]

        return await self._guard("create", call)

    async def update(self, resource_id: int, data: Mapping[str, Any]) -> Payload[DetailT]:
        async def call() -> DetailT:
            return (await self.repository.update(resource_id, data))["data"]

        return await self._guard("update", call)

    async def delete(self, resource_id: int) -> Payload[None]:
        return await self._guard("delete", lambda: self.repository.delete(resource_id))


async def gather_payloads(**calls: Awaitable[Payload[Any]]) -> dict[str, Payload[Any]]:
    """Await independent manager calls together and return every result.

    Join semantics: nothing is returned until all of them completed.
    """
    names = list(calls)
    results = await asyncio.gather(*calls.values())
    return dict(zip(names, results))


def combine_payloads(results: Mapping[str, Payload[Any]]) -> Payload[dict[str, Any]]:
    """ok({name: data}) when every call succeeded, else the first failure."""
    data: dict[str, Any] = {}
    for name, result in results.items():
        if result["success"] is not True:
            logger.info("option lookup %s failed: %s", name, result["error"])
            return err(code=result["code"], error=result["error"])
        data[name] = result["data"]
    return ok(data)
