"""Permissions: ``/api/v1/permissions``."""

from __future__ import annotations

from typing import Literal

from typing_extensions import NotRequired, TypedDict

from ._api_result import Payload
from .resource import ResourceManager, ResourceRepository
from .types import NamedRef, PaginatedResponse, SortDirection


PermissionSortField = Literal["name", "created_at", "roles_count"]


class Permission(TypedDict):
    id: int
    name: str
    guard_name: str
    roles_count: int
    created_at: str
    updated_at: NotRequired[str]


class PermissionRole(TypedDict):
    id: int
    name: str
    guard_name: str
    users_count: int
    created_at: str


class PermissionDetail(Permission):
    roles: list[PermissionRole]


class PermissionFormData(TypedDict):
    name: str


class PermissionFilters(TypedDict, total=False):
    page: int
    per_page: int
    search: str
    sort_by: PermissionSortField
    sort_direction: SortDirection


class PermissionRepository(
    ResourceRepository[Permission, PermissionDetail, PermissionFormData]
):
    name = "permissions"

    async def get_available_roles(
        self, search: str | None = None, limit: int | None = None
    ) -> list[NamedRef]:
        return await self._get_options(
            f"{self.base_path}/available-roles",
            {"search": search, "limit": limit},
        )

    async def get_roles(
        self, permission_id: int, page: int = 1, search: str | None = None
    ) -> PaginatedResponse[PermissionRole]:
        return await self._get_page(
            f"{self.detail_path(permission_id)}/roles", {"page": page, "search": search}
        )


class PermissionManager(
    ResourceManager[Permission, PermissionDetail, PermissionFormData]
):
    repository: PermissionRepository

    async def get_available_roles(
        self, search: str | None = None, limit: int | None = None
    ) -> Payload[list[NamedRef]]:
        return await self._guard(
            "get_available_roles",
            lambda: self.repository.get_available_roles(search, limit),
        )

    async def get_roles(
        self, permission_id: int, page: int = 1, search: str | None = None
    ) -> Payload[PaginatedResponse[PermissionRole]]:
        return await self._guard(
            "get_roles", lambda: self.repository.get_roles(permission_id, page, search)
        )


permission_repository = PermissionRepository()
permission_manager = PermissionManager(permission_repository)
