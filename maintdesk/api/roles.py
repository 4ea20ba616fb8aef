"""Roles: ``/api/v1/roles``."""

from __future__ import annotations

from typing import Literal

from typing_extensions import NotRequired, TypedDict

from ._api_http import API_PREFIX
from ._api_result import Payload
from .resource import ResourceManager, ResourceRepository
from .types import NamedRef, PaginatedResponse, SortDirection


RoleSortField = Literal["name", "created_at", "permissions_count", "users_count"]


class Role(TypedDict):
    id: int
    name: str
    guard_name: str
    permissions_count: int
    users_count: int
    created_at: str
    updated_at: NotRequired[str]


class RoleDetail(Role):
    permissions: list[NamedRef]


class RoleFormData(TypedDict):
    name: str
    permissions: NotRequired[list[int]]


class RoleFilters(TypedDict, total=False):
    page: int
    per_page: int
    search: str
    sort_by: RoleSortField
    sort_direction: SortDirection


class RoleUser(TypedDict):
    id: int
    first_name: str
    last_name: str
    full_name: str
    email: str
    avatar: NotRequired[str]
    site: NotRequired[NamedRef | None]


class RoleRepository(ResourceRepository[Role, RoleDetail, RoleFormData]):
    name = "roles"

    async def get_available_permissions(
        self, search: str | None = None, limit: int | None = None
    ) -> list[NamedRef]:
        return await self._get_options(
            f"{self.base_path}/available-permissions",
            {"search": search, "limit": limit},
        )

    async def get_users(
        self, role_id: int, page: int = 1, search: str | None = None
    ) -> PaginatedResponse[RoleUser]:
        return await self._get_page(
            f"{self.detail_path(role_id)}/users", {"page": page, "search": search}
        )

    async def get_available_sites(self, search: str | None = None) -> list[NamedRef]:
        return await self._get_options(
            f"{API_PREFIX}/users/available-sites", {"search": search}
        )


class RoleManager(ResourceManager[Role, RoleDetail, RoleFormData]):
    repository: RoleRepository

    async def get_available_permissions(
        self, search: str | None = None, limit: int | None = None
    ) -> Payload[list[NamedRef]]:
        return await self._guard(
            "get_available_permissions",
            lambda: self.repository.get_available_permissions(search, limit),
        )

    async def get_users(
        self, role_id: int, page: int = 1, search: str | None = None
    ) -> Payload[PaginatedResponse[RoleUser]]:
        return await self._guard(
            "get_users", lambda: self.repository.get_users(role_id, page, search)
        )

    async def get_available_sites(self, search: str | None = None) -> Payload[list[NamedRef]]:
        return await self._guard(
            "get_available_sites", lambda: self.repository.get_available_sites(search)
        )


role_repository = RoleRepository()
role_manager = RoleManager(role_repository)
