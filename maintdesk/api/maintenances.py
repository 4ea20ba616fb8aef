"""Maintenances: ``/api/v1/maintenances``.

Besides CRUD a maintenance exposes two nested paginated lists:
- {id}/incidents        linked incidents
- {id}/item-movements   spare parts used; meta carries ``total_cost``
"""

from __future__ import annotations

from typing import Literal

from typing_extensions import NotRequired, TypedDict

from ._api_result import Payload
from .resource import (
    BASE_FILTER_KEYS,
    ResourceManager,
    ResourceRepository,
    combine_payloads,
    gather_payloads,
)
from .types import LabeledOption, NamedRef, PaginatedResponse, SortDirection


MaintenanceStatus = Literal["planned", "in_progress", "completed", "canceled"]
MaintenanceType = Literal["corrective", "preventive", "inspection", "improvement"]
MaintenanceRealization = Literal["internal", "external", "both"]
MaintenanceSortField = Literal["created_at", "started_at", "resolved_at", "status", "type"]


class MaintenanceMaterial(TypedDict):
    id: int
    name: str
    zone: NotRequired[NamedRef]


class MaintenanceIncident(TypedDict):
    id: int
    description: str
    status: str
    status_label: NotRequired[str]
    severity: str
    severity_label: NotRequired[str]
    started_at: str | None
    resolved_at: str | None


class MaintenanceOperator(TypedDict):
    id: int
    full_name: str
    email: NotRequired[str]


class MaintenanceItemMovement(TypedDict):
    id: int
    item_id: int
    item_name: str | None
    item_reference: str | None
    quantity: int
    unit_price: float
    total_price: float
    created_by_name: str | None
    created_at: str


class Maintenance(TypedDict):
    id: int
    description: str
    reason: str
    status: MaintenanceStatus
    status_label: str
    type: MaintenanceType
    type_label: str
    realization: MaintenanceRealization
    realization_label: str
    material_id: int | None
    material_name: str | None
    material: NotRequired[MaintenanceMaterial]
    started_at: str | None
    resolved_at: str | None
    incident_count: int
    operator_count: int
    company_count: int
    item_movement_count: int
    created_at: str
    updated_at: NotRequired[str]


class MaintenanceDetail(Maintenance):
    site_id: int
    site: NotRequired[NamedRef]
    incidents: NotRequired[list[MaintenanceIncident]]
    operators: NotRequired[list[MaintenanceOperator]]
    companies: NotRequired[list[NamedRef]]
    itemMovements: NotRequired[list[MaintenanceItemMovement]]
    created_by_id: int | None
    created_by_name: str | None
    edited_by_id: int | None


class ItemMovementLine(TypedDict):
    item_id: int
    quantity: int


class MaintenanceFormData(TypedDict):
    description: str
    reason: str
    type: MaintenanceType
    realization: MaintenanceRealization
    material_id: NotRequired[int | None]
    status: NotRequired[MaintenanceStatus]
    started_at: NotRequired[str | None]
    resolved_at: NotRequired[str | None]
    incident_ids: NotRequired[list[int]]
    operator_ids: NotRequired[list[int]]
    company_ids: NotRequired[list[int]]
    item_movements: NotRequired[list[ItemMovementLine]]


class MaintenanceFilters(TypedDict, total=False):
    page: int
    per_page: int
    search: str
    material_id: int
    status: MaintenanceStatus
    type: MaintenanceType
    realization: MaintenanceRealization
    sort_by: MaintenanceSortField
    sort_direction: SortDirection


class AvailableIncident(TypedDict):
    id: int
    description: str
    severity: str
    severity_label: NotRequired[str]
    material_id: int | None
    material_name: str | None


class AvailableItem(TypedDict):
    id: int
    name: str
    reference: str | None
    current_stock: int
    current_price: float


MAINTENANCE_FILTER_KEYS = BASE_FILTER_KEYS + ("material_id", "status", "type", "realization")


class MaintenanceRepository(
    ResourceRepository[Maintenance, MaintenanceDetail, MaintenanceFormData]
):
    name = "maintenances"
    filter_keys = MAINTENANCE_FILTER_KEYS

    async def get_incidents(
        self, maintenance_id: int, page: int = 1
    ) -> PaginatedResponse[MaintenanceIncident]:
        return await self._get_page(
            f"{self.detail_path(maintenance_id)}/incidents", {"page": page}
        )

    async def get_item_movements(
        self, maintenance_id: int, page: int = 1
    ) -> PaginatedResponse[MaintenanceItemMovement]:
        return await self._get_page(
            f"{self.detail_path(maintenance_id)}/item-movements", {"page": page}
        )

    async def get_available_materials(self, search: str | None = None) -> list[NamedRef]:
        return await self._get_options(
            f"{self.base_path}/available-materials", {"search": search}
        )

    async def get_available_incidents(
        self, search: str | None = None
    ) -> list[AvailableIncident]:
        return await self._get_options(
            f"{self.base_path}/available-incidents", {"search": search}
        )

    async def get_available_operators(
        self, search: str | None = None
    ) -> list[MaintenanceOperator]:
        return await self._get_options(
            f"{self.base_path}/available-operators", {"search": search}
        )

    async def get_available_companies(self, search: str | None = None) -> list[NamedRef]:
        return await self._get_options(
            f"{self.base_path}/available-companies", {"search": search}
        )

    async def get_available_items(self, search: str | None = None) -> list[AvailableItem]:
        return await self._get_options(
            f"{self.base_path}/available-items", {"search": search}
        )

    async def get_type_options(self) -> list[LabeledOption]:
        return await self._get_options(f"{self.base_path}/type-options")

    async def get_status_options(self) -> list[LabeledOption]:
        return await self._get_options(f"{self.base_path}/status-options")

    async def get_realization_options(self) -> list[LabeledOption]:
        return await self._get_options(f"{self.base_path}/realization-options")


class MaintenanceManager(
    ResourceManager[Maintenance, MaintenanceDetail, MaintenanceFormData]
):
    repository: MaintenanceRepository

    async def get_incidents(
        self, maintenance_id: int, page: int = 1
    ) -> Payload[PaginatedResponse[MaintenanceIncident]]:
        return await self._guard(
            "get_incidents", lambda: self.repository.get_incidents(maintenance_id, page)
        )

    async def get_item_movements(
        self, maintenance_id: int, page: int = 1
    ) -> Payload[PaginatedResponse[MaintenanceItemMovement]]:
        return await self._guard(
            "get_item_movements",
            lambda: self.repository.get_item_movements(maintenance_id, page),
        )

    async def get_available_materials(
        self, search: str | None = None
    ) -> Payload[list[NamedRef]]:
        return await self._guard(
            "get_available_materials", lambda: self.repository.get_available_materials(search)
        )

    async def get_available_incidents(
        self, search: str | None = None
    ) -> Payload[list[AvailableIncident]]:
        return await self._guard(
            "get_available_incidents", lambda: self.repository.get_available_incidents(search)
        )

    async def get_available_operators(
        self, search: str | None = None
    ) -> Payload[list[MaintenanceOperator]]:
        return await self._guard(
            "get_available_operators", lambda: self.repository.get_available_operators(search)
        )

    async def get_available_companies(
        self, search: str | None = None
    ) -> Payload[list[NamedRef]]:
        return await self._guard(
            "get_available_companies", lambda: self.repository.get_available_companies(search)
        )

    async def get_available_items(
        self, search: str | None = None
    ) -> Payload[list[AvailableItem]]:
        return await self._guard(
            "get_available_items", lambda: self.repository.get_available_items(search)
        )

    async def get_type_options(self) -> Payload[list[LabeledOption]]:
        return await self._guard("get_type_options", self.repository.get_type_options)

    async def get_status_options(self) -> Payload[list[LabeledOption]]:
        return await self._guard("get_status_options", self.repository.get_status_options)

    async def get_realization_options(self) -> Payload[list[LabeledOption]]:
        return await self._guard(
            "get_realization_options", self.repository.get_realization_options
        )

    async def get_form_options(self) -> Payload[dict]:
        """Type, status and realization enumerations, loaded together."""
        results = await gather_payloads(
            types=self.get_type_options(),
            statuses=self.get_status_options(),
            realizations=self.get_realization_options(),
        )
        return combine_payloads(results)


maintenance_repository = MaintenanceRepository()
maintenance_manager = MaintenanceManager(maintenance_repository)
