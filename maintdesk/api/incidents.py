"""Incidents: ``/api/v1/incidents``.

Lookups used by the incident form:
- available-materials
- available-maintenances?material_id=
- severity-options / status-options
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
from .types import LabeledOption, NamedRef, SortDirection


IncidentStatus = Literal["open", "in_progress", "resolved", "closed"]
IncidentSeverity = Literal["low", "medium", "high", "critical"]
IncidentSortField = Literal["created_at", "started_at", "resolved_at", "severity", "status"]


class IncidentMaterial(TypedDict):
    id: int
    name: str
    zone: NotRequired[NamedRef]


class IncidentMaintenance(TypedDict):
    id: int
    description: str
    status: NotRequired[str]


class IncidentReporter(TypedDict):
    id: int
    full_name: str
    email: NotRequired[str]


class Incident(TypedDict):
    id: int
    description: str
    status: IncidentStatus
    status_label: str
    severity: IncidentSeverity
    severity_label: str
    material_id: int | None
    material_name: str | None
    material: NotRequired[IncidentMaterial]
    maintenance_id: int | None
    maintenance: NotRequired[IncidentMaintenance]
    reported_by_id: int | None
    reported_by_name: str | None
    reporter: NotRequired[IncidentReporter]
    started_at: str | None
    resolved_at: str | None
    created_at: str
    updated_at: NotRequired[str]


class IncidentDetail(Incident):
    site_id: int
    site: NotRequired[NamedRef]
    edited_by_id: int | None
    editor: NotRequired[IncidentReporter]


class IncidentFormData(TypedDict):
    material_id: int
    description: str
    maintenance_id: NotRequired[int | None]
    severity: NotRequired[IncidentSeverity]
    status: NotRequired[IncidentStatus]
    started_at: NotRequired[str | None]
    resolved_at: NotRequired[str | None]


class IncidentFilters(TypedDict, total=False):
    page: int
    per_page: int
    search: str
    material_id: int
    status: IncidentStatus
    severity: IncidentSeverity
    sort_by: IncidentSortField
    sort_direction: SortDirection


class AvailableMaintenance(TypedDict):
    id: int
    description: str
    material_id: int
    material_name: NotRequired[str | None]


INCIDENT_FILTER_KEYS = BASE_FILTER_KEYS + ("material_id", "status", "severity")


class IncidentRepository(ResourceRepository[Incident, IncidentDetail, IncidentFormData]):
    name = "incidents"
    filter_keys = INCIDENT_FILTER_KEYS

    async def get_available_materials(self) -> list[NamedRef]:
        return await self._get_options(f"{self.base_path}/available-materials")

    async def get_available_maintenances(
        self, material_id: int | None = None
    ) -> list[AvailableMaintenance]:
        return await self._get_options(
            f"{self.base_path}/available-maintenances",
            {"material_id": material_id},
        )

    async def get_severity_options(self) -> list[LabeledOption]:
        return await self._get_options(f"{self.base_path}/severity-options")

    async def get_status_options(self) -> list[LabeledOption]:
        return await self._get_options(f"{self.base_path}/status-options")


class IncidentManager(ResourceManager[Incident, IncidentDetail, IncidentFormData]):
    repository: IncidentRepository

    async def get_available_materials(self) -> Payload[list[NamedRef]]:
        return await self._guard(
            "get_available_materials", self.repository.get_available_materials
        )

    async def get_available_maintenances(
        self, material_id: int | None = None
    ) -> Payload[list[AvailableMaintenance]]:
        return await self._guard(
            "get_available_maintenances",
            lambda: self.repository.get_available_maintenances(material_id),
        )

    async def get_severity_options(self) -> Payload[list[LabeledOption]]:
        return await self._guard("get_severity_options", self.repository.get_severity_options)

    async def get_status_options(self) -> Payload[list[LabeledOption]]:
        return await self._guard("get_status_options", self.repository.get_status_options)

    async def get_form_options(self) -> Payload[dict]:
        """Materials, severities and statuses, loaded together."""
        results = await gather_payloads(
            materials=self.get_available_materials(),
            severities=self.get_severity_options(),
            statuses=self.get_status_options(),
        )
        return combine_payloads(results)


incident_repository = IncidentRepository()
incident_manager = IncidentManager(incident_repository)
