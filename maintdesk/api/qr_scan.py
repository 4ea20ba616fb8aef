"""QR scan lookups: what was scanned and which actions it allows.

The QR code of a material or an item encodes its id; scanning resolves it
through ``/api/v1/qr-scan/{material|item}/{id}``.
"""

from __future__ import annotations

import asyncio
from typing import Literal

from typing_extensions import TypedDict

from ._api_http import API_PREFIX, request_json
from ._api_result import Payload, ok
from .errors import error_payload
from .types import NamedRef, parse_single


ScanTarget = Literal["material", "item"]
MaterialScanAction = Literal["cleaning", "maintenance", "incident"]
ItemScanAction = Literal["entry", "exit"]

SCAN_TARGETS: tuple[str, ...] = ("material", "item")


class QrScanMaterialData(TypedDict):
    type: Literal["material"]
    id: int
    name: str
    description: str | None
    site: NamedRef | None
    zone: NamedRef | None
    available_actions: list[MaterialScanAction]


class QrScanItemData(TypedDict):
    type: Literal["item"]
    id: int
    name: str
    reference: str | None
    description: str | None
    current_stock: int
    site: NamedRef | None
    available_actions: list[ItemScanAction]


QrScanData = QrScanMaterialData | QrScanItemData


class QrScanRepository:
    async def get_material(self, material_id: int) -> QrScanMaterialData:
        body = await request_json("GET", f"{API_PREFIX}/qr-scan/material/{material_id}")
        return parse_single(body)

    async def get_item(self, item_id: int) -> QrScanItemData:
        body = await request_json("GET", f"{API_PREFIX}/qr-scan/item/{item_id}")
        return parse_single(body)


class QrScanManager:
    def __init__(self, repository: QrScanRepository):
        self.repository = repository

    async def get_material(self, material_id: int) -> Payload[QrScanMaterialData]:
        try:
            return ok(await self.repository.get_material(material_id))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            return error_payload(exc, op="qr_scan.get_material")

    async def get_item(self, item_id: int) -> Payload[QrScanItemData]:
        try:
            return ok(await self.repository.get_item(item_id))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            return error_payload(exc, op="qr_scan.get_item")

    async def scan(self, target: ScanTarget, target_id: int) -> Payload[QrScanData]:
        if target == "material":
            return await self.get_material(target_id)
        return await self.get_item(target_id)


qr_scan_repository = QrScanRepository()
qr_scan_manager = QrScanManager(qr_scan_repository)
