import json
import os
import re
from typing import Any

import httpx
import pytest
import pytest_asyncio

os.environ.setdefault("ENV", "test")
os.environ["API_BASE_URL"] = "http://api.test"
os.environ["API_HTTP_RETRIES"] = "1"
os.environ["API_RETRY_MIN_DELAY_S"] = "0"
os.environ["API_RETRY_MAX_DELAY_S"] = "0"
os.environ["SEARCH_DEBOUNCE_MS"] = "30"

from maintdesk.api.types import build_page_meta  # noqa: E402
from maintdesk.clients import close_clients, init_clients  # noqa: E402
from maintdesk.http_retry import reset_retry_policy  # noqa: E402
from maintdesk.settings import get_settings  # noqa: E402


SEVERITY_LABELS = {"low": "Low", "medium": "Medium", "high": "High", "critical": "Critical"}
STATUS_LABELS = {
    "open": "Open",
    "in_progress": "In progress",
    "resolved": "Resolved",
    "closed": "Closed",
}
MATERIALS = [{"id": 1, "name": "Boiler"}, {"id": 2, "name": "Conveyor"}]


class FakeApi:
    """In-memory REST backend served through httpx.MockTransport."""

    def __init__(self, per_page: int = 8):
        self.per_page = per_page
        self.requests: list[httpx.Request] = []
        self.incidents: dict[int, dict[str, Any]] = {}
        self.next_id = 1
        self.network_down = False
        self.fail_paths: dict[str, tuple[int, Any]] = {}
        self.fail_status: list[tuple[int, Any]] = []

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def seed_incidents(self, count: int) -> None:
        for i in range(count):
            self._store_incident(
                {
                    "material_id": MATERIALS[i % 2]["id"],
                    "description": f"Incident {i + 1}",
                    "severity": ("low", "high")[i % 2],
                    "status": "open",
                }
            )

    def _store_incident(self, data: dict[str, Any]) -> dict[str, Any]:
        incident_id = self.next_id
        self.next_id += 1
        material = next((m for m in MATERIALS if m["id"] == data.get("material_id")), None)
        severity = data.get("severity") or "medium"
        status = data.get("status") or "open"
        incident = {
            "id": incident_id,
            "description": data["description"],
            "status": status,
            "status_label": STATUS_LABELS[status],
            "severity": severity,
            "severity_label": SEVERITY_LABELS[severity],
            "material_id": data.get("material_id"),
            "material_name": material["name"] if material else None,
            "maintenance_id": data.get("maintenance_id"),
            "reported_by_id": 7,
            "reported_by_name": "Jane Doe",
            "started_at": data.get("started_at"),
            "resolved_at": data.get("resolved_at"),
            "created_at": f"2026-01-{incident_id:02d}T08:00:00Z",
            "site_id": 3,
            "edited_by_id": None,
        }
        self.incidents[incident_id] = incident
        return incident

    def _page(self, rows: list[Any], page: int, **extra: Any) -> httpx.Response:
        total = len(rows)
        start = (page - 1) * self.per_page
        meta = build_page_meta(page if total else 1, self.per_page, total, **extra)
        return httpx.Response(
            200, json={"data": rows[start:start + self.per_page], "meta": meta}
        )

    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    # ------------------------------------------------------------------
    # transport
    # ------------------------------------------------------------------
    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.network_down:
            raise httpx.ConnectError("connection refused", request=request)

        if self.fail_status:
            status, body = self.fail_status.pop(0)
            return httpx.Response(status, json=body)

        path = request.url.path
        if path in self.fail_paths:
            status, body = self.fail_paths[path]
            return httpx.Response(status, json=body)

        params = request.url.params
        method = request.method

        if path == "/api/v1/incidents" and method == "GET":
            rows = list(self.incidents.values())
            if params.get("status"):
                rows = [r for r in rows if r["status"] == params["status"]]
            if params.get("severity"):
                rows = [r for r in rows if r["severity"] == params["severity"]]
            if params.get("material_id"):
                rows = [r for r in rows if str(r["material_id"]) == params["material_id"]]
            if params.get("search"):
                rows = [r for r in rows if params["search"].lower() in r["description"].lower()]
            if params.get("sort_by"):
                rows.sort(
                    key=lambda r: r[params["sort_by"]] or "",
                    reverse=params.get("sort_direction") == "desc",
                )
            return self._page(rows, int(params.get("page", 1)))

        if path == "/api/v1/incidents" and method == "POST":
            body = _json(request)
            errors = {}
            if not body.get("description"):
                errors["description"] = ["The description field is required."]
            if not body.get("material_id"):
                errors["material_id"] = ["The material id field is required."]
            if errors:
                return httpx.Response(
                    422, json={"message": "The given data was invalid.", "errors": errors}
                )
            return httpx.Response(201, json={"data": self._store_incident(body)})

        if path == "/api/v1/incidents/available-materials":
            return httpx.Response(200, json={"data": MATERIALS})
        if path == "/api/v1/incidents/available-maintenances":
            rows = [{"id": 4, "description": "Yearly check", "material_id": 1}]
            if params.get("material_id"):
                rows = [r for r in rows if str(r["material_id"]) == params["material_id"]]
            return httpx.Response(200, json={"data": rows})
        if path == "/api/v1/incidents/severity-options":
            return httpx.Response(
                200, json={"data": [{"value": k, "label": v} for k, v in SEVERITY_LABELS.items()]}
            )
        if path == "/api/v1/incidents/status-options":
            return httpx.Response(
                200, json={"data": [{"value": k, "label": v} for k, v in STATUS_LABELS.items()]}
            )

        m = re.fullmatch(r"/api/v1/incidents/(\d+)", path)
        if m:
            incident = self.incidents.get(int(m.group(1)))
            if incident is None:
                return httpx.Response(404, json={})
            if method == "GET":
                return httpx.Response(200, json={"data": incident})
            if method == "PUT":
                incident.update(_json(request))
                return httpx.Response(200, json={"data": incident})
            if method == "DELETE":
                del self.incidents[incident["id"]]
                return httpx.Response(204)

        m = re.fullmatch(r"/api/v1/maintenances/(\d+)/item-movements", path)
        if m:
            rows = [
                {
                    "id": i,
                    "item_id": 10 + i,
                    "item_name": f"Part {i}",
                    "item_reference": None,
                    "quantity": 2,
                    "unit_price": 12.5,
                    "total_price": 25.0,
                    "created_by_name": "Jane Doe",
                    "created_at": "2026-02-01T10:00:00Z",
                }
                for i in range(1, 4)
            ]
            return self._page(rows, int(params.get("page", 1)), total_cost=75.0)

        m = re.fullmatch(r"/api/v1/maintenances/(\d+)/incidents", path)
        if m:
            return self._page([], int(params.get("page", 1)))

        if path == "/api/v1/maintenances" and method == "GET":
            return self._page([], int(params.get("page", 1)))
        if path.startswith("/api/v1/maintenances/available-"):
            return httpx.Response(200, json={"data": [{"id": 1, "name": "Acme"}]})
        if path.startswith("/api/v1/maintenances/") and path.endswith("-options"):
            return httpx.Response(200, json={"data": [{"value": "internal", "label": "Internal"}]})

        if path == "/api/v1/roles" and method == "GET":
            roles = [
                {"id": 1, "name": "admin", "users_count": 1, "permissions_count": 40},
                {"id": 2, "name": "technician", "users_count": 0, "permissions_count": 6},
            ]
            if params.get("search"):
                roles = [r for r in roles if params["search"] in r["name"]]
            return self._page(roles, int(params.get("page", 1)))

        m = re.fullmatch(r"/api/v1/roles/(\d+)/users", path)
        if m:
            users = [
                {
                    "id": 1,
                    "first_name": "Jane",
                    "last_name": "Doe",
                    "full_name": "Jane Doe",
                    "email": "jane@example.com",
                    "site": {"id": 3, "name": "Plant A"},
                }
            ]
            return self._page(users, int(params.get("page", 1)))
        if path == "/api/v1/roles/available-permissions":
            return httpx.Response(200, json={"data": [{"id": 1, "name": "incident.view"}]})
        if path == "/api/v1/users/available-sites":
            return httpx.Response(200, json={"data": [{"id": 3, "name": "Plant A"}]})

        m = re.fullmatch(r"/api/v1/permissions/(\d+)/roles", path)
        if m:
            return self._page([], int(params.get("page", 1)))
        if path == "/api/v1/permissions/available-roles":
            return httpx.Response(200, json={"data": [{"id": 2, "name": "technician"}]})

        m = re.fullmatch(r"/api/v1/qr-scan/(material|item)/(\d+)", path)
        if m:
            kind, target_id = m.group(1), int(m.group(2))
            if kind == "material":
                data = {
                    "type": "material",
                    "id": target_id,
                    "name": "Boiler",
                    "description": None,
                    "site": {"id": 3, "name": "Plant A"},
                    "zone": {"id": 5, "name": "Basement"},
                    "available_actions": ["cleaning", "maintenance", "incident"],
                }
            else:
                data = {
                    "type": "item",
                    "id": target_id,
                    "name": "Filter",
                    "reference": "F-100",
                    "description": None,
                    "current_stock": 12,
                    "site": None,
                    "available_actions": ["entry", "exit"],
                }
            return httpx.Response(200, json={"data": data})

        if path == "/api/v1/auth/user":
            return httpx.Response(
                200,
                json={
                    "data": {
                        "id": 7,
                        "username": "jdoe",
                        "first_name": "Jane",
                        "last_name": "Doe",
                        "full_name": "Jane Doe",
                        "email": "jane@example.com",
                        "locale": "en",
                        "current_site_id": 1,
                        "roles": ["admin"],
                        "permissions": ["company.create", "incident.view"],
                        "sites": [
                            {"id": 1, "name": "HQ", "is_headquarters": True},
                            {"id": 3, "name": "Plant A", "is_headquarters": False},
                        ],
                    }
                },
            )

        return httpx.Response(404, json={"message": f"No route for {method} {path}"})


def _json(request: httpx.Request) -> dict[str, Any]:
    return json.loads(request.content or b"{}")


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    reset_retry_policy()
    yield
    get_settings.cache_clear()
    reset_retry_policy()


@pytest_asyncio.fixture
async def api():
    fake = FakeApi()
    await init_clients(transport=httpx.MockTransport(fake))
    yield fake
    await close_clients()
