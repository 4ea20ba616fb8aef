import json

import pytest

from maintdesk.api.incidents import incident_manager
from maintdesk.http_retry import reset_retry_policy
from maintdesk.settings import get_settings


@pytest.mark.asyncio
async def test_list_sends_filters_as_query(api):
    api.seed_incidents(3)

    result = await incident_manager.get_all(
        {
            "page": 1,
            "search": "",
            "status": "open",
            "severity": None,
            "sort_by": "created_at",
            "sort_direction": "desc",
        }
    )

    assert result["success"] is True
    params = api.last_request().url.params
    assert params["status"] == "open"
    assert params["sort_by"] == "created_at"
    assert params["sort_direction"] == "desc"
    assert "search" not in params
    assert "severity" not in params


@pytest.mark.asyncio
async def test_list_page_meta(api):
    api.seed_incidents(20)

    result = await incident_manager.get_all({"page": 1})

    assert result["success"] is True
    page = result["data"]
    assert len(page["data"]) == 8
    assert page["meta"]["last_page"] == 3
    assert (page["meta"]["from"], page["meta"]["to"]) == (1, 8)


@pytest.mark.asyncio
async def test_create_then_get(api):
    created = await incident_manager.create(
        {"material_id": 1, "description": "Pump leaking", "severity": "high"}
    )
    assert created["success"] is True
    incident = created["data"]
    assert incident["material_name"] == "Boiler"
    assert incident["status"] == "open"

    fetched = await incident_manager.get_by_id(incident["id"])
    assert fetched["success"] is True
    assert fetched["data"]["description"] == "Pump leaking"
    assert fetched["data"]["severity"] == "high"


@pytest.mark.asyncio
async def test_update_sends_only_given_fields(api):
    api.seed_incidents(1)

    result = await incident_manager.update(1, {"status": "resolved"})

    assert result["success"] is True
    assert result["data"]["status"] == "resolved"
    assert result["data"]["description"] == "Incident 1"
    assert json.loads(api.last_request().content) == {"status": "resolved"}


@pytest.mark.asyncio
async def test_delete(api):
    api.seed_incidents(2)

    result = await incident_manager.delete(1)

    assert result == {"success": True, "data": None}
    assert list(api.incidents) == [2]


@pytest.mark.asyncio
async def test_create_validation_errors(api):
    result = await incident_manager.create({"severity": "low"})

    assert result["success"] is False
    assert result["code"] == "validation_error"
    assert result["error"] == "The given data was invalid."
    assert result["validation_errors"] == {
        "description": "The description field is required.",
        "material_id": "The material id field is required.",
    }


@pytest.mark.asyncio
async def test_missing_incident(api):
    result = await incident_manager.get_by_id(42)

    assert result["success"] is False
    assert result["code"] == "not_found"
    assert result["error"] == "Resource not found"
    assert result["meta"] == {"status": 404, "retriable": False}


@pytest.mark.asyncio
async def test_network_failure_is_a_payload(api):
    api.network_down = True

    result = await incident_manager.get_all({"page": 1})

    assert result["success"] is False
    assert result["code"] == "network_error"
    assert result["error"] == "Network error. Please check your connection."
    assert result["meta"]["retriable"] is True


@pytest.mark.asyncio
async def test_malformed_page_is_invalid_response(api):
    api.fail_paths["/api/v1/incidents"] = (200, {"data": "nope"})

    result = await incident_manager.get_all()

    assert result["success"] is False
    assert result["code"] == "invalid_response"
    assert result["error"] == "Invalid response from server"


@pytest.mark.asyncio
async def test_available_maintenances_filtered_by_material(api):
    result = await incident_manager.get_available_maintenances(material_id=1)

    assert result["success"] is True
    assert [m["id"] for m in result["data"]] == [4]
    assert api.last_request().url.params["material_id"] == "1"


@pytest.mark.asyncio
async def test_form_options_joins_all_lookups(api):
    result = await incident_manager.get_form_options()

    assert result["success"] is True
    options = result["data"]
    assert set(options) == {"materials", "severities", "statuses"}
    assert options["materials"][0]["name"] == "Boiler"
    assert {o["value"] for o in options["severities"]} == {"low", "medium", "high", "critical"}
    assert len(api.requests) == 3


@pytest.mark.asyncio
async def test_form_options_fail_when_one_lookup_fails(api):
    api.fail_paths["/api/v1/incidents/status-options"] = (403, {})

    result = await incident_manager.get_form_options()

    assert result == {"success": False, "code": "forbidden", "error": "Access forbidden"}
    assert len(api.requests) == 3


@pytest.mark.asyncio
async def test_create_is_not_repeated_after_gateway_timeout(api, monkeypatch):
    monkeypatch.setenv("API_HTTP_RETRIES", "3")
    get_settings.cache_clear()
    reset_retry_policy()

    api.fail_status.append((504, {}))
    result = await incident_manager.create({"material_id": 1, "description": "Pump"})

    assert result["success"] is False
    assert result["code"] == "server_error"
    assert result["meta"] == {"status": 504, "retriable": True}
    assert len([r for r in api.requests if r.method == "POST"]) == 1
