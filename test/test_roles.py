import pytest

from maintdesk.api.permissions import permission_manager
from maintdesk.api.qr_scan import qr_scan_manager
from maintdesk.api.roles import role_manager


@pytest.mark.asyncio
async def test_roles_list_and_search(api):
    result = await role_manager.get_all({"page": 1, "search": "tech"})

    assert result["success"] is True
    assert [r["name"] for r in result["data"]["data"]] == ["technician"]


@pytest.mark.asyncio
async def test_role_users(api):
    result = await role_manager.get_users(1, page=1, search="jane")

    assert result["success"] is True
    assert result["data"]["data"][0]["site"] == {"id": 3, "name": "Plant A"}
    params = api.last_request().url.params
    assert params["page"] == "1"
    assert params["search"] == "jane"


@pytest.mark.asyncio
async def test_available_permissions_and_sites(api):
    perms = await role_manager.get_available_permissions(limit=50)
    assert perms["success"] is True
    assert api.last_request().url.params["limit"] == "50"

    sites = await role_manager.get_available_sites()
    assert sites == {"success": True, "data": [{"id": 3, "name": "Plant A"}]}
    assert api.last_request().url.path == "/api/v1/users/available-sites"


@pytest.mark.asyncio
async def test_permission_roles(api):
    page = await permission_manager.get_roles(9)
    assert page["success"] is True
    assert api.last_request().url.path == "/api/v1/permissions/9/roles"

    roles = await permission_manager.get_available_roles(search="tech")
    assert roles["data"] == [{"id": 2, "name": "technician"}]


@pytest.mark.asyncio
async def test_qr_scan_targets(api):
    material = await qr_scan_manager.scan("material", 12)
    assert material["success"] is True
    assert material["data"]["type"] == "material"
    assert material["data"]["available_actions"] == ["cleaning", "maintenance", "incident"]

    item = await qr_scan_manager.scan("item", 4)
    assert item["data"]["current_stock"] == 12
    assert api.last_request().url.path == "/api/v1/qr-scan/item/4"


@pytest.mark.asyncio
async def test_qr_scan_unknown_code(api):
    api.fail_paths["/api/v1/qr-scan/item/4"] = (404, {"message": "Item not found."})

    result = await qr_scan_manager.scan("item", 4)

    assert result["success"] is False
    assert result["code"] == "not_found"
    assert result["error"] == "Item not found."
