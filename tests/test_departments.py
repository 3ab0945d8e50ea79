import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from portal.core.database import DatabaseManager, get_db_manager
from portal.main import app
from portal.services.department_service import get_department_by_server_name


@pytest.mark.asyncio
async def test_department_dropdown_is_public(client, directory):
    res = await client.get("/api/departments")
    assert res.status_code == 200

    data = res.json()
    assert data["success"] is True
    assert data["departments"] == [
        {"value": "Accounting Department", "label": "Accounting Department", "serverName": "SRV2"},
        {"value": "IT Department", "label": "IT Department", "serverName": "SRV1"},
    ]
    assert data["message"] == "Loaded 2 departments from VIEW_FRAGMENT_LIST"


@pytest.mark.asyncio
async def test_department_dropdown_when_primary_is_down(client, tmp_path):
    broken = DatabaseManager(
        engine_factory=lambda config: create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/nope/x.db")
    )
    app.dependency_overrides[get_db_manager] = lambda: broken

    res = await client.get("/api/departments")
    assert res.status_code == 500

    data = res.json()
    assert data["success"] is False
    assert data["departments"] == []
    assert "Failed to fetch departments" in data["error"]


@pytest.mark.asyncio
async def test_validate_department_action(client, directory, staff):
    res = await client.post(
        "/api/departments",
        json={"action": "validate-department", "departmentName": "IT Department"},
        headers=staff,
    )
    assert res.status_code == 200
    assert res.json()["isValid"] is True

    res = await client.post(
        "/api/departments",
        json={"action": "validate-department", "departmentName": "Law Department"},
        headers=staff,
    )
    assert res.json()["isValid"] is False


@pytest.mark.asyncio
async def test_validate_department_against_its_server(client, directory, staff):
    res = await client.post(
        "/api/departments",
        json={"action": "validate-department", "departmentName": "IT Department", "serverName": "SRV1"},
        headers=staff,
    )
    assert res.json()["isValid"] is True

    res = await client.post(
        "/api/departments",
        json={"action": "validate-department", "departmentName": "IT Department", "serverName": "SRV2"},
        headers=staff,
    )
    assert res.json()["isValid"] is False


@pytest.mark.asyncio
async def test_invalid_department_action(client, directory, staff):
    res = await client.post("/api/departments", json={"action": "drop-everything"}, headers=staff)
    assert res.status_code == 400
    assert res.json() == {"success": False, "error": "Invalid action"}


@pytest.mark.asyncio
async def test_department_actions_need_a_session(client, directory):
    res = await client.post("/api/departments", json={"action": "test-view"})
    assert res.status_code in (401, 403)
    assert res.json()["success"] is False


@pytest.mark.asyncio
async def test_students_are_redirected_away(client, directory, student):
    res = await client.post("/api/departments", json={"action": "test-view"}, headers=student)
    assert res.status_code == 403

    data = res.json()
    assert data["error"] == "Access denied. Student role cannot access this page."
    assert data["redirectTo"] == "/dashboard/course-registration"


@pytest.mark.asyncio
async def test_department_faculty(client, school, staff):
    res = await client.get("/api/departments/IT Department/faculty", headers=staff)
    assert res.status_code == 200
    assert res.json() == {
        "success": True,
        "facultyId": "IT",
        "departmentName": "IT Department",
        "serverName": "SRV1",
    }


@pytest.mark.asyncio
async def test_department_faculty_unknown_department(client, directory, staff):
    res = await client.get("/api/departments/Law Department/faculty", headers=staff)
    assert res.status_code == 200
    assert res.json() == {"success": False, "error": 'Department "Law Department" not found'}


@pytest.mark.asyncio
async def test_department_without_faculty(client, directory, staff):
    res = await client.get("/api/departments/IT Department/faculty", headers=staff)
    assert res.json() == {"success": False, "error": "No faculty found for this department"}


@pytest.mark.asyncio
async def test_lookup_by_server_name(manager, directory):
    dept = await get_department_by_server_name(manager, "SRV2")
    assert dept.branch_name == "Accounting Department"
    assert await get_department_by_server_name(manager, "SRV9") is None
