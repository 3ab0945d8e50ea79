import pytest

from portal.core.database import ServerConnection


@pytest.mark.asyncio
async def test_diagnose_all_departments(client, directory, staff):
    res = await client.get("/api/diagnose-connection", headers=staff)
    assert res.status_code == 200

    data = res.json()
    assert "timestamp" in data
    assert [r["department"] for r in data["results"]] == ["Accounting Department", "IT Department"]
    assert data["results"][0]["teacher"]["canConnect"] is True
    assert data["summary"] == {
        "totalDepartments": 2,
        "teacherConnectionsWorking": 2,
        "studentConnectionsWorking": 2,
    }


@pytest.mark.asyncio
async def test_diagnose_one_server(client, directory, staff):
    res = await client.post(
        "/api/diagnose-connection", json={"serverName": "SRV1", "isStudent": True}, headers=staff
    )
    diagnostics = res.json()["diagnostics"]

    assert diagnostics["serverName"] == "SRV1"
    assert diagnostics["canConnect"] is True
    assert diagnostics["suggestions"] == []
    assert "Password" not in diagnostics["connectionString"]

    res = await client.post("/api/diagnose-connection", json={}, headers=staff)
    assert res.status_code == 400
    assert res.json()["error"] == "Server name is required"


@pytest.mark.asyncio
async def test_settings_are_closed_to_finance(client, directory, finance):
    res = await client.get("/api/diagnose-connection", headers=finance)
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_multi_db_self_test(client, directory, staff):
    res = await client.get("/api/test-multi-db", headers=staff)
    results = res.json()["testResults"]

    assert results["primaryConnection"] is True
    # SQLite has no INFORMATION_SCHEMA
    assert results["viewAccess"]["accessible"] is False
    assert results["departmentTests"][1] == {
        "department": "IT Department",
        "serverName": "SRV1",
        "connectionTest": True,
        # SQLite has no sys.procedures
        "authTest": {"departmentExists": True, "serverAccessible": True, "storedProcExists": False},
    }


@pytest.mark.asyncio
async def test_auth_check_looks_up_the_login_procedure(client, directory, staff, monkeypatch):
    lookups = []
    original_scalar = ServerConnection.scalar

    async def scalar(conn, statement, params=None):
        if "sys.procedures" in str(statement):
            lookups.append((conn.key, dict(params)))
            return 1
        return await original_scalar(conn, statement, params)

    monkeypatch.setattr(ServerConnection, "scalar", scalar)

    res = await client.post(
        "/api/test-multi-db", json={"action": "test-auth", "departmentName": "IT Department"}, headers=staff
    )
    assert res.json()["authTest"]["storedProcExists"] is True
    assert lookups == [("SRV1", {"name": "SP_LOGIN_INFO"})]


@pytest.mark.asyncio
async def test_multi_db_actions(client, directory, staff):
    res = await client.post(
        "/api/test-multi-db", json={"action": "test-connection", "serverName": "SRV2"}, headers=staff
    )
    assert res.json() == {"success": True, "connectionTest": True}

    res = await client.post(
        "/api/test-multi-db", json={"action": "test-auth", "departmentName": "Law Department"}, headers=staff
    )
    assert res.json()["authTest"]["error"] == "Department not found"

    res = await client.post(
        "/api/test-multi-db",
        json={"action": "create-stored-proc", "departmentName": "IT Department", "serverName": "SRV1"},
        headers=staff,
    )
    assert res.json()["message"] == "Stored procedures already exist in SQL database"

    # the view definition is SQL Server only
    res = await client.post("/api/test-multi-db", json={"action": "create-view"}, headers=staff)
    assert res.json()["success"] is False

    res = await client.post("/api/test-multi-db", json={"action": "test-connection"}, headers=staff)
    assert res.status_code == 400
    assert res.json()["error"] == "Invalid action"
