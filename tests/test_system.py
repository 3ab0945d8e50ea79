import pytest


@pytest.mark.asyncio
async def test_root(client):
    res = await client.get("/")
    assert res.status_code == 200


@pytest.mark.asyncio
async def test_metrics(client, manager):
    res = await client.get("/api/metrics")
    data = res.json()

    assert data["status"] == "Online"
    assert data["database"] == "Connected"
    assert data["version"] == "1.0.0"
    assert "primary" in data["pools"]
    assert data["logs"][0]["level"] == "INFO"


@pytest.mark.asyncio
async def test_validation_errors_use_the_envelope(client, staff):
    res = await client.get("/api/groups", params={"semester": "first"}, headers=staff)
    assert res.status_code == 400
    assert res.json()["success"] is False
    assert res.json()["error"].startswith("Invalid value for semester")


@pytest.mark.asyncio
async def test_unknown_route(client):
    res = await client.get("/api/nothing-here")
    assert res.status_code == 404
    assert res.json() == {"success": False, "error": "Not Found"}
