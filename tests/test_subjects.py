import pytest


@pytest.mark.asyncio
async def test_list_subjects(client, school, student):
    res = await client.get("/api/subjects", headers=student)
    assert res.status_code == 200
    assert res.json()["subjects"] == [
        {"SUBJECT_ID": "CTDL", "SUBJECT_NAME": "Data Structures", "THEORY_HOURS": 45, "PRACTICE_HOURS": 15},
        {"SUBJECT_ID": "MMT", "SUBJECT_NAME": "Computer Networks", "THEORY_HOURS": 30, "PRACTICE_HOURS": 30},
    ]


@pytest.mark.asyncio
async def test_students_cannot_change_subjects(client, school, student):
    body = {"subjectId": "CSDL", "subjectName": "Databases", "theoryHours": 30, "practiceHours": 30}
    res = await client.post("/api/subjects", json=body, headers=student)
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_create_subject(client, school, staff, procedures):
    body = {"subjectId": "CSDL", "subjectName": "Databases", "theoryHours": 30, "practiceHours": 30}
    res = await client.post("/api/subjects", json=body, headers=staff)
    assert res.json() == {"success": True, "message": "Subject added successfully"}

    procedures.return_values["SP_CHECK_ID"] = 1
    res = await client.post("/api/subjects", json=body, headers=staff)
    assert res.json() == {"success": False, "error": "Subject ID already exists"}


@pytest.mark.asyncio
async def test_subject_validation(client, school, staff):
    res = await client.post("/api/subjects", json={"subjectId": "X"}, headers=staff)
    assert res.json()["error"] == "All fields are required"

    body = {"subjectId": "X", "subjectName": "X", "theoryHours": -1, "practiceHours": 0}
    res = await client.put("/api/subjects", json=body, headers=staff)
    assert res.json()["error"] == "Hours cannot be negative"


@pytest.mark.asyncio
async def test_update_subject(client, school, staff):
    body = {"subjectId": "MMT", "subjectName": "Networking", "theoryHours": 45, "practiceHours": 15}
    res = await client.put("/api/subjects", json=body, headers=staff)
    assert res.json()["success"] is True

    res = await client.put("/api/subjects", json={**body, "subjectId": "NOPE"}, headers=staff)
    assert res.json() == {"success": False, "error": "Subject not found"}


@pytest.mark.asyncio
async def test_delete_subject(client, school, staff):
    res = await client.delete("/api/subjects", params={"subjectId": "CTDL"}, headers=staff)
    assert res.json() == {
        "success": False,
        "error": "Cannot delete subject: it is referenced by credit classes",
    }

    res = await client.delete("/api/subjects", params={"subjectId": "MMT"}, headers=staff)
    assert res.json() == {"success": True, "message": "Subject deleted successfully"}

    res = await client.delete("/api/subjects", headers=staff)
    assert res.json()["error"] == "Subject ID parameter is required"
