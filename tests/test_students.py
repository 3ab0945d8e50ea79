import pytest

DEPT = {"department": "IT Department"}


def student_body(**overrides):
    body = {
        "studentId": "N22DCCN010",
        "lastName": "Hoang Van",
        "firstName": "Em",
        "gender": False,
        "address": "Ha Noi",
        "dateOfBirth": "2004-05-01",
        "classId": "D21CQCN02",
        "departmentName": "IT Department",
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_list_students(client, school, staff):
    res = await client.get("/api/students", params=DEPT, headers=staff)
    assert res.status_code == 200

    data = res.json()
    assert data["serverName"] == "SRV1"
    assert [s["STUDENT_ID"] for s in data["students"]] == ["N21DCCN001", "N21DCCN002"]
    assert data["students"][0]["CLASS_NAME"] == "Computer Science 1"


@pytest.mark.asyncio
async def test_students_page_is_closed_to_finance(client, school, finance):
    res = await client.get("/api/students", params=DEPT, headers=finance)
    assert res.status_code == 403
    assert res.json()["redirectTo"] == "/dashboard/tuition-payment"


@pytest.mark.asyncio
async def test_create_student(client, school, staff, procedures):
    res = await client.post("/api/students", json=student_body(), headers=staff)
    assert res.json() == {"success": True, "message": "Student added successfully"}
    assert procedures.called("SP_CHECK_ID") == [{"ID": "N22DCCN010", "Type": "STUDENT_ID"}]

    res = await client.get("/api/students", params=DEPT, headers=staff)
    created = next(s for s in res.json()["students"] if s["STUDENT_ID"] == "N22DCCN010")
    assert created["DATE_OF_BIRTH"] == "2004-05-01"
    assert created["SUSPENDED"] is False
    assert created["PASSWORD"] == ""


@pytest.mark.asyncio
async def test_create_student_with_taken_id(client, school, staff, procedures):
    procedures.return_values["SP_CHECK_ID"] = 1
    res = await client.post("/api/students", json=student_body(), headers=staff)
    assert res.json() == {"success": False, "error": "Student ID already exists in current department"}


@pytest.mark.asyncio
async def test_create_student_requires_fields(client, school, staff):
    res = await client.post("/api/students", json=student_body(firstName="  "), headers=staff)
    assert res.json()["error"] == "Student ID, Last Name, First Name, Class ID, and Department are required"


@pytest.mark.asyncio
async def test_update_student(client, school, staff):
    body = student_body(studentId="N21DCCN002", classId="D21CQCN02", suspended=True)
    res = await client.put("/api/students", json=body, headers=staff)
    assert res.json() == {"success": True, "message": "Student updated successfully"}

    res = await client.get("/api/students", params=DEPT, headers=staff)
    updated = next(s for s in res.json()["students"] if s["STUDENT_ID"] == "N21DCCN002")
    assert updated["CLASS_ID"] == "D21CQCN02"
    assert updated["SUSPENDED"] is True

    res = await client.put("/api/students", json=student_body(studentId="NOPE"), headers=staff)
    assert res.json() == {"success": False, "error": "Student not found"}


@pytest.mark.asyncio
async def test_delete_student(client, school, staff):
    res = await client.delete(
        "/api/students", params={**DEPT, "studentId": "N21DCCN002"}, headers=staff
    )
    assert res.json() == {"success": True, "message": "Student deleted successfully"}

    res = await client.delete(
        "/api/students", params={**DEPT, "studentId": "N21DCCN002"}, headers=staff
    )
    assert res.json()["error"] == "Student not found"

    res = await client.delete("/api/students", params=DEPT, headers=staff)
    assert res.json()["error"] == "Student ID and Department are required"
