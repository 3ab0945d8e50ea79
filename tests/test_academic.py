import pytest

DEPT = {"department": "IT Department"}


@pytest.mark.asyncio
async def test_academic_years(client, directory, student, procedures):
    procedures.results["SP_GET_ACADEMIC_YEAR"] = [{"NAMHOC": "2024-2025"}, {"ACADEMIC_YEAR": "2023-2024"}]

    res = await client.get("/api/academic-years", params=DEPT, headers=student)
    assert res.json() == {
        "success": True,
        "academicYears": [
            {"value": "2024-2025", "label": "2024-2025"},
            {"value": "2023-2024", "label": "2023-2024"},
        ],
    }


@pytest.mark.asyncio
async def test_missing_procedure_is_a_server_error(client, directory, student, procedures):
    res = await client.get("/api/academic-years", params=DEPT, headers=student)
    assert res.status_code == 500
    assert res.json() == {"success": False, "error": "Failed to fetch academic years"}


@pytest.mark.asyncio
async def test_unknown_department(client, directory, student, procedures):
    res = await client.get("/api/academic-years", params={"department": "Nowhere"}, headers=student)
    assert res.status_code == 400
    assert res.json()["error"] == "Invalid department"

    res = await client.get("/api/academic-years", headers=student)
    assert res.status_code == 400
    assert res.json()["error"] == "Department parameter is required"


@pytest.mark.asyncio
async def test_semesters(client, directory, finance, procedures):
    procedures.results["SP_GET_SEMESTER"] = [{"SEMESTER": 1}, {"SEMESTER": 2}]

    res = await client.get(
        "/api/semesters", params={**DEPT, "academicYear": "2024-2025"}, headers=finance
    )
    assert res.json()["semesters"] == [
        {"value": "1", "label": "Semester 1"},
        {"value": "2", "label": "Semester 2"},
    ]
    assert procedures.called("SP_GET_SEMESTER") == [{"AcademicYear": "2024-2025"}]

    res = await client.get("/api/semesters", params=DEPT, headers=finance)
    assert res.status_code == 400
    assert res.json()["error"] == "Academic year parameter is required"


@pytest.mark.asyncio
async def test_groups(client, directory, lecturer, procedures):
    procedures.results["SP_GET_GROUP"] = [{"GROUP_NUMBER": 1}, {"GROUP_NUMBER": 3}]
    params = {**DEPT, "academicYear": "2024-2025", "semester": 1, "subjectId": "CTDL"}

    res = await client.get("/api/groups", params=params, headers=lecturer)
    assert res.json()["groups"] == [
        {"value": "1", "label": "Group 1"},
        {"value": "3", "label": "Group 3"},
    ]
    assert procedures.called("SP_GET_GROUP") == [
        {"AcademicYear": "2024-2025", "Semester": 1, "SubjectID": "CTDL"}
    ]

    res = await client.get("/api/groups", params={**params, "subjectId": ""}, headers=lecturer)
    assert res.status_code == 400
    assert res.json()["error"] == "Subject ID parameter is required"
