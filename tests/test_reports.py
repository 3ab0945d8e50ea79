from unittest.mock import patch

import pytest
from sqlalchemy.exc import ProgrammingError

DEPT = {"department": "IT Department"}
CLASS_PARAMS = {**DEPT, "academicYear": "2024-2025", "semester": 1, "subjectId": "CTDL", "groupNumber": 1}


@pytest.mark.asyncio
async def test_class_students_from_procedure(client, school, staff, procedures):
    procedures.results["SP_STUDENT_ENROLLMENT_LIST_BY_CREDIT_CLASS"] = [
        {"STUDENT_ID": "N21DCCN009", "FULL_NAME": "Do Minh Khoa", "GENDER": True, "CLASS_ID": "D21CQCN01",
         "CREDIT_CLASS_ID": 1, "ATTENDANCE_SCORE": 7, "MIDTERM_SCORE": None, "FINAL_SCORE": 6, "TOTAL_SCORE": None},
    ]

    res = await client.get("/api/reports/class-students", params=CLASS_PARAMS, headers=staff)
    data = res.json()
    assert data["students"] == [
        {
            "id": "N21DCCN009",
            "lastName": "Do Minh",
            "firstName": "Khoa",
            "gender": "Female",
            "classCode": "D21CQCN01",
            "creditClassId": 1,
            "attendanceScore": 7,
            "midtermScore": 0,
            "finalScore": 6,
            "totalScore": 0,
        }
    ]
    assert procedures.called("SP_STUDENT_ENROLLMENT_LIST_BY_CREDIT_CLASS") == [
        {"AcademicYear": "2024-2025", "Semester": 1, "GroupNumber": 1, "SubjectID": "CTDL", "FacultyID": "IT"}
    ]


@pytest.mark.asyncio
async def test_class_students_fall_back_to_query(client, school, staff, procedures):
    res = await client.get("/api/reports/class-students", params=CLASS_PARAMS, headers=staff)
    data = res.json()

    [row] = data["students"]
    assert row["id"] == "N21DCCN001"
    assert (row["lastName"], row["firstName"]) == ("Nguyen Van", "An")
    assert row["gender"] == "Male"
    assert row["finalScore"] == 9.0
    assert data["filters"] == {
        "academicYear": "2024-2025", "semester": 1, "subjectId": "CTDL", "groupNumber": 1,
    }


@pytest.mark.asyncio
async def test_class_report_parameters(client, school, staff):
    res = await client.get("/api/reports/class-students", params=DEPT, headers=staff)
    assert res.json()["error"] == (
        "All parameters are required: department, academicYear, semester, subjectId, groupNumber"
    )


@pytest.mark.asyncio
async def test_subject_grades_chain(client, school, staff, procedures):
    res = await client.get("/api/reports/subject-grades", params=CLASS_PARAMS, headers=staff)
    data = res.json()

    assert data["grades"] == [
        {
            "studentId": "N21DCCN001",
            "lastName": "Nguyen Van",
            "firstName": "An",
            "attendance": 10,
            "midterm": 8.0,
            "finalExam": 9.0,
            "totalGrade": 8.8,
        }
    ]
    assert data["filters"]["facultyId"] == "IT"
    # both procedure signatures were tried before the enrollment list
    assert len(procedures.called("SP_SUBJECT_GRADE_REPORT")) == 2
    assert len(procedures.called("SP_STUDENT_ENROLLMENT_LIST_BY_CREDIT_CLASS")) == 1


@pytest.mark.asyncio
async def test_subject_grades_with_group_signature(client, school, staff, procedures):
    def report(params):
        if "GroupNumber" not in params:
            raise ProgrammingError("EXEC SP_SUBJECT_GRADE_REPORT", {}, Exception("too few arguments"))
        return [{"STUDENT_ID": "N21DCCN002", "FULL_NAME": "Tran Thi Binh", "TOTAL_SCORE": 7.5}]

    procedures.results["SP_SUBJECT_GRADE_REPORT"] = report

    res = await client.get("/api/reports/subject-grades", params=CLASS_PARAMS, headers=staff)
    [row] = res.json()["grades"]
    assert row["studentId"] == "N21DCCN002"
    assert row["totalGrade"] == 7.5


@pytest.mark.asyncio
async def test_credit_classes_report(client, school, staff):
    res = await client.get(
        "/api/reports/credit-classes", params={**DEPT, "academicYear": "2024-2025"}, headers=staff
    )
    data = res.json()

    [row] = data["creditClasses"]
    assert row["SUBJECT_NAME"] == "Data Structures"
    assert row["REGISTERED_STUDENTS"] == 1
    assert data["filters"] == {"academicYear": "2024-2025", "semester": None}

    res = await client.get(
        "/api/reports/credit-classes", params={**DEPT, "academicYear": "2023-2024"}, headers=staff
    )
    assert res.json()["creditClasses"] == []


@pytest.mark.asyncio
async def test_credit_classes_pdf(client, school, staff):
    with patch("portal.services.pdf_service._pdf_config", return_value=None), \
            patch("portal.services.pdf_service.pdfkit.from_string", return_value=b"%PDF-1.4") as render:
        res = await client.get(
            "/api/reports/credit-classes/pdf",
            params={**DEPT, "academicYear": "2024-2025", "semester": 1},
            headers=staff,
        )

    assert res.status_code == 200
    assert res.content == b"%PDF-1.4"
    assert res.headers["content-type"] == "application/pdf"
    assert res.headers["content-disposition"].startswith(
        'attachment; filename="Credit_Classes_Report_2024-2025_Semester_1_'
    )

    html = render.call_args.args[0]
    assert "DEPARTMENT: IT Department" in html
    assert "Data Structures" in html
    assert "Total classes opened: 1" in html


@pytest.mark.asyncio
async def test_pdf_without_wkhtmltopdf(client, school, staff):
    with patch("portal.services.pdf_service._pdf_config", return_value=None), \
            patch("portal.services.pdf_service.pdfkit.from_string", side_effect=OSError("No wkhtmltopdf")):
        res = await client.get("/api/reports/credit-classes/pdf", params=DEPT, headers=staff)

    assert res.status_code == 500
    assert res.json()["error"].startswith("PDF generation failed. Ensure wkhtmltopdf is installed.")


@pytest.mark.asyncio
async def test_student_grades(client, school, staff, procedures):
    res = await client.get(
        "/api/reports/student-grades", params={**DEPT, "studentId": "N21DCCN001"}, headers=staff
    )
    data = res.json()

    assert data["studentId"] == "N21DCCN001"
    assert data["studentGrades"] == [
        {
            "creditClassId": 1,
            "subjectId": "CTDL",
            "subjectName": "Data Structures",
            "attendance": 10,
            "midterm": 8.0,
            "finalExam": 9.0,
            "totalGrade": 8.8,
            "letterGrade": "A",
            "academicYear": "2024-2025",
            "semester": 1,
        }
    ]

    res = await client.get("/api/reports/student-grades", params=DEPT, headers=staff)
    assert res.json()["error"] == "Both department and studentId are required parameters"


@pytest.mark.asyncio
async def test_reports_closed_to_students(client, school, student):
    res = await client.get("/api/reports/credit-classes", params=DEPT, headers=student)
    assert res.status_code == 403
