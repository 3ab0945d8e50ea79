# portal/api/endpoints/reports.py

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from portal.core.database import DatabaseManager, get_db_manager
from portal.core.errors import PortalError
from portal.core.rbac import AllowPages, DashboardPage
from portal.schemas.auth import SessionUser
from portal.services import pdf_service, report_service
from portal.services.department_service import require_department, resolve_faculty_id

router = APIRouter(prefix="/api/reports", tags=["Reports"])

report_access = AllowPages(DashboardPage.REPORTS)

CLASS_REPORT_PARAMETERS = "All parameters are required: department, academicYear, semester, subjectId, groupNumber"


async def _department_connection(manager: DatabaseManager, department_name: str):
    dept = await require_department(manager, department_name)
    return dept, await manager.department(dept.server_name)


# ------------------------------------------------------------
# Students of one credit class
# ------------------------------------------------------------
@router.get("/class-students")
async def class_students(
    department: Optional[str] = None,
    academicYear: Optional[str] = None,
    semester: Optional[int] = None,
    subjectId: Optional[str] = None,
    groupNumber: Optional[int] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(report_access),
):
    if not department or not academicYear or semester is None or not subjectId or groupNumber is None:
        raise PortalError(CLASS_REPORT_PARAMETERS)

    dept, conn = await _department_connection(manager, department)
    faculty_id = await resolve_faculty_id(manager, dept)

    students = await report_service.class_students_report(
        conn, academicYear, semester, groupNumber, subjectId, faculty_id
    )

    return {
        "success": True,
        "students": students,
        "department": dept.branch_name,
        "serverName": dept.server_name,
        "filters": {
            "academicYear": academicYear,
            "semester": semester,
            "subjectId": subjectId,
            "groupNumber": groupNumber,
        },
    }


# ------------------------------------------------------------
# Credit classes opened (JSON and PDF)
# ------------------------------------------------------------
@router.get("/credit-classes")
async def credit_classes(
    department: Optional[str] = None,
    academicYear: Optional[str] = None,
    semester: Optional[int] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(report_access),
):
    if not department:
        raise PortalError("Department parameter is required")

    dept, conn = await _department_connection(manager, department)
    rows = await report_service.credit_classes_report(conn, academicYear, semester)

    return {
        "success": True,
        "creditClasses": rows,
        "department": dept.branch_name,
        "serverName": dept.server_name,
        "filters": {"academicYear": academicYear, "semester": semester},
    }


@router.get("/credit-classes/pdf")
async def credit_classes_pdf(
    department: Optional[str] = None,
    academicYear: Optional[str] = None,
    semester: Optional[int] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(report_access),
):
    if not department:
        raise PortalError("Department parameter is required")

    dept, conn = await _department_connection(manager, department)
    rows = await report_service.credit_classes_report(conn, academicYear, semester)

    semester_label = str(semester) if semester is not None else None
    pdf_bytes = pdf_service.generate_credit_classes_pdf(rows, dept.branch_name, academicYear, semester_label)
    filename = pdf_service.credit_classes_filename(academicYear, semester_label)

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ------------------------------------------------------------
# Grade slip of one student
# ------------------------------------------------------------
@router.get("/student-grades")
async def student_grades(
    department: Optional[str] = None,
    studentId: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(report_access),
):
    if not department or not studentId:
        raise PortalError("Both department and studentId are required parameters")

    dept, conn = await _department_connection(manager, department)
    grades = await report_service.student_grades_report(conn, studentId)

    return {
        "success": True,
        "studentGrades": grades,
        "studentId": studentId,
        "department": dept.branch_name,
        "serverName": dept.server_name,
    }


# ------------------------------------------------------------
# Grades of one subject group
# ------------------------------------------------------------
@router.get("/subject-grades")
async def subject_grades(
    department: Optional[str] = None,
    academicYear: Optional[str] = None,
    semester: Optional[int] = None,
    subjectId: Optional[str] = None,
    groupNumber: Optional[int] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(report_access),
):
    if not department or not academicYear or semester is None or not subjectId or groupNumber is None:
        raise PortalError(CLASS_REPORT_PARAMETERS)

    dept, conn = await _department_connection(manager, department)
    faculty_id = await resolve_faculty_id(manager, dept)

    grades = await report_service.subject_grades_report(
        conn, academicYear, semester, groupNumber, subjectId, faculty_id
    )

    return {
        "success": True,
        "grades": grades,
        "department": dept.branch_name,
        "serverName": dept.server_name,
        "filters": {
            "academicYear": academicYear,
            "semester": semester,
            "subjectId": subjectId,
            "groupNumber": groupNumber,
            "facultyId": faculty_id,
        },
    }
