# portal/api/endpoints/enrollment.py

from typing import Optional

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from portal.core.database import DatabaseManager, get_db_manager
from portal.core.errors import PortalError
from portal.core.rbac import AllowPages, DashboardPage
from portal.schemas.auth import SessionUser
from portal.schemas.enrollment import EnrollmentRequest, GradesUpdate
from portal.services import enrollment_service
from portal.services.department_service import require_department

router = APIRouter(prefix="/api", tags=["Enrollment"])

registration_access = AllowPages(DashboardPage.COURSE_REGISTRATION)
grade_access = AllowPages(DashboardPage.STUDENT_GRADES)


def _ensure_own_registration(user: SessionUser, student_id: str) -> None:
    """Students may only register or cancel for themselves."""
    if user.is_student and user.username.strip() != student_id.strip():
        raise PortalError("Students can only manage their own enrollment", status_code=403)


# -------------------------------------------------------------------
# GRADE SHEET (one credit class)
# -------------------------------------------------------------------
@router.get("/enrollment")
async def enrollment_list(
    department: Optional[str] = None,
    academicYear: Optional[str] = None,
    semester: Optional[int] = None,
    group: Optional[int] = None,
    subject: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(grade_access),
):
    if not department or not academicYear or semester is None or group is None or not subject:
        raise PortalError(
            "All parameters are required: department, academicYear, semester, group, subject",
            status_code=400,
        )

    dept = await require_department(manager, department, status_code=400, message="Invalid department")
    conn = await manager.department(dept.server_name)

    try:
        rows = await enrollment_service.list_enrollment_by_subject(conn, academicYear, semester, group, subject)
    except SQLAlchemyError:
        logger.exception("Error fetching enrollment list")
        raise PortalError("Failed to fetch enrollment list", status_code=500)

    return {"success": True, "enrollmentList": rows}


# -------------------------------------------------------------------
# REGISTER / CANCEL
# -------------------------------------------------------------------
@router.post("/enrollment")
async def enroll(
    payload: EnrollmentRequest,
    manager: DatabaseManager = Depends(get_db_manager),
    current_user: SessionUser = Depends(registration_access),
):
    if not payload.department_name or not payload.student_id or payload.credit_class_id is None:
        raise PortalError("Department name, student ID and credit class ID are required")

    _ensure_own_registration(current_user, payload.student_id)

    dept = await require_department(manager, payload.department_name)
    conn = await manager.department(dept.server_name)
    await enrollment_service.enroll(conn, payload.student_id, payload.credit_class_id)

    return {"success": True, "message": "Enrollment successful"}


@router.delete("/enrollment")
async def cancel_enrollment(
    payload: EnrollmentRequest,
    manager: DatabaseManager = Depends(get_db_manager),
    current_user: SessionUser = Depends(registration_access),
):
    if not payload.department_name or not payload.student_id or payload.credit_class_id is None:
        raise PortalError("Department name, student ID and credit class ID are required")

    _ensure_own_registration(current_user, payload.student_id)

    dept = await require_department(manager, payload.department_name)
    conn = await manager.department(dept.server_name)
    await enrollment_service.cancel_enrollment(conn, payload.student_id, payload.credit_class_id)

    return {"success": True, "message": "Enrollment cancelled successfully"}


@router.get("/student-enrolled-classes")
async def student_enrolled_classes(
    department: Optional[str] = None,
    studentId: Optional[str] = None,
    academicYear: Optional[str] = None,
    semester: Optional[int] = None,
    facultyId: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    current_user: SessionUser = Depends(registration_access),
):
    if not department:
        raise PortalError("Department parameter is required")
    if not studentId or not academicYear or semester is None or not facultyId:
        raise PortalError("StudentId, academicYear, semester, and facultyId parameters are required")
    _ensure_own_registration(current_user, studentId)

    dept = await require_department(manager, department)
    conn = await manager.department(dept.server_name)
    classes = await enrollment_service.list_enrolled_classes(conn, studentId, academicYear, semester, facultyId)

    return {
        "success": True,
        "enrolledClasses": classes,
        "department": dept.branch_name,
        "serverName": dept.server_name,
    }


# -------------------------------------------------------------------
# GRADE ENTRY
# -------------------------------------------------------------------
@router.put("/grades")
async def update_grades(
    payload: GradesUpdate,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(grade_access),
):
    if not payload.department or not payload.grades:
        raise PortalError("Department and grades array are required", status_code=400)

    dept = await require_department(manager, payload.department, status_code=400, message="Invalid department")
    conn = await manager.department(dept.server_name)

    try:
        await enrollment_service.update_grades(conn, payload.grades)
    except SQLAlchemyError:
        logger.exception("Error updating grades")
        raise PortalError("Failed to update grades", status_code=500)

    return {"success": True, "message": "Grades updated successfully"}
