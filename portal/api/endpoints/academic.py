# portal/api/endpoints/academic.py

from typing import Optional

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from portal.core.database import DatabaseManager, get_db_manager
from portal.core.errors import PortalError
from portal.core.rbac import AllowPages, DashboardPage
from portal.schemas.auth import SessionUser
from portal.services import academic_service
from portal.services.department_service import require_department

router = APIRouter(prefix="/api", tags=["Academic Calendar"])

# Year/semester/group pickers appear on every term-scoped page
calendar_access = AllowPages(
    DashboardPage.STUDENT_GRADES,
    DashboardPage.REPORTS,
    DashboardPage.CREDIT_CLASSES,
    DashboardPage.COURSE_REGISTRATION,
    DashboardPage.TUITION_PAYMENT,
    DashboardPage.TUITION_REPORTS,
)


async def _department_connection(manager: DatabaseManager, department: Optional[str]):
    if not department:
        raise PortalError("Department parameter is required", status_code=400)

    dept = await require_department(manager, department, status_code=400, message="Invalid department")
    return await manager.department(dept.server_name)


@router.get("/academic-years")
async def academic_years(
    department: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(calendar_access),
):
    conn = await _department_connection(manager, department)
    try:
        years = await academic_service.list_academic_years(conn)
    except SQLAlchemyError:
        logger.exception("Error fetching academic years")
        raise PortalError("Failed to fetch academic years", status_code=500)

    return {"success": True, "academicYears": years}


@router.get("/semesters")
async def semesters(
    department: Optional[str] = None,
    academicYear: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(calendar_access),
):
    if not department:
        raise PortalError("Department parameter is required", status_code=400)
    if not academicYear:
        raise PortalError("Academic year parameter is required", status_code=400)

    conn = await _department_connection(manager, department)
    try:
        rows = await academic_service.list_semesters(conn, academicYear)
    except SQLAlchemyError:
        logger.exception("Error fetching semesters")
        raise PortalError("Failed to fetch semesters", status_code=500)

    return {"success": True, "semesters": rows}


@router.get("/groups")
async def groups(
    department: Optional[str] = None,
    academicYear: Optional[str] = None,
    semester: Optional[int] = None,
    subjectId: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(calendar_access),
):
    if not department:
        raise PortalError("Department parameter is required", status_code=400)
    if not academicYear:
        raise PortalError("Academic year parameter is required", status_code=400)
    if semester is None:
        raise PortalError("Semester parameter is required", status_code=400)
    if not subjectId:
        raise PortalError("Subject ID parameter is required", status_code=400)

    conn = await _department_connection(manager, department)
    try:
        rows = await academic_service.list_groups(conn, academicYear, semester, subjectId)
    except SQLAlchemyError:
        logger.exception("Error fetching groups")
        raise PortalError("Failed to fetch groups", status_code=500)

    return {"success": True, "groups": rows}
