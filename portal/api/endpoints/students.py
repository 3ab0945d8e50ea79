# portal/api/endpoints/students.py

from typing import Optional

from fastapi import APIRouter, Depends

from portal.core.database import DatabaseManager, get_db_manager
from portal.core.errors import PortalError
from portal.core.rbac import AllowPages, DashboardPage
from portal.schemas.auth import SessionUser
from portal.schemas.common import require_fields
from portal.schemas.student import StudentUpsert
from portal.services import student_service
from portal.services.department_service import require_department

router = APIRouter(prefix="/api/students", tags=["Students"])

student_access = AllowPages(DashboardPage.STUDENTS)

MISSING_FIELDS = "Student ID, Last Name, First Name, Class ID, and Department are required"


async def _connection_for(manager: DatabaseManager, department_name: str):
    department = await require_department(manager, department_name)
    return department, await manager.department(department.server_name)


@router.get("")
async def list_students(
    department: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(student_access),
):
    if not department:
        raise PortalError("Department parameter is required")

    dept, conn = await _connection_for(manager, department)
    students = await student_service.list_students(conn)

    return {
        "success": True,
        "students": students,
        "department": dept.branch_name,
        "serverName": dept.server_name,
    }


@router.post("")
async def create_student(
    payload: StudentUpsert,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(student_access),
):
    if require_fields(payload, payload.REQUIRED):
        raise PortalError(MISSING_FIELDS)

    _dept, conn = await _connection_for(manager, payload.department_name)
    await student_service.create_student(conn, payload)
    return {"success": True, "message": "Student added successfully"}


@router.put("")
async def update_student(
    payload: StudentUpsert,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(student_access),
):
    if require_fields(payload, payload.REQUIRED):
        raise PortalError(MISSING_FIELDS)

    _dept, conn = await _connection_for(manager, payload.department_name)
    await student_service.update_student(conn, payload)
    return {"success": True, "message": "Student updated successfully"}


@router.delete("")
async def delete_student(
    studentId: Optional[str] = None,
    department: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(student_access),
):
    if not studentId or not department:
        raise PortalError("Student ID and Department are required")

    _dept, conn = await _connection_for(manager, department)
    await student_service.delete_student(conn, studentId)
    return {"success": True, "message": "Student deleted successfully"}
