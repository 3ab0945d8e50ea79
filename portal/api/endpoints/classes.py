# portal/api/endpoints/classes.py

from typing import Optional

from fastapi import APIRouter, Depends

from portal.core.database import DatabaseManager, get_db_manager
from portal.core.errors import PortalError
from portal.core.rbac import AllowPages, DashboardPage
from portal.schemas.auth import SessionUser
from portal.schemas.classes import ClassCreate, ClassUpdate
from portal.services import class_service
from portal.services.department_service import require_department

router = APIRouter(prefix="/api/classes", tags=["Classes"])

# Class lists also feed the student, report and tuition screens
read_access = AllowPages(
    DashboardPage.CLASSES,
    DashboardPage.STUDENTS,
    DashboardPage.REPORTS,
    DashboardPage.TUITION_REPORTS,
)
write_access = AllowPages(DashboardPage.CLASSES)


async def _department_connection(manager: DatabaseManager, department_name: Optional[str]):
    if not department_name:
        raise PortalError("Department parameter is required")

    department = await require_department(manager, department_name)
    conn = await manager.department(department.server_name)
    return department, conn


# 1️⃣ List classes (optionally one class)
@router.get("")
async def list_classes(
    department: Optional[str] = None,
    classId: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(read_access),
):
    dept, conn = await _department_connection(manager, department)
    classes = await class_service.list_classes(conn, classId)

    return {
        "success": True,
        "classes": classes,
        "department": dept.branch_name,
        "serverName": dept.server_name,
    }


# 2️⃣ Add class
@router.post("")
async def create_class(
    payload: ClassCreate,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(write_access),
):
    if not all([payload.class_id, payload.class_name, payload.course_year,
                payload.faculty_id, payload.department_name]):
        raise PortalError("All fields are required")

    _dept, conn = await _department_connection(manager, payload.department_name)
    await class_service.create_class(
        conn,
        payload.class_id,
        payload.class_name,
        payload.course_year,
        payload.faculty_id,
    )
    return {"success": True, "message": "Class added successfully"}


# 3️⃣ Update class
@router.put("/{class_id}")
async def update_class(
    class_id: str,
    payload: ClassUpdate,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(write_access),
):
    if not payload.class_name or not payload.course_year or not payload.department_name:
        raise PortalError("Class name, course year, and department are required")

    _dept, conn = await _department_connection(manager, payload.department_name)
    await class_service.update_class(conn, class_id, payload.class_name, payload.course_year)
    return {"success": True, "message": "Class updated successfully"}


# 4️⃣ Delete class (refused while students belong to it)
@router.delete("/{class_id}")
async def delete_class(
    class_id: str,
    department: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(write_access),
):
    _dept, conn = await _department_connection(manager, department)
    await class_service.delete_class(conn, class_id)
    return {"success": True, "message": "Class deleted successfully"}


# 5️⃣ Students of a class
@router.get("/{class_id}/students")
async def class_students(
    class_id: str,
    department: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(read_access),
):
    _dept, conn = await _department_connection(manager, department)
    students = await class_service.list_class_students(conn, class_id)

    return {
        "success": True,
        "hasStudents": len(students) > 0,
        "studentCount": len(students),
        "students": students,
    }
