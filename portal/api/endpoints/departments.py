# portal/api/endpoints/departments.py

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from portal.core.database import DatabaseManager, get_db_manager
from portal.core.errors import PortalError
from portal.core.rbac import AllowPages, DashboardPage
from portal.schemas.auth import SessionUser
from portal.schemas.department import DepartmentAction
from portal.services.department_service import (
    DIRECTORY_QUERY,
    create_view_if_not_exists,
    get_departments,
    get_departments_for_dropdown,
    get_first_faculty_id,
    require_department,
    test_view_access,
    validate_department,
)

router = APIRouter(prefix="/api/departments", tags=["Departments"])


# 1️⃣ Department dropdown (public: the login page needs it)
@router.get("")
async def list_departments(manager: DatabaseManager = Depends(get_db_manager)):
    try:
        departments = await get_departments_for_dropdown(manager)
    except PortalError as e:
        raise PortalError(
            f"Failed to fetch departments from VIEW_FRAGMENT_LIST: {e.message}",
            status_code=500,
            departments=[],
            query=DIRECTORY_QUERY,
        )

    return {
        "success": True,
        "departments": departments,
        "message": f"Loaded {len(departments)} departments from VIEW_FRAGMENT_LIST",
        "query": DIRECTORY_QUERY,
    }


# 2️⃣ Directory maintenance
@router.post("")
async def department_action(
    payload: DepartmentAction,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(AllowPages(DashboardPage.DEPARTMENTS)),
):
    try:
        if payload.action == "test-view":
            return {"success": True, "viewTest": await test_view_access(manager)}

        if payload.action == "create-view":
            result = await create_view_if_not_exists(manager)
            return {"success": result["success"], "message": result["message"]}

        if payload.action == "validate-department" and payload.department_name:
            departments = await get_departments(manager)
            if payload.server_name:
                is_valid = await validate_department(manager, payload.department_name, payload.server_name)
            else:
                is_valid = any(d.branch_name == payload.department_name for d in departments)
            return {
                "success": True,
                "isValid": is_valid,
                "departments": [d.model_dump() for d in departments],
            }
    except PortalError:
        logger.exception("Department action failed")
        raise PortalError("Operation failed", status_code=500)

    raise PortalError("Invalid action", status_code=400)


# 3️⃣ First faculty of a department server
@router.get("/{name}/faculty")
async def department_faculty(
    name: str,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(AllowPages(
        DashboardPage.DEPARTMENTS,
        DashboardPage.CREDIT_CLASSES,
        DashboardPage.COURSE_REGISTRATION,
    )),
):
    department = await require_department(manager, name)

    try:
        faculty_id = await get_first_faculty_id(manager, department)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching faculty for {name}: {e}")
        raise PortalError("Failed to get faculty ID")

    if not faculty_id:
        raise PortalError("No faculty found for this department")

    return {
        "success": True,
        "facultyId": faculty_id.strip(),
        "departmentName": department.branch_name,
        "serverName": department.server_name,
    }
