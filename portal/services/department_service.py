# portal/services/department_service.py

from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from portal.core.database import DatabaseManager
from portal.core.errors import PortalError, driver_message
from portal.models.directory import Department, DirectoryEntry
from portal.models.faculty import Faculty

DIRECTORY_QUERY = "SELECT * FROM VIEW_FRAGMENT_LIST ORDER BY BRANCH_NAME"

CREATE_DIRECTORY_VIEW = """
IF NOT EXISTS (SELECT * FROM INFORMATION_SCHEMA.VIEWS WHERE TABLE_NAME = 'VIEW_FRAGMENT_LIST')
BEGIN
  EXEC('
    CREATE VIEW VIEW_FRAGMENT_LIST AS
    SELECT
      BRANCH_NAME = PUBS.description,
      SERVER_NAME = subscriber_server
    FROM
      dbo.sysmergepublications PUBS,
      dbo.sysmergesubscriptions SUBS
    WHERE
      PUBS.pubid = SUBS.PUBID
      AND PUBS.publisher <> SUBS.subscriber_server
  ')
END
"""


# ============================================================================
# DIRECTORY LOOKUPS
# ============================================================================
async def get_departments(manager: DatabaseManager) -> list[Department]:
    """All department -> server mappings from the primary server's directory view."""
    try:
        conn = await manager.primary()
        rows = await conn.fetch_all(
            select(DirectoryEntry.branch_name, DirectoryEntry.server_name)
            .order_by(DirectoryEntry.branch_name)
        )
    except (SQLAlchemyError, PortalError) as e:
        reason = e.message if isinstance(e, PortalError) else driver_message(e)
        logger.error(f"Error fetching departments from VIEW_FRAGMENT_LIST: {reason}")
        raise PortalError(f"Cannot access departments: {reason}", status_code=500)

    return [
        Department(branch_name=row["BRANCH_NAME"], server_name=row["SERVER_NAME"])
        for row in rows
    ]


async def get_department_by_branch_name(manager: DatabaseManager, branch_name: str) -> Optional[Department]:
    try:
        departments = await get_departments(manager)
    except PortalError as e:
        logger.warning(f"Error finding department by branch name: {e.message}")
        return None

    return next((d for d in departments if d.branch_name == branch_name), None)


async def get_department_by_server_name(manager: DatabaseManager, server_name: str) -> Optional[Department]:
    try:
        departments = await get_departments(manager)
    except PortalError as e:
        logger.warning(f"Error finding department by server name: {e.message}")
        return None

    return next((d for d in departments if d.server_name == server_name), None)


async def require_department(
    manager: DatabaseManager,
    branch_name: str,
    status_code: int = 200,
    message: Optional[str] = None,
) -> Department:
    """
    Resolves a department or raises the route's not-found envelope.
    Routes differ in wording and status, so both can be overridden.
    """
    department = await get_department_by_branch_name(manager, branch_name)
    if not department:
        raise PortalError(
            message or f'Department "{branch_name}" not found',
            status_code=status_code,
        )
    return department


async def validate_department(manager: DatabaseManager, branch_name: str, server_name: str) -> bool:
    try:
        departments = await get_departments(manager)
    except PortalError:
        return False

    return any(
        d.branch_name == branch_name and d.server_name == server_name
        for d in departments
    )


async def get_departments_for_dropdown(manager: DatabaseManager) -> list[dict]:
    try:
        departments = await get_departments(manager)
    except PortalError as e:
        raise PortalError(f"Cannot load departments for dropdown: {e.message}", status_code=500)

    return [
        {"value": d.branch_name, "label": d.branch_name, "serverName": d.server_name}
        for d in departments
    ]


# ============================================================================
# DIRECTORY VIEW MAINTENANCE
# ============================================================================
async def test_view_access(manager: DatabaseManager) -> dict:
    try:
        conn = await manager.primary()
        view_count = await conn.scalar(
            "SELECT COUNT(*) AS view_count FROM INFORMATION_SCHEMA.VIEWS "
            "WHERE TABLE_NAME = 'VIEW_FRAGMENT_LIST'"
        )

        if not view_count:
            return {
                "exists": False,
                "accessible": False,
                "error": "VIEW_FRAGMENT_LIST does not exist",
            }

        await conn.fetch_all("SELECT TOP 1 * FROM VIEW_FRAGMENT_LIST")
        return {"exists": True, "accessible": True}

    except (SQLAlchemyError, PortalError) as e:
        reason = e.message if isinstance(e, PortalError) else driver_message(e)
        logger.error(f"Error testing VIEW_FRAGMENT_LIST access: {reason}")
        return {"exists": False, "accessible": False, "error": reason}


async def create_view_if_not_exists(manager: DatabaseManager) -> dict:
    try:
        conn = await manager.primary()
        await conn.execute(CREATE_DIRECTORY_VIEW)
        return {"success": True, "message": "VIEW_FRAGMENT_LIST created or already exists"}

    except (SQLAlchemyError, PortalError) as e:
        reason = e.message if isinstance(e, PortalError) else driver_message(e)
        logger.error(f"Error creating VIEW_FRAGMENT_LIST: {reason}")
        return {"success": False, "message": reason}


# ============================================================================
# FACULTY OF A DEPARTMENT SERVER
# ============================================================================
async def get_first_faculty_id(manager: DatabaseManager, department: Department) -> Optional[str]:
    conn = await manager.department(department.server_name)
    return await conn.scalar(
        select(Faculty.faculty_id).order_by(Faculty.faculty_id).limit(1)
    )


async def resolve_faculty_id(manager: DatabaseManager, department: Department, default: str = "IT") -> str:
    """
    Faculty whose name matches the department, else the first faculty on
    that server, else `default`.
    """
    try:
        conn = await manager.department(department.server_name)

        faculty_id = await conn.scalar(
            select(Faculty.faculty_id).where(Faculty.faculty_name == department.branch_name)
        )
        if faculty_id:
            return faculty_id.strip()

        faculty_id = await get_first_faculty_id(manager, department)
        if faculty_id:
            return faculty_id.strip()

    except (SQLAlchemyError, PortalError) as e:
        logger.warning(f"Error fetching faculty ID from database: {e}")

    return default
