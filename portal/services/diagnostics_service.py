# portal/services/diagnostics_service.py

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from portal.core.database import DatabaseManager
from portal.core.errors import PortalError
from portal.services.auth_service import diagnose_connection, test_department_auth
from portal.services.department_service import get_departments, test_view_access


async def diagnose_all_departments(manager: DatabaseManager) -> dict:
    """Teacher and student connection diagnostics for every directory entry."""
    departments = await get_departments(manager)
    results = []

    for dept in departments:
        results.append({
            "department": dept.branch_name,
            "serverName": dept.server_name,
            "teacher": await diagnose_connection(manager, dept.server_name, is_student=False),
            "student": await diagnose_connection(manager, dept.server_name, is_student=True),
        })

    return {
        "results": results,
        "summary": {
            "totalDepartments": len(departments),
            "teacherConnectionsWorking": sum(1 for r in results if r["teacher"]["canConnect"]),
            "studentConnectionsWorking": sum(1 for r in results if r["student"]["canConnect"]),
        },
    }


async def run_connectivity_checks(manager: DatabaseManager) -> dict:
    """Primary connection, directory view, then each department's server and login setup."""
    primary_ok = False
    try:
        conn = await manager.primary()
        await conn.scalar("SELECT 1 AS test")
        primary_ok = True
    except (SQLAlchemyError, PortalError) as e:
        logger.warning(f"Primary connection check failed: {e}")

    view_access = await test_view_access(manager)

    try:
        departments = await get_departments(manager)
    except PortalError:
        departments = []

    department_tests = []
    for dept in departments:
        department_tests.append({
            "department": dept.branch_name,
            "serverName": dept.server_name,
            "connectionTest": await manager.test_department_connection(dept.server_name),
            "authTest": await test_department_auth(manager, dept.branch_name),
        })

    return {
        "primaryConnection": primary_ok,
        "departments": [d.model_dump() for d in departments],
        "viewAccess": view_access,
        "departmentTests": department_tests,
    }
