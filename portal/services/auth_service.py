# portal/services/auth_service.py

import re
from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from portal.core.config import settings
from portal.core.database import DatabaseManager
from portal.core.db_config import config_for_user, display_string
from portal.core.errors import PortalError, driver_message
from portal.models.directory import Department
from portal.models.student import Student
from portal.schemas.auth import SessionUser
from portal.services.department_service import (
    get_department_by_branch_name,
    get_departments,
)


class AuthenticationError(PortalError):
    """Login rejected; rendered as 401 with the login type attached."""

    def __init__(self, message: str, login_type: str):
        super().__init__(message, status_code=401, loginType=login_type)


def looks_like_student(username: str) -> bool:
    """Legacy heuristic: numeric IDs and sv-prefixed logins are students."""
    return bool(re.fullmatch(r"\d+", username)) or username.lower().startswith("sv")


# ----------------------------------------------------
# Stored procedure helpers
# ----------------------------------------------------
async def _first_row(
    manager: DatabaseManager,
    server_name: str,
    procedure: str,
    params: dict,
    is_student: bool = False,
) -> Optional[dict]:
    try:
        conn = await manager.for_user(server_name, is_student)
        rows = await conn.call_procedure(procedure, params)
    except (SQLAlchemyError, PortalError) as e:
        logger.error(f"Error executing {procedure} on {server_name}: {e}")
        return None

    return rows[0] if rows else None


async def login_info(
    manager: DatabaseManager,
    server_name: str,
    username: str,
    user_role: str,
    is_student: bool = False,
) -> Optional[dict]:
    return await _first_row(
        manager,
        server_name,
        "SP_LOGIN_INFO",
        {"LoginName": username, "UserRole": user_role},
        is_student,
    )


async def legacy_login(
    manager: DatabaseManager,
    server_name: str,
    username: str,
    is_student: bool = False,
) -> Optional[dict]:
    return await _first_row(manager, server_name, "SP_LOGIN", {"LoginName": username}, is_student)


async def student_exists(manager: DatabaseManager, server_name: str, student_id: str) -> bool:
    try:
        conn = await manager.student(server_name)
        row = await conn.fetch_one(
            select(Student.student_id).where(Student.student_id == student_id)
        )
    except (SQLAlchemyError, PortalError) as e:
        logger.error(f"Student validation error: {e}")
        return False

    return row is not None


async def _find_department(manager: DatabaseManager, department_name: str, login_type: str) -> Department:
    try:
        departments = await get_departments(manager)
    except PortalError as e:
        raise AuthenticationError(f"Authentication failed: {e.message}", login_type)

    department = next((d for d in departments if d.branch_name == department_name), None)
    if not department:
        raise AuthenticationError(
            f'Department "{department_name}" not found in VIEW_FRAGMENT_LIST',
            login_type,
        )
    return department


# ----------------------------------------------------
# Login flows
# ----------------------------------------------------
async def authenticate_teacher(
    manager: DatabaseManager,
    username: str,
    password: str,
    department_name: str,
) -> tuple[SessionUser, str]:
    """
    Teachers connect with the department login and are identified by
    SP_LOGIN_INFO. The password is required by the route but checked by
    SQL Server only through the shared department login.
    """
    department = await _find_department(manager, department_name, "teacher")
    server_name = department.server_name

    try:
        await manager.department(server_name)
        logger.info(f"Connected to {server_name} for teacher authentication")
    except PortalError:
        raise AuthenticationError(f"Cannot connect to department server {server_name}", "teacher")

    info = await login_info(manager, server_name, username, "LECTURER")
    if not info:
        raise AuthenticationError("Invalid teacher credentials or user not found", "teacher")

    actual_role = info.get("RoleName") or "LECTURER"
    user = SessionUser(
        id=info["USERNAME"],
        username=info["USERNAME"],
        full_name=info["FULL_NAME"],
        role="LECTURER",
        group_name=actual_role,
        department=department,
        server_name=server_name,
        is_student=False,
    )
    message = f"Teacher login successful. Welcome {info['FULL_NAME']} with role {actual_role}"
    return user, message


async def authenticate_student(
    manager: DatabaseManager,
    student_id: str,
    department_name: str,
) -> tuple[SessionUser, str]:
    """Students sign in with their ID only."""
    department = await _find_department(manager, department_name, "student")
    server_name = department.server_name

    if not await student_exists(manager, server_name, student_id):
        raise AuthenticationError("Invalid student ID or student not found", "student")

    info = await login_info(manager, server_name, student_id, "STUDENT", is_student=True)
    if not info:
        raise AuthenticationError("Cannot retrieve student information", "student")

    user = SessionUser(
        id=info["USERNAME"],
        username=info["USERNAME"],
        full_name=info["FULL_NAME"],
        role="STUDENT",
        group_name=info.get("ROLE_NAME") or "STUDENT",
        department=department,
        server_name=server_name,
        is_student=True,
    )
    return user, f"Student login successful. Welcome {info['FULL_NAME']}"


async def authenticate(
    manager: DatabaseManager,
    username: str,
    password: Optional[str],
    department_name: str,
    is_student_login: bool = False,
) -> tuple[SessionUser, str]:
    if is_student_login:
        return await authenticate_student(manager, username, department_name)
    return await authenticate_teacher(manager, username, password, department_name)


def _user_from_legacy_row(row: dict, department: Department) -> SessionUser:
    is_student = row.get("RoleName") == "STUDENT"
    return SessionUser(
        id=row["USERNAME"],
        username=row["USERNAME"],
        full_name=row["FULL_NAME"],
        role="STUDENT" if is_student else "LECTURER",
        group_name=row.get("RoleName"),
        department=department,
        server_name=department.server_name,
        is_student=is_student,
    )


async def authenticate_legacy(
    manager: DatabaseManager,
    username: str,
    password: str,
    department_name: str,
) -> SessionUser:
    department = await get_department_by_branch_name(manager, department_name)
    if not department:
        raise AuthenticationError("Invalid department selection", "legacy")

    is_student = looks_like_student(username)
    row = await legacy_login(manager, department.server_name, username, is_student)

    if not row or not row.get("USERNAME"):
        raise AuthenticationError("Invalid username or user not found", "legacy")

    if password != settings.LEGACY_ACCOUNT_PASSWORD:
        account = "student" if is_student else "faculty"
        raise AuthenticationError(f"Invalid password for {account} account", "legacy")

    return _user_from_legacy_row(row, department)


async def validate_user_session(
    manager: DatabaseManager,
    username: str,
    department_name: str,
) -> Optional[SessionUser]:
    department = await get_department_by_branch_name(manager, department_name)
    if not department:
        return None

    row = await legacy_login(manager, department.server_name, username, looks_like_student(username))
    if not row or not row.get("USERNAME"):
        return None

    return _user_from_legacy_row(row, department)


# ----------------------------------------------------
# Diagnostics
# ----------------------------------------------------
def connection_suggestions(error: str, server_name: str, is_student: bool) -> list[str]:
    suggestions = []

    if "ETIMEOUT" in error or "timeout" in error.lower():
        suggestions += [
            "Check if SQL Server is running and accepting connections",
            "Verify SQL Server Browser service is running (for named instances)",
            "Check Windows Firewall settings for SQL Server ports",
            "Ensure TCP/IP protocol is enabled in SQL Server Configuration Manager",
        ]

    if "Login failed" in error:
        login = settings.STUDENT_DB_USER if is_student else settings.DEPARTMENT_DB_USER
        suggestions += [
            f"Check if user '{login}' exists and has correct password",
            "Verify SQL Server Authentication is enabled (not just Windows Auth)",
            "Check user permissions and database access",
        ]

    if "server was not found" in error:
        suggestions += [
            "Verify server name and instance name are correct",
            "Check if SQL Server Browser service is running",
            "Try using IP address instead of server name",
        ]

    if "\\" in server_name:
        suggestions += [
            "For named instances, ensure SQL Server Browser service is running",
            "Check if the instance name is correct",
            "Try connecting without instance name if using default instance",
        ]

    return suggestions


async def diagnose_connection(manager: DatabaseManager, server_name: str, is_student: bool = False) -> dict:
    config = config_for_user(server_name, is_student)
    result = {
        "serverName": server_name,
        "connectionString": display_string(config),
        "canConnect": False,
        "suggestions": [],
    }

    try:
        conn = await manager.for_user(server_name, is_student)
        await conn.scalar("SELECT 1 AS test")
        result["canConnect"] = True
    except (SQLAlchemyError, PortalError) as e:
        error = e.reason if hasattr(e, "reason") else driver_message(e)
        result["error"] = error or "Unknown error"
        result["suggestions"] = connection_suggestions(result["error"], server_name, is_student)

    return result


async def test_department_auth(manager: DatabaseManager, department_name: str) -> dict:
    department = await get_department_by_branch_name(manager, department_name)
    if not department:
        return {
            "departmentExists": False,
            "serverAccessible": False,
            "storedProcExists": False,
            "error": "Department not found",
        }

    server_accessible = await manager.test_department_connection(department.server_name)
    if not server_accessible:
        logger.warning(f"Server {department.server_name} not accessible")

    return {
        "departmentExists": True,
        "serverAccessible": server_accessible,
        "storedProcExists": server_accessible and await login_procedure_exists(manager, department.server_name),
    }


async def login_procedure_exists(manager: DatabaseManager, server_name: str) -> bool:
    try:
        conn = await manager.department(server_name)
        count = await conn.scalar(
            "SELECT COUNT(*) FROM sys.procedures WHERE name = :name", {"name": "SP_LOGIN_INFO"}
        )
    except (SQLAlchemyError, PortalError) as e:
        logger.warning(f"Could not look up SP_LOGIN_INFO on {server_name}: {driver_message(e)}")
        return False
    return bool(count)
