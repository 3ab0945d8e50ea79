# portal/api/endpoints/diagnostics.py

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from loguru import logger

from portal.core.database import DatabaseManager, get_db_manager
from portal.core.errors import PortalError
from portal.core.rbac import AllowPages, DashboardPage
from portal.schemas.auth import SessionUser
from portal.schemas.department import DepartmentAction, DiagnoseRequest
from portal.services.auth_service import diagnose_connection, test_department_auth
from portal.services.department_service import create_view_if_not_exists
from portal.services.diagnostics_service import diagnose_all_departments, run_connectivity_checks

router = APIRouter(prefix="/api", tags=["Diagnostics"])

settings_access = AllowPages(DashboardPage.SETTINGS)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# -------------------------------------------------------------------
# CONNECTION DIAGNOSTICS
# -------------------------------------------------------------------
@router.get("/diagnose-connection")
async def diagnose_all(
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(settings_access),
):
    try:
        report = await diagnose_all_departments(manager)
    except PortalError as e:
        logger.error(f"Full diagnostics error: {e.message}")
        raise PortalError(e.message, status_code=500)

    return {"success": True, "timestamp": _timestamp(), **report}


@router.post("/diagnose-connection")
async def diagnose_one(
    payload: DiagnoseRequest,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(settings_access),
):
    if not payload.server_name:
        raise PortalError("Server name is required", status_code=400)

    diagnostics = await diagnose_connection(manager, payload.server_name, payload.is_student)
    return {"success": True, "diagnostics": diagnostics, "timestamp": _timestamp()}


# -------------------------------------------------------------------
# MULTI-DATABASE SELF TEST
# -------------------------------------------------------------------
@router.get("/test-multi-db")
async def test_multi_db(
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(settings_access),
):
    results = await run_connectivity_checks(manager)
    return {"success": True, "testResults": {"timestamp": _timestamp(), **results}}


@router.post("/test-multi-db")
async def test_multi_db_action(
    payload: DepartmentAction,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(settings_access),
):
    if payload.action == "create-view":
        result = await create_view_if_not_exists(manager)
        return {"success": result["success"], "message": result["message"]}

    if payload.action == "create-stored-proc" and payload.department_name and payload.server_name:
        return {"success": True, "message": "Stored procedures already exist in SQL database"}

    if payload.action == "test-auth" and payload.department_name:
        return {"success": True, "authTest": await test_department_auth(manager, payload.department_name)}

    if payload.action == "test-connection" and payload.server_name:
        return {
            "success": True,
            "connectionTest": await manager.test_department_connection(payload.server_name),
        }

    raise PortalError("Invalid action", status_code=400)
