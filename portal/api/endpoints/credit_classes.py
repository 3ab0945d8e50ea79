# portal/api/endpoints/credit_classes.py

from typing import Optional

from fastapi import APIRouter, Depends

from portal.core.database import DatabaseManager, get_db_manager
from portal.core.errors import PortalError
from portal.core.rbac import AllowPages, DashboardPage
from portal.schemas.auth import SessionUser
from portal.schemas.credit_class import CreditClassUpsert
from portal.services import credit_class_service
from portal.services.department_service import require_department

router = APIRouter(prefix="/api/credit-classes", tags=["Credit Classes"])

credit_class_access = AllowPages(DashboardPage.CREDIT_CLASSES)


# -------------------------------------------------------------------
# LIST
# -------------------------------------------------------------------
@router.get("")
async def list_credit_classes(
    department: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(credit_class_access),
):
    if not department:
        raise PortalError("Department parameter is required")

    dept = await require_department(manager, department)
    conn = await manager.department(dept.server_name)

    return {
        "success": True,
        "creditClasses": await credit_class_service.list_credit_classes(conn),
        "department": dept.branch_name,
        "serverName": dept.server_name,
    }


# -------------------------------------------------------------------
# CREATE / UPDATE
# -------------------------------------------------------------------
@router.post("")
async def create_credit_class(
    payload: CreditClassUpsert,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(credit_class_access),
):
    error = payload.validation_error()
    if error:
        raise PortalError(error)

    dept = await require_department(manager, payload.department_name)
    conn = await manager.department(dept.server_name)
    await credit_class_service.create_credit_class(conn, payload)

    return {"success": True, "message": "Credit class added successfully"}


@router.put("")
async def update_credit_class(
    payload: CreditClassUpsert,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(credit_class_access),
):
    error = payload.validation_error(updating=True)
    if error:
        raise PortalError(error)

    dept = await require_department(manager, payload.department_name)
    conn = await manager.department(dept.server_name)
    await credit_class_service.update_credit_class(conn, payload)

    return {"success": True, "message": "Credit class updated successfully"}


# -------------------------------------------------------------------
# DELETE (?ids=1,2,3)
# -------------------------------------------------------------------
@router.delete("")
async def delete_credit_classes(
    ids: Optional[str] = None,
    department: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(credit_class_access),
):
    if not department:
        raise PortalError("Department parameter is required")

    credit_class_ids = credit_class_service.parse_ids(ids)
    if not credit_class_ids:
        raise PortalError("At least one credit class ID is required")

    dept = await require_department(manager, department)
    conn = await manager.department(dept.server_name)
    deleted = await credit_class_service.delete_credit_classes(conn, credit_class_ids)

    return {
        "success": True,
        "message": f"{deleted} credit class(es) deleted successfully",
        "deletedCount": deleted,
    }
