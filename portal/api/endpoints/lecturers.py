# portal/api/endpoints/lecturers.py

from typing import Optional

from fastapi import APIRouter, Depends

from portal.core.database import DatabaseManager, get_db_manager
from portal.core.rbac import AllowPages, DashboardPage
from portal.schemas.auth import SessionUser
from portal.services.lecturer_service import list_lecturers

router = APIRouter(prefix="/api/lecturers", tags=["Lecturers"])


@router.get("")
async def lecturers(
    subjectId: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(AllowPages(DashboardPage.SUBJECTS, DashboardPage.CREDIT_CLASSES)),
):
    conn = await manager.shared()
    rows = await list_lecturers(conn, subjectId)

    if rows is None:
        return {
            "success": True,
            "lecturers": [],
            "message": f"No lecturers found for subject {subjectId}",
        }

    return {"success": True, "lecturers": rows, "subjectFilter": subjectId or None}
