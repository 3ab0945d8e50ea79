# portal/api/endpoints/subjects.py

from typing import Optional

from fastapi import APIRouter, Depends

from portal.core.database import DatabaseManager, get_db_manager
from portal.core.errors import PortalError
from portal.core.rbac import AllowPages, DashboardPage
from portal.schemas.auth import SessionUser
from portal.schemas.subject import SubjectUpsert
from portal.services import subject_service

router = APIRouter(prefix="/api/subjects", tags=["Subjects"])

# Subject lists back several pickers outside the subjects page
read_access = AllowPages(
    DashboardPage.SUBJECTS,
    DashboardPage.CREDIT_CLASSES,
    DashboardPage.STUDENT_GRADES,
    DashboardPage.REPORTS,
    DashboardPage.COURSE_REGISTRATION,
)
write_access = AllowPages(DashboardPage.SUBJECTS)


@router.get("")
async def list_subjects(
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(read_access),
):
    conn = await manager.shared()
    return {"success": True, "subjects": await subject_service.list_subjects(conn)}


@router.post("")
async def create_subject(
    payload: SubjectUpsert,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(write_access),
):
    error = payload.validation_error()
    if error:
        raise PortalError(error)

    await subject_service.create_subject(await manager.shared(), payload)
    return {"success": True, "message": "Subject added successfully"}


@router.put("")
async def update_subject(
    payload: SubjectUpsert,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(write_access),
):
    error = payload.validation_error()
    if error:
        raise PortalError(error)

    await subject_service.update_subject(await manager.shared(), payload)
    return {"success": True, "message": "Subject updated successfully"}


@router.delete("")
async def delete_subject(
    subjectId: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(write_access),
):
    if not subjectId:
        raise PortalError("Subject ID parameter is required")

    await subject_service.delete_subject(await manager.shared(), subjectId)
    return {"success": True, "message": "Subject deleted successfully"}
