# portal/services/subject_service.py

from loguru import logger
from sqlalchemy import delete, func, insert, update
from sqlmodel import select

from portal.core.database import ServerConnection
from portal.core.errors import PortalError
from portal.models.credit_class import CreditClass
from portal.models.subject import Subject
from portal.schemas.subject import SubjectUpsert
from portal.services.class_service import ID_IN_CURRENT_DEPARTMENT, check_id

# The subject catalogue is shared: every call here runs on the shared server.


async def list_subjects(conn: ServerConnection) -> list[dict]:
    return await conn.fetch_all(
        select(
            Subject.subject_id,
            Subject.subject_name,
            Subject.theory_hours,
            Subject.practice_hours,
        ).order_by(Subject.subject_id)
    )


async def subject_exists(conn: ServerConnection, subject_id: str) -> bool:
    count = await conn.scalar(
        select(func.count()).select_from(Subject).where(Subject.subject_id == subject_id)
    )
    return bool(count)


async def create_subject(conn: ServerConnection, data: SubjectUpsert) -> None:
    if await check_id(conn, data.subject_id, "SUBJECT_ID") == ID_IN_CURRENT_DEPARTMENT:
        raise PortalError("Subject ID already exists")

    await conn.execute(
        insert(Subject).values(
            subject_id=data.subject_id,
            subject_name=data.subject_name,
            theory_hours=data.theory_hours,
            practice_hours=data.practice_hours,
        )
    )
    logger.info(f"Subject {data.subject_id} added")


async def update_subject(conn: ServerConnection, data: SubjectUpsert) -> None:
    if not await subject_exists(conn, data.subject_id):
        raise PortalError("Subject not found")

    await conn.execute(
        update(Subject)
        .where(Subject.subject_id == data.subject_id)
        .values(
            subject_name=data.subject_name,
            theory_hours=data.theory_hours,
            practice_hours=data.practice_hours,
        )
    )


async def delete_subject(conn: ServerConnection, subject_id: str) -> None:
    if not await subject_exists(conn, subject_id):
        raise PortalError("Subject not found")

    references = await conn.scalar(
        select(func.count()).select_from(CreditClass).where(CreditClass.subject_id == subject_id)
    )
    if references:
        raise PortalError("Cannot delete subject: it is referenced by credit classes")

    await conn.execute(delete(Subject).where(Subject.subject_id == subject_id))
    logger.info(f"Subject {subject_id} deleted")
