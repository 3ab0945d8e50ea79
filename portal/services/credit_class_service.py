# portal/services/credit_class_service.py

from typing import Optional

from loguru import logger
from sqlalchemy import delete, func, insert, update
from sqlmodel import select

from portal.core.database import ServerConnection
from portal.core.errors import PortalError
from portal.models.credit_class import CreditClass
from portal.models.enrollment import Enrollment
from portal.models.lecturer import Lecturer
from portal.models.subject import Subject
from portal.schemas.credit_class import CreditClassUpsert


def credit_class_columns():
    return [
        CreditClass.credit_class_id,
        CreditClass.academic_year,
        CreditClass.semester,
        CreditClass.subject_id,
        Subject.subject_name,
        CreditClass.group_number,
        CreditClass.lecturer_id,
        (Lecturer.last_name + " " + Lecturer.first_name).label("LECTURER_NAME"),
        CreditClass.faculty_id,
        CreditClass.min_students,
        CreditClass.canceled_class,
    ]


def with_subject_and_lecturer(query):
    return (
        query.select_from(CreditClass)
        .outerjoin(Subject, CreditClass.subject_id == Subject.subject_id)
        .outerjoin(Lecturer, CreditClass.lecturer_id == Lecturer.lecturer_id)
    )


async def list_credit_classes(conn: ServerConnection) -> list[dict]:
    query = with_subject_and_lecturer(select(*credit_class_columns())).order_by(
        CreditClass.academic_year.desc(),
        CreditClass.semester,
        CreditClass.subject_id,
        CreditClass.group_number,
    )
    return await conn.fetch_all(query)


async def _duplicate_count(conn: ServerConnection, data: CreditClassUpsert, exclude_id: Optional[int] = None) -> int:
    """Credit classes sharing (year, semester, subject, group, faculty)."""
    query = (
        select(func.count())
        .select_from(CreditClass)
        .where(
            CreditClass.academic_year == data.academic_year,
            CreditClass.semester == data.semester,
            CreditClass.subject_id == data.subject_id,
            CreditClass.group_number == data.group_number,
            CreditClass.faculty_id == data.faculty_id,
        )
    )
    if exclude_id is not None:
        query = query.where(CreditClass.credit_class_id != exclude_id)

    return await conn.scalar(query) or 0


async def create_credit_class(conn: ServerConnection, data: CreditClassUpsert) -> None:
    if await _duplicate_count(conn, data) > 0:
        raise PortalError("A credit class with the same details already exists")

    await conn.execute(insert(CreditClass).values(**data.column_values()))
    logger.info(f"Credit class {data.subject_id}/{data.group_number} added on {conn.key}")


async def update_credit_class(conn: ServerConnection, data: CreditClassUpsert) -> None:
    exists = await conn.scalar(
        select(func.count())
        .select_from(CreditClass)
        .where(CreditClass.credit_class_id == data.credit_class_id)
    )
    if not exists:
        raise PortalError("Credit class not found")

    if await _duplicate_count(conn, data, exclude_id=data.credit_class_id) > 0:
        raise PortalError("A credit class with the same details already exists")

    affected = await conn.execute(
        update(CreditClass)
        .where(CreditClass.credit_class_id == data.credit_class_id)
        .values(**data.column_values())
    )
    if affected == 0:
        raise PortalError("Credit class not found or no changes made")


def parse_ids(raw: Optional[str]) -> list[int]:
    """'1, 2,3' -> [1, 2, 3]."""
    ids = []
    for part in (raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.append(int(part))
        except ValueError:
            raise PortalError(f"Invalid credit class ID: {part}")
    return ids


async def delete_credit_classes(conn: ServerConnection, ids: list[int]) -> int:
    """Deletes all of `ids` or none of them; returns the deleted count."""
    enrolled = await conn.scalar(
        select(func.count())
        .select_from(Enrollment)
        .where(Enrollment.credit_class_id.in_(ids))
    )
    if enrolled:
        raise PortalError("Cannot delete credit classes with existing enrollments")

    deleted = await conn.execute(
        delete(CreditClass).where(CreditClass.credit_class_id.in_(ids))
    )
    logger.info(f"Deleted {deleted} credit class(es) on {conn.key}")
    return deleted
