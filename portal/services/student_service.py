# portal/services/student_service.py

from loguru import logger
from sqlalchemy import delete, insert, update
from sqlmodel import select

from portal.core.database import ServerConnection
from portal.core.errors import PortalError
from portal.models.student import Student
from portal.models.student_class import StudentClass
from portal.schemas.student import StudentUpsert
from portal.services.class_service import (
    ID_IN_CURRENT_DEPARTMENT,
    ID_IN_OTHER_DEPARTMENT,
    check_id,
)


async def list_students(conn: ServerConnection) -> list[dict]:
    """Every student of the department with the name of their class."""
    query = (
        select(
            Student.student_id,
            Student.last_name,
            Student.first_name,
            Student.gender,
            Student.address,
            Student.date_of_birth,
            Student.class_id,
            Student.suspended,
            Student.password,
            StudentClass.class_name,
        )
        .select_from(Student)
        .outerjoin(StudentClass, Student.class_id == StudentClass.class_id)
        .order_by(Student.student_id)
    )
    return await conn.fetch_all(query)


async def create_student(conn: ServerConnection, data: StudentUpsert) -> None:
    status = await check_id(conn, data.student_id, "STUDENT_ID")
    if status == ID_IN_CURRENT_DEPARTMENT:
        raise PortalError("Student ID already exists in current department")
    if status == ID_IN_OTHER_DEPARTMENT:
        raise PortalError("Student ID already exists in another department")

    await conn.execute(
        insert(Student).values(student_id=data.student_id, **data.column_values())
    )
    logger.info(f"Student {data.student_id} added on {conn.key}")


async def update_student(conn: ServerConnection, data: StudentUpsert) -> None:
    affected = await conn.execute(
        update(Student)
        .where(Student.student_id == data.student_id)
        .values(**data.column_values())
    )
    if affected == 0:
        raise PortalError("Student not found")


async def delete_student(conn: ServerConnection, student_id: str) -> None:
    affected = await conn.execute(delete(Student).where(Student.student_id == student_id))
    if affected == 0:
        raise PortalError("Student not found")

    logger.info(f"Student {student_id} deleted on {conn.key}")
