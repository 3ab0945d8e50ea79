# portal/services/class_service.py

from typing import Optional

from loguru import logger
from sqlalchemy import delete, func, insert, update
from sqlmodel import select

from portal.core.database import ServerConnection
from portal.core.errors import PortalError
from portal.models.student import Student, student_full_name
from portal.models.student_class import StudentClass

# SP_CHECK_ID return values
ID_FREE = 0
ID_IN_CURRENT_DEPARTMENT = 1
ID_IN_OTHER_DEPARTMENT = 2


async def check_id(conn: ServerConnection, value: str, id_type: str) -> Optional[int]:
    """Asks SP_CHECK_ID where an identifier is already in use (see ID_* codes)."""
    return await conn.call_procedure_status("SP_CHECK_ID", {"ID": value, "Type": id_type})


# ------------------------------------------------------------
# Queries
# ------------------------------------------------------------
async def list_classes(conn: ServerConnection, class_id: Optional[str] = None) -> list[dict]:
    query = select(
        StudentClass.class_id,
        StudentClass.class_name,
        StudentClass.course_year,
        StudentClass.faculty_id,
    )
    if class_id:
        query = query.where(StudentClass.class_id == class_id)

    return await conn.fetch_all(query.order_by(StudentClass.class_id))


async def list_class_students(conn: ServerConnection, class_id: str) -> list[dict]:
    return await conn.fetch_all(
        select(Student.student_id, student_full_name())
        .where(Student.class_id == class_id)
        .order_by(Student.first_name, Student.last_name)
    )


async def count_class_students(conn: ServerConnection, class_id: str) -> int:
    count = await conn.scalar(
        select(func.count()).select_from(Student).where(Student.class_id == class_id)
    )
    return count or 0


# ------------------------------------------------------------
# Mutations
# ------------------------------------------------------------
async def create_class(
    conn: ServerConnection,
    class_id: str,
    class_name: str,
    course_year: str,
    faculty_id: str,
) -> None:
    status = await check_id(conn, class_id, "CLASS_ID")
    if status == ID_IN_CURRENT_DEPARTMENT:
        raise PortalError("Class ID already exists in current department")
    if status == ID_IN_OTHER_DEPARTMENT:
        raise PortalError("Class ID already exists in another department")

    await conn.execute(
        insert(StudentClass).values(
            class_id=class_id,
            class_name=class_name,
            course_year=course_year,
            faculty_id=faculty_id,
        )
    )
    logger.info(f"Class {class_id} added on {conn.key}")


async def update_class(conn: ServerConnection, class_id: str, class_name: str, course_year: str) -> None:
    affected = await conn.execute(
        update(StudentClass)
        .where(StudentClass.class_id == class_id)
        .values(class_name=class_name, course_year=course_year)
    )
    if affected == 0:
        raise PortalError("Class not found")


async def delete_class(conn: ServerConnection, class_id: str) -> None:
    """Classes that still have students are kept."""
    student_count = await count_class_students(conn, class_id)
    if student_count > 0:
        raise PortalError(
            f"Cannot delete class. It has {student_count} student(s) enrolled.",
            hasStudents=True,
            studentCount=student_count,
        )

    affected = await conn.execute(
        delete(StudentClass).where(StudentClass.class_id == class_id)
    )
    if affected == 0:
        raise PortalError("Class not found")

    logger.info(f"Class {class_id} deleted on {conn.key}")
