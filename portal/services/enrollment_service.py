# portal/services/enrollment_service.py

from loguru import logger
from sqlalchemy import insert, update
from sqlmodel import select

from portal.core.database import ServerConnection
from portal.core.errors import PortalError
from portal.models.credit_class import CreditClass
from portal.models.enrollment import Enrollment
from portal.schemas.enrollment import GradeEntry

GRADE_TABLE_TYPE = "TYPE_ENROLLMENT"
GRADE_TABLE_COLUMNS = [
    "CREDIT_CLASS_ID",
    "STUDENT_ID",
    "ATTENDANCE_SCORE",
    "MIDTERM_SCORE",
    "FINAL_SCORE",
]


# ------------------------------------------------------------
# Grade sheet of one credit class
# ------------------------------------------------------------
async def list_enrollment_by_subject(
    conn: ServerConnection,
    academic_year: str,
    semester: int,
    group_number: int,
    subject_id: str,
) -> list[dict]:
    rows = await conn.call_procedure(
        "SP_ENROLLMENT_LIST_BY_SUBJECT",
        {
            "AcademicYear": academic_year,
            "Semester": semester,
            "GroupNumber": group_number,
            "SubjectID": subject_id,
        },
    )

    # The procedure does not return the subject; the client fills in its name
    return [
        {
            "creditClassId": row.get("CREDIT_CLASS_ID"),
            "studentId": row.get("STUDENT_ID"),
            "studentName": row.get("FULL_NAME"),
            "subjectCode": subject_id,
            "subjectName": "",
            "attendanceGrade": row.get("ATTENDANCE_SCORE") or 0,
            "midtermGrade": row.get("MIDTERM_SCORE") or 0,
            "finalGrade": row.get("FINAL_SCORE") or 0,
            "overallGrade": row.get("TOTAL_SCORE") or 0,
        }
        for row in rows
    ]


async def update_grades(conn: ServerConnection, grades: list[GradeEntry]) -> None:
    rows = [
        [
            g.credit_class_id,
            g.student_id,
            g.attendance_grade,
            g.midterm_grade,
            g.final_grade,
        ]
        for g in grades
    ]
    await conn.call_procedure_with_table(
        "SP_UPDATE_GRADES", "GradeData", GRADE_TABLE_TYPE, GRADE_TABLE_COLUMNS, rows
    )
    logger.info(f"Updated {len(rows)} grade row(s) on {conn.key}")


# ------------------------------------------------------------
# Course registration
# ------------------------------------------------------------
async def list_enrolled_classes(
    conn: ServerConnection,
    student_id: str,
    academic_year: str,
    semester: int,
    faculty_id: str,
) -> list[dict]:
    return await conn.call_procedure(
        "SP_STUDENT_ENROLLED_CREDIT_CLASSES",
        {
            "StudentID": student_id,
            "AcademicYear": academic_year,
            "Semester": semester,
            "FacultyID": faculty_id,
        },
    )


async def enroll(conn: ServerConnection, student_id: str, credit_class_id: int) -> None:
    """
    Registers a student. A previously cancelled registration is
    re-activated instead of inserted again.
    """
    credit_class = await conn.fetch_one(
        select(CreditClass.canceled_class).where(CreditClass.credit_class_id == credit_class_id)
    )
    if not credit_class:
        raise PortalError("Credit class not found")
    if credit_class["CANCELED_CLASS"]:
        raise PortalError("Credit class has been cancelled")

    existing = await conn.fetch_one(
        select(Enrollment.canceled_enrollment).where(
            Enrollment.credit_class_id == credit_class_id,
            Enrollment.student_id == student_id,
        )
    )

    if existing is None:
        await conn.execute(
            insert(Enrollment).values(
                credit_class_id=credit_class_id,
                student_id=student_id,
                canceled_enrollment=False,
            )
        )
    elif existing["CANCELED_ENROLLMENT"]:
        await conn.execute(
            update(Enrollment)
            .where(
                Enrollment.credit_class_id == credit_class_id,
                Enrollment.student_id == student_id,
            )
            .values(canceled_enrollment=False)
        )
    else:
        raise PortalError("Student is already registered for this class")

    logger.info(f"Student {student_id} registered for credit class {credit_class_id}")


async def cancel_enrollment(conn: ServerConnection, student_id: str, credit_class_id: int) -> None:
    affected = await conn.execute(
        update(Enrollment)
        .where(
            Enrollment.credit_class_id == credit_class_id,
            Enrollment.student_id == student_id,
            Enrollment.canceled_enrollment == False,  # noqa: E712
        )
        .values(canceled_enrollment=True)
    )
    if affected == 0:
        raise PortalError("Enrollment not found")

    logger.info(f"Student {student_id} cancelled credit class {credit_class_id}")
