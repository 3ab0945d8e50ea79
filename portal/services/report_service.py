# portal/services/report_service.py

from typing import Awaitable, Callable, Optional

from loguru import logger
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from portal.core.database import ServerConnection
from portal.models.credit_class import CreditClass
from portal.models.enrollment import Enrollment
from portal.models.student import Student, student_full_name
from portal.models.subject import Subject
from portal.services.credit_class_service import credit_class_columns, with_subject_and_lecturer
from portal.services.grade_service import (
    effective_total,
    gender_label,
    letter_grade,
    split_full_name,
)


async def first_successful(attempts: list[tuple[str, Callable[[], Awaitable[list[dict]]]]]) -> list[dict]:
    """
    Runs each (label, attempt) in order until one succeeds.
    The last attempt's error propagates.
    """
    for label, attempt in attempts[:-1]:
        try:
            return await attempt()
        except SQLAlchemyError as e:
            logger.warning(f"{label} failed, trying next source: {e}")

    return await attempts[-1][1]()


def _row_full_name(row: dict) -> str:
    return row.get("FULL_NAME") or f"{row.get('LAST_NAME') or ''} {row.get('FIRST_NAME') or ''}".strip()


async def _enrollment_by_credit_class_query(
    conn: ServerConnection,
    academic_year: str,
    semester: int,
    group_number: int,
    subject_id: str,
    faculty_id: str,
) -> list[dict]:
    query = (
        select(
            Enrollment.credit_class_id,
            Enrollment.student_id,
            student_full_name(),
            Student.last_name,
            Student.first_name,
            Student.gender,
            Student.class_id,
            Enrollment.attendance_score,
            Enrollment.midterm_score,
            Enrollment.final_score,
            Enrollment.total_score,
        )
        .select_from(Enrollment)
        .join(CreditClass, Enrollment.credit_class_id == CreditClass.credit_class_id)
        .join(Student, Enrollment.student_id == Student.student_id)
        .where(
            CreditClass.academic_year == academic_year,
            CreditClass.semester == semester,
            CreditClass.group_number == group_number,
            CreditClass.subject_id == subject_id,
            CreditClass.faculty_id == faculty_id,
        )
        .order_by(Student.last_name, Student.first_name)
    )
    return await conn.fetch_all(query)


def _enrollment_procedure(conn, academic_year, semester, group_number, subject_id, faculty_id):
    return lambda: conn.call_procedure(
        "SP_STUDENT_ENROLLMENT_LIST_BY_CREDIT_CLASS",
        {
            "AcademicYear": academic_year,
            "Semester": semester,
            "GroupNumber": group_number,
            "SubjectID": subject_id,
            "FacultyID": faculty_id,
        },
    )


# ------------------------------------------------------------
# Students of one credit class
# ------------------------------------------------------------
async def class_students_report(
    conn: ServerConnection,
    academic_year: str,
    semester: int,
    group_number: int,
    subject_id: str,
    faculty_id: str,
) -> list[dict]:
    args = (conn, academic_year, semester, group_number, subject_id, faculty_id)
    rows = await first_successful([
        ("SP_STUDENT_ENROLLMENT_LIST_BY_CREDIT_CLASS", _enrollment_procedure(*args)),
        ("Direct enrollment query", lambda: _enrollment_by_credit_class_query(*args)),
    ])

    students = []
    for row in rows:
        last_name, first_name = split_full_name(_row_full_name(row))
        students.append({
            "id": row.get("STUDENT_ID") or "",
            "lastName": last_name,
            "firstName": first_name,
            "gender": gender_label(row.get("GENDER")),
            "classCode": row.get("CLASS_ID") or "N/A",
            "creditClassId": row.get("CREDIT_CLASS_ID") or 0,
            "attendanceScore": row.get("ATTENDANCE_SCORE") or 0,
            "midtermScore": row.get("MIDTERM_SCORE") or 0,
            "finalScore": row.get("FINAL_SCORE") or 0,
            "totalScore": row.get("TOTAL_SCORE") or 0,
        })
    return students


# ------------------------------------------------------------
# Credit classes with registration counts
# ------------------------------------------------------------
async def credit_classes_report(
    conn: ServerConnection,
    academic_year: Optional[str] = None,
    semester: Optional[int] = None,
) -> list[dict]:
    registered = (
        select(func.count())
        .select_from(Enrollment)
        .where(Enrollment.credit_class_id == CreditClass.credit_class_id)
        .scalar_subquery()
        .label("REGISTERED_STUDENTS")
    )

    query = with_subject_and_lecturer(select(*credit_class_columns(), registered))
    if academic_year:
        query = query.where(CreditClass.academic_year == academic_year)
    if semester is not None:
        query = query.where(CreditClass.semester == semester)

    query = query.order_by(
        CreditClass.academic_year.desc(),
        CreditClass.semester,
        Subject.subject_name,
        CreditClass.group_number,
    )
    return await conn.fetch_all(query)


# ------------------------------------------------------------
# Grade slip of one student
# ------------------------------------------------------------
async def _student_grades_query(conn: ServerConnection, student_id: str) -> list[dict]:
    query = (
        select(
            Enrollment.credit_class_id,
            Enrollment.student_id,
            CreditClass.subject_id,
            Subject.subject_name,
            Enrollment.attendance_score,
            Enrollment.midterm_score,
            Enrollment.final_score,
            Enrollment.total_score,
            CreditClass.academic_year,
            CreditClass.semester,
        )
        .select_from(Enrollment)
        .join(CreditClass, Enrollment.credit_class_id == CreditClass.credit_class_id)
        .join(Subject, CreditClass.subject_id == Subject.subject_id)
        .where(
            Enrollment.student_id == student_id,
            or_(
                Enrollment.canceled_enrollment.is_(None),
                Enrollment.canceled_enrollment == False,  # noqa: E712
            ),
        )
        .order_by(
            CreditClass.academic_year.desc(),
            CreditClass.semester.desc(),
            Subject.subject_name,
        )
    )
    return await conn.fetch_all(query)


async def student_grades_report(conn: ServerConnection, student_id: str) -> list[dict]:
    rows = await first_successful([
        ("SP_GET_STUDENT_GRADES", lambda: conn.call_procedure("SP_GET_STUDENT_GRADES", {"StudentID": student_id})),
        ("Direct grade query", lambda: _student_grades_query(conn, student_id)),
    ])

    grades = []
    for row in rows:
        attendance = row.get("ATTENDANCE_SCORE") or 0
        midterm = row.get("MIDTERM_SCORE") or 0
        final_exam = row.get("FINAL_SCORE") or 0
        total = effective_total(row.get("TOTAL_SCORE"), attendance, midterm, final_exam)

        grades.append({
            "creditClassId": row.get("CREDIT_CLASS_ID"),
            "subjectId": row.get("SUBJECT_ID"),
            "subjectName": row.get("SUBJECT_NAME"),
            "attendance": attendance,
            "midterm": midterm,
            "finalExam": final_exam,
            "totalGrade": total,
            "letterGrade": letter_grade(total),
            "academicYear": row.get("ACADEMIC_YEAR"),
            "semester": row.get("SEMESTER"),
        })
    return grades


# ------------------------------------------------------------
# Grades of one subject group
# ------------------------------------------------------------
async def subject_grades_report(
    conn: ServerConnection,
    academic_year: str,
    semester: int,
    group_number: int,
    subject_id: str,
    faculty_id: str,
) -> list[dict]:
    args = (conn, academic_year, semester, group_number, subject_id, faculty_id)
    base = {"AcademicYear": academic_year, "Semester": semester, "SubjectID": subject_id}

    rows = await first_successful([
        ("SP_SUBJECT_GRADE_REPORT", lambda: conn.call_procedure("SP_SUBJECT_GRADE_REPORT", base)),
        (
            "SP_SUBJECT_GRADE_REPORT with group",
            lambda: conn.call_procedure("SP_SUBJECT_GRADE_REPORT", {**base, "GroupNumber": group_number}),
        ),
        ("SP_STUDENT_ENROLLMENT_LIST_BY_CREDIT_CLASS", _enrollment_procedure(*args)),
        ("Direct enrollment query", lambda: _enrollment_by_credit_class_query(*args)),
    ])

    grades = []
    for row in rows:
        last_name, first_name = split_full_name(_row_full_name(row))
        attendance = row.get("ATTENDANCE_SCORE") or 0
        midterm = row.get("MIDTERM_SCORE") or 0
        final_exam = row.get("FINAL_SCORE") or 0

        grades.append({
            "studentId": row.get("STUDENT_ID") or "",
            "lastName": last_name,
            "firstName": first_name,
            "attendance": attendance,
            "midterm": midterm,
            "finalExam": final_exam,
            "totalGrade": effective_total(row.get("TOTAL_SCORE"), attendance, midterm, final_exam),
        })
    return grades
