# portal/services/academic_service.py

from portal.core.database import ServerConnection

# Column names SP_GET_ACADEMIC_YEAR has used across schema versions
ACADEMIC_YEAR_COLUMNS = ("ACADEMIC_YEAR", "NAMHOC", "NAM_HOC", "YEAR")


def _academic_year(row: dict):
    return next((row[c] for c in ACADEMIC_YEAR_COLUMNS if row.get(c)), None)


async def list_academic_years(conn: ServerConnection) -> list[dict]:
    rows = await conn.call_procedure("SP_GET_ACADEMIC_YEAR")
    return [
        {"value": _academic_year(row), "label": _academic_year(row)}
        for row in rows
    ]


async def list_semesters(conn: ServerConnection, academic_year: str) -> list[dict]:
    rows = await conn.call_procedure("SP_GET_SEMESTER", {"AcademicYear": academic_year})
    return [
        {"value": str(row["SEMESTER"]), "label": f"Semester {row['SEMESTER']}"}
        for row in rows
    ]


async def list_groups(conn: ServerConnection, academic_year: str, semester: int, subject_id: str) -> list[dict]:
    rows = await conn.call_procedure(
        "SP_GET_GROUP",
        {"AcademicYear": academic_year, "Semester": semester, "SubjectID": subject_id},
    )
    return [
        {"value": str(row["GROUP_NUMBER"]), "label": f"Group {row['GROUP_NUMBER']}"}
        for row in rows
    ]
