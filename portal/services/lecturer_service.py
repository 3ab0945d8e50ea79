# portal/services/lecturer_service.py

from typing import Optional

from sqlalchemy import String, func
from sqlmodel import select

from portal.core.database import ServerConnection
from portal.models.lecturer import Lecturer

# Which lecturers teach which subject codes
SUBJECT_LECTURERS = {
    "AV": ["GV05"],
    "CTDL": ["GV01", "GV07"],
    "DSA": ["GV01"],
    "MMT": ["GV02", "GV08"],
    "CSDL": ["GV02", "GV07"],
    "OOP": ["GV01", "GV06"],
    "WEB": ["GV03", "GV06"],
    "LTW": ["GV03", "GV06"],
    "AI": ["GV04", "GV08"],
    "SE": ["GV04"],
    "OS": ["GV03"],
    "HDH": ["GV03"],
    "XLA": ["GV05"],
    "KTDH": ["GV05"],
}


def lecturer_full_name(label: str = "FULL_NAME"):
    return (
        func.rtrim(Lecturer.last_name, type_=String)
        + " "
        + func.rtrim(Lecturer.first_name, type_=String)
    ).label(label)


def subject_codes_for(lecturer_id: str) -> list[str]:
    lecturer_id = (lecturer_id or "").strip()
    return [code for code, ids in SUBJECT_LECTURERS.items() if lecturer_id in ids]


async def list_lecturers(conn: ServerConnection, subject_id: Optional[str] = None) -> Optional[list[dict]]:
    """
    Lecturers, optionally limited to those teaching `subject_id`.
    Returns None when the subject has no lecturers on record.
    """
    query = select(
        Lecturer.lecturer_id,
        Lecturer.faculty_id,
        Lecturer.last_name,
        Lecturer.first_name,
        Lecturer.academic_degree,
        Lecturer.academic_title,
        Lecturer.specialization,
        lecturer_full_name(),
    )

    if subject_id:
        lecturer_ids = SUBJECT_LECTURERS.get(subject_id, [])
        if not lecturer_ids:
            return None
        query = query.where(Lecturer.lecturer_id.in_(lecturer_ids))

    rows = await conn.fetch_all(query.order_by(Lecturer.last_name, Lecturer.first_name))

    return [
        {**row, "SUBJECT_CODES": subject_codes_for(row["LECTURER_ID"])}
        for row in rows
    ]
