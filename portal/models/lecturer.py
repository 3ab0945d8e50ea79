# portal/models/lecturer.py

from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, String


class Lecturer(SQLModel, table=True):
    __tablename__ = "LECTURER"

    lecturer_id: str = Field(
        sa_column=Column("LECTURER_ID", String(10), primary_key=True)
    )

    faculty_id: str = Field(
        sa_column=Column("FACULTY_ID", String(10), nullable=False)
    )

    last_name: str = Field(
        sa_column=Column("LAST_NAME", String(50), nullable=False)
    )

    first_name: str = Field(
        sa_column=Column("FIRST_NAME", String(10), nullable=False)
    )

    academic_degree: Optional[str] = Field(
        default=None,
        sa_column=Column("ACADEMIC_DEGREE", String(20), nullable=True)
    )

    academic_title: Optional[str] = Field(
        default=None,
        sa_column=Column("ACADEMIC_TITLE", String(20), nullable=True)
    )

    specialization: Optional[str] = Field(
        default=None,
        sa_column=Column("SPECIALIZATION", String(50), nullable=True)
    )
