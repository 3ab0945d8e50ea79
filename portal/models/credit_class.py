# portal/models/credit_class.py

from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import Boolean, Column, Integer, String


class CreditClass(SQLModel, table=True):
    """A subject offering (group) students register for in a semester."""
    __tablename__ = "CREDIT_CLASS"

    credit_class_id: Optional[int] = Field(
        default=None,
        sa_column=Column("CREDIT_CLASS_ID", Integer, primary_key=True, autoincrement=True)
    )

    academic_year: str = Field(
        sa_column=Column("ACADEMIC_YEAR", String(9), nullable=False)
    )

    semester: int = Field(
        sa_column=Column("SEMESTER", Integer, nullable=False)
    )

    subject_id: str = Field(
        sa_column=Column("SUBJECT_ID", String(10), nullable=False)
    )

    group_number: int = Field(
        sa_column=Column("GROUP_NUMBER", Integer, nullable=False)
    )

    lecturer_id: str = Field(
        sa_column=Column("LECTURER_ID", String(10), nullable=False)
    )

    faculty_id: str = Field(
        sa_column=Column("FACULTY_ID", String(10), nullable=False)
    )

    min_students: int = Field(
        sa_column=Column("MIN_STUDENTS", Integer, nullable=False)
    )

    canceled_class: bool = Field(
        default=False,
        sa_column=Column("CANCELED_CLASS", Boolean, nullable=False, default=False)
    )
