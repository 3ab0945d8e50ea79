# portal/models/student_class.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, String


class StudentClass(SQLModel, table=True):
    """Administrative class (cohort) a student belongs to."""
    __tablename__ = "CLASS"

    class_id: str = Field(
        sa_column=Column("CLASS_ID", String(10), primary_key=True)
    )

    class_name: str = Field(
        sa_column=Column("CLASS_NAME", String(100), nullable=False)
    )

    course_year: str = Field(
        sa_column=Column("COURSE_YEAR", String(9), nullable=False)
    )

    faculty_id: str = Field(
        sa_column=Column("FACULTY_ID", String(10), nullable=False)
    )
