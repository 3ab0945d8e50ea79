# portal/models/student.py

from datetime import date
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import Boolean, Column, Date, String, func


class Student(SQLModel, table=True):
    __tablename__ = "STUDENT"

    student_id: str = Field(
        sa_column=Column("STUDENT_ID", String(10), primary_key=True)
    )

    last_name: str = Field(
        sa_column=Column("LAST_NAME", String(50), nullable=False)
    )

    first_name: str = Field(
        sa_column=Column("FIRST_NAME", String(10), nullable=False)
    )

    # bit column: 0 = male, 1 = female
    gender: bool = Field(
        default=False,
        sa_column=Column("GENDER", Boolean, nullable=False, default=False)
    )

    address: Optional[str] = Field(
        default=None,
        sa_column=Column("ADDRESS", String(100), nullable=True)
    )

    date_of_birth: Optional[date] = Field(
        default=None,
        sa_column=Column("DATE_OF_BIRTH", Date, nullable=True)
    )

    class_id: str = Field(
        sa_column=Column("CLASS_ID", String(10), nullable=False)
    )

    suspended: bool = Field(
        default=False,
        sa_column=Column("SUSPENDED", Boolean, nullable=False, default=False)
    )

    password: Optional[str] = Field(
        default="",
        sa_column=Column("PASSWORD", String(40), nullable=True)
    )


def student_full_name(label: str = "FULL_NAME"):
    """LAST_NAME + ' ' + FIRST_NAME with trailing nchar padding removed."""
    return (
        func.rtrim(Student.last_name, type_=String)
        + " "
        + func.rtrim(Student.first_name, type_=String)
    ).label(label)
