# portal/models/enrollment.py

from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import Boolean, Column, Float, Integer, String


class Enrollment(SQLModel, table=True):
    __tablename__ = "ENROLLMENT"

    credit_class_id: int = Field(
        sa_column=Column("CREDIT_CLASS_ID", Integer, primary_key=True)
    )

    student_id: str = Field(
        sa_column=Column("STUDENT_ID", String(10), primary_key=True)
    )

    attendance_score: Optional[int] = Field(
        default=None,
        sa_column=Column("ATTENDANCE_SCORE", Integer, nullable=True)
    )

    midterm_score: Optional[float] = Field(
        default=None,
        sa_column=Column("MIDTERM_SCORE", Float, nullable=True)
    )

    final_score: Optional[float] = Field(
        default=None,
        sa_column=Column("FINAL_SCORE", Float, nullable=True)
    )

    total_score: Optional[float] = Field(
        default=None,
        sa_column=Column("TOTAL_SCORE", Float, nullable=True)
    )

    canceled_enrollment: bool = Field(
        default=False,
        sa_column=Column("CANCELED_ENROLLMENT", Boolean, nullable=False, default=False)
    )
