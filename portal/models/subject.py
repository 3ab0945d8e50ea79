# portal/models/subject.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Integer, String


class Subject(SQLModel, table=True):
    __tablename__ = "SUBJECT"

    subject_id: str = Field(
        sa_column=Column("SUBJECT_ID", String(10), primary_key=True)
    )

    subject_name: str = Field(
        sa_column=Column("SUBJECT_NAME", String(50), nullable=False)
    )

    theory_hours: int = Field(
        default=0,
        sa_column=Column("THEORY_HOURS", Integer, nullable=False, default=0)
    )

    practice_hours: int = Field(
        default=0,
        sa_column=Column("PRACTICE_HOURS", Integer, nullable=False, default=0)
    )
