# portal/models/faculty.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, String


class Faculty(SQLModel, table=True):
    __tablename__ = "FACULTY"

    faculty_id: str = Field(
        sa_column=Column("FACULTY_ID", String(10), primary_key=True)
    )

    faculty_name: str = Field(
        sa_column=Column("FACULTY_NAME", String(50), nullable=False, unique=True)
    )
