# portal/models/directory.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, String


class DirectoryEntry(SQLModel, table=True):
    """
    One row of VIEW_FRAGMENT_LIST on the primary server.
    The view is built from the merge-replication publications: every
    subscriber server hosts one department (branch) fragment.
    """
    __tablename__ = "VIEW_FRAGMENT_LIST"

    branch_name: str = Field(
        sa_column=Column("BRANCH_NAME", String(255), primary_key=True)
    )

    server_name: str = Field(
        sa_column=Column("SERVER_NAME", String(255), nullable=False)
    )


class Department(SQLModel):
    """Department as handed to routes and stored in the session."""
    branch_name: str
    server_name: str
