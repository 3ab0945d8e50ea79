import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert
from sqlalchemy.exc import ProgrammingError
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import SQLModel

# ------------------------------------------------------------------
# Settings are read at import time: configure them BEFORE importing
# portal.main so the limiter starts disabled and in-memory.
# ------------------------------------------------------------------
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("REDIS_URL", None)
os.environ["SECRET_KEY"] = "test-secret"

from portal.core.database import DatabaseManager, ServerConnection, get_db_manager
from portal.core.rate_limiter import limiter
from portal.core.security import create_access_token
from portal.main import app
from portal.models.credit_class import CreditClass
from portal.models.directory import Department, DirectoryEntry
from portal.models.enrollment import Enrollment
from portal.models.faculty import Faculty
from portal.models.lecturer import Lecturer
from portal.models.student import Student
from portal.models.student_class import StudentClass
from portal.models.subject import Subject
from portal.schemas.auth import SessionUser

IT_DEPARTMENT = Department(branch_name="IT Department", server_name="SRV1")


# ------------------------------------------------------------------
# Stored procedures do not exist on SQLite: they are answered from
# per-test tables. Unknown procedures fail like SQL Server does.
# ------------------------------------------------------------------
class ProcedureStub:
    def __init__(self):
        self.results = {}
        self.return_values = {"SP_CHECK_ID": 0}
        self.calls = []

    def _answer(self, table, name, params):
        self.calls.append((name, dict(params or {})))
        if name not in table:
            raise ProgrammingError(
                f"EXEC {name}", {}, Exception(f"Could not find stored procedure '{name}'")
            )
        value = table[name]
        if isinstance(value, Exception):
            raise value
        return value(dict(params or {})) if callable(value) else value

    def called(self, name):
        return [params for called_name, params in self.calls if called_name == name]

    def install(self, monkeypatch):
        stub = self

        async def call_procedure(conn, name, params=None):
            return stub._answer(stub.results, name, params)

        async def call_procedure_status(conn, name, params=None):
            return stub._answer(stub.return_values, name, params)

        async def call_procedure_with_table(conn, name, param_name, type_name, columns, rows):
            table = [dict(zip(columns, row)) for row in rows]
            return stub._answer(stub.results, name, {param_name: table, "type": type_name})

        monkeypatch.setattr(ServerConnection, "call_procedure", call_procedure)
        monkeypatch.setattr(ServerConnection, "call_procedure_status", call_procedure_status)
        monkeypatch.setattr(ServerConnection, "call_procedure_with_table", call_procedure_with_table)


@pytest.fixture
def procedures(monkeypatch):
    stub = ProcedureStub()
    stub.install(monkeypatch)
    return stub


# ------------------------------------------------------------------
# One SQLite file stands in for the primary and every department server
# ------------------------------------------------------------------
@pytest_asyncio.fixture
async def manager(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path}/portal.db"

    setup_engine = create_async_engine(url)
    async with setup_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    await setup_engine.dispose()

    db = DatabaseManager(engine_factory=lambda config: create_async_engine(url))
    yield db
    await db.close_all()


@pytest_asyncio.fixture
async def seed(manager):
    """Inserts rows: seed(Model(...), Model(...))."""
    async def _seed(*rows):
        conn = await manager.primary()
        for row in rows:
            model = type(row)
            values = {name: getattr(row, name) for name in model.model_fields}
            await conn.execute(insert(model).values(**values))
    return _seed


@pytest_asyncio.fixture
async def directory(seed):
    await seed(
        DirectoryEntry(branch_name="IT Department", server_name="SRV1"),
        DirectoryEntry(branch_name="Accounting Department", server_name="SRV2"),
    )


@pytest_asyncio.fixture
async def school(directory, seed):
    """A small department: one faculty, class, two students, subjects, lecturers, one credit class."""
    await seed(
        Faculty(faculty_id="IT", faculty_name="Information Technology"),
        StudentClass(class_id="D21CQCN01", class_name="Computer Science 1", course_year="2021-2025", faculty_id="IT"),
        StudentClass(class_id="D21CQCN02", class_name="Computer Science 2", course_year="2021-2025", faculty_id="IT"),
        Student(student_id="N21DCCN001", last_name="Nguyen Van", first_name="An", gender=False, class_id="D21CQCN01"),
        Student(student_id="N21DCCN002", last_name="Tran Thi", first_name="Binh", gender=True, class_id="D21CQCN01"),
        Subject(subject_id="CTDL", subject_name="Data Structures", theory_hours=45, practice_hours=15),
        Subject(subject_id="MMT", subject_name="Computer Networks", theory_hours=30, practice_hours=30),
        Lecturer(lecturer_id="GV01", faculty_id="IT", last_name="Le Van", first_name="Cuong"),
        Lecturer(lecturer_id="GV02", faculty_id="IT", last_name="Pham Thi", first_name="Dung"),
        CreditClass(
            credit_class_id=1, academic_year="2024-2025", semester=1, subject_id="CTDL",
            group_number=1, lecturer_id="GV01", faculty_id="IT", min_students=20, canceled_class=False,
        ),
        Enrollment(
            credit_class_id=1, student_id="N21DCCN001", attendance_score=10,
            midterm_score=8.0, final_score=9.0, total_score=None, canceled_enrollment=False,
        ),
    )


# ------------------------------------------------------------------
# HTTP client bound to the test manager
# ------------------------------------------------------------------
@pytest_asyncio.fixture
async def client(manager):
    app.dependency_overrides[get_db_manager] = lambda: manager
    limiter.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """auth_headers(group_name, ...) -> Authorization header for a signed session."""
    def _headers(group_name="KHOA", username="GV01", role="LECTURER", is_student=False):
        user = SessionUser(
            id=username,
            username=username,
            full_name="Test User",
            role=role,
            group_name=group_name,
            department=IT_DEPARTMENT,
            server_name=IT_DEPARTMENT.server_name,
            is_student=is_student,
        )
        token = create_access_token(
            subject=username,
            data={"user": user.model_dump(by_alias=True, mode="json")},
        )
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def staff(auth_headers):
    return auth_headers("KHOA")


@pytest.fixture
def lecturer(auth_headers):
    return auth_headers("PGV")


@pytest.fixture
def student(auth_headers):
    return auth_headers("SV", username="N21DCCN001", role="STUDENT", is_student=True)


@pytest.fixture
def finance(auth_headers):
    return auth_headers("PKT", username="KT01")
