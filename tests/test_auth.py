import pytest

from portal.core.config import settings
from portal.core.rate_limiter import limiter

TEACHER_INFO = [{"USERNAME": "GV01", "FULL_NAME": "Le Van Cuong", "RoleName": "KHOA"}]
STUDENT_INFO = [{"USERNAME": "N21DCCN001", "FULL_NAME": "Nguyen Van An"}]


async def _login(client, **body):
    return await client.post("/api/auth/login", json=body)


@pytest.mark.asyncio
async def test_teacher_login_issues_session_token(client, directory, procedures):
    procedures.results["SP_LOGIN_INFO"] = TEACHER_INFO

    res = await _login(client, username="GV01", password="secret", department="IT Department")
    assert res.status_code == 200

    data = res.json()
    assert data["success"] is True
    assert data["loginType"] == "teacher"
    assert data["tokenType"] == "bearer"
    assert data["user"]["role"] == "LECTURER"
    assert data["user"]["groupName"] == "KHOA"
    assert data["user"]["serverName"] == "SRV1"
    assert data["message"] == "Teacher login successful. Welcome Le Van Cuong with role KHOA"
    assert procedures.called("SP_LOGIN_INFO") == [{"LoginName": "GV01", "UserRole": "LECTURER"}]

    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['accessToken']}"})
    assert me.status_code == 200
    assert me.json()["roleInfo"]["role"] == "DEPARTMENT"
    assert "classes" in me.json()["allowedPages"]


@pytest.mark.asyncio
async def test_student_login_with_id_only(client, school, procedures):
    procedures.results["SP_LOGIN_INFO"] = STUDENT_INFO

    res = await _login(client, username="N21DCCN001", department="IT Department", isStudentLogin=True)
    assert res.status_code == 200

    user = res.json()["user"]
    assert user["isStudent"] is True
    assert user["role"] == "STUDENT"
    assert user["groupName"] == "STUDENT"
    assert procedures.called("SP_LOGIN_INFO") == [{"LoginName": "N21DCCN001", "UserRole": "STUDENT"}]


@pytest.mark.asyncio
async def test_unknown_student_is_rejected(client, school, procedures):
    res = await _login(client, username="N99", department="IT Department", isStudentLogin=True)
    assert res.status_code == 401
    assert res.json() == {
        "success": False,
        "error": "Invalid student ID or student not found",
        "loginType": "student",
    }


@pytest.mark.asyncio
async def test_teacher_without_login_info_is_rejected(client, directory, procedures):
    # SP_LOGIN_INFO missing on the server: treated as unknown user
    res = await _login(client, username="GV99", password="x", department="IT Department")
    assert res.status_code == 401
    assert res.json()["error"] == "Invalid teacher credentials or user not found"


@pytest.mark.asyncio
async def test_login_validation(client, directory):
    res = await _login(client, username="GV01", password="x")
    assert res.status_code == 400
    assert res.json()["error"] == "Username and department are required"

    res = await _login(client, username="GV01", department="IT Department")
    assert res.status_code == 400
    assert res.json()["error"] == "Password is required for teacher login"

    res = await _login(client, username="GV01", password="x", department="Law Department")
    assert res.status_code == 400
    assert res.json()["error"] == "Invalid department selection"


@pytest.mark.asyncio
async def test_login_description(client):
    res = await client.get("/api/auth/login")
    assert res.status_code == 200
    assert res.json()["requiredFields"] == ["username", "password", "department"]


@pytest.mark.asyncio
async def test_me_requires_token(client):
    res = await client.get("/api/auth/me")
    assert res.status_code in (401, 403)

    res = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401
    assert res.json() == {"success": False, "error": "Could not validate credentials"}


@pytest.mark.asyncio
async def test_session_revalidation(client, directory, procedures, lecturer):
    procedures.results["SP_LOGIN"] = [{"USERNAME": "GV01", "FULL_NAME": "Le Van Cuong", "RoleName": "PGV"}]

    res = await client.post("/api/auth/session", headers=lecturer)
    assert res.status_code == 200
    assert res.json()["user"]["groupName"] == "PGV"
    assert res.json()["accessToken"]
    assert procedures.called("SP_LOGIN")[0] == {"LoginName": "GV01"}

    procedures.results["SP_LOGIN"] = []
    res = await client.post("/api/auth/session", headers=lecturer)
    assert res.status_code == 401
    assert res.json()["error"] == "Session is no longer valid"


@pytest.mark.asyncio
async def test_session_revalidation_needs_a_token(client, directory, procedures):
    procedures.results["SP_LOGIN"] = [{"USERNAME": "KT01", "RoleName": "PKT"}]

    res = await client.post("/api/auth/session", json={"username": "KT01", "department": "IT Department"})
    assert res.status_code in (401, 403)
    assert res.json()["success"] is False
    assert procedures.called("SP_LOGIN") == []


@pytest.mark.asyncio
async def test_legacy_login(client, directory, procedures):
    procedures.results["SP_LOGIN"] = [{"USERNAME": "GV01", "FULL_NAME": "Le Van Cuong", "RoleName": "PGV"}]

    res = await client.post(
        "/api/auth/legacy-login",
        json={"username": "GV01", "password": "wrong", "department": "IT Department"},
    )
    assert res.status_code == 401
    assert res.json()["error"] == "Invalid password for faculty account"

    res = await client.post(
        "/api/auth/legacy-login",
        json={"username": "GV01", "password": settings.LEGACY_ACCOUNT_PASSWORD, "department": "IT Department"},
    )
    assert res.status_code == 200
    assert res.json()["authType"] == "legacy"


@pytest.mark.asyncio
async def test_login_is_rate_limited(client, monkeypatch):
    monkeypatch.setattr(limiter, "enabled", True)
    limiter.reset()

    for _ in range(20):
        res = await _login(client)
        assert res.status_code == 400

    res = await _login(client)
    assert res.status_code == 429
    assert res.json()["success"] is False
