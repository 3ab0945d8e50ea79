# portal/api/endpoints/auth.py

from fastapi import APIRouter, Depends, Request
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from portal.api.deps import get_current_session
from portal.core.config import settings
from portal.core.database import DatabaseManager, get_db_manager
from portal.core.errors import PortalError
from portal.core.rate_limiter import limiter
from portal.core.rbac import get_allowed_pages, get_role_info, permission_role
from portal.core.security import create_access_token
from portal.schemas.auth import LoginRequest, SessionUser
from portal.services.auth_service import authenticate, authenticate_legacy, validate_user_session
from portal.services.department_service import get_department_by_branch_name

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def issue_token(user: SessionUser) -> str:
    return create_access_token(
        subject=user.username,
        data={"user": user.model_dump(by_alias=True, mode="json")},
    )


# -------------------------------------------------------------------
# LOGIN (teachers: username + password, students: student ID only)
# -------------------------------------------------------------------
@router.post("/login")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    payload: LoginRequest,
    manager: DatabaseManager = Depends(get_db_manager),
):
    if not payload.username or not payload.department:
        raise PortalError("Username and department are required", status_code=400)

    if not payload.is_student_login and not payload.password:
        raise PortalError("Password is required for teacher login", status_code=400)

    login_type = "student" if payload.is_student_login else "teacher"

    try:
        department = await get_department_by_branch_name(manager, payload.department)
        if not department:
            raise PortalError("Invalid department selection", status_code=400)

        user, message = await authenticate(
            manager,
            payload.username.strip(),
            payload.password,
            payload.department,
            payload.is_student_login,
        )
    except SQLAlchemyError:
        logger.exception("Login error")
        raise PortalError("Internal server error. Please try again.", status_code=500)

    logger.info(f"{login_type.title()} {user.username} signed in to {department.branch_name}")

    return {
        "success": True,
        "user": user.model_dump(by_alias=True),
        "authType": "multi-database",
        "message": message or "Authentication successful",
        "loginType": login_type,
        "accessToken": issue_token(user),
        "tokenType": "bearer",
        "expiresIn": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }


@router.get("/login")
async def login_info():
    return {
        "message": "Login API endpoint",
        "endpoints": {
            "POST": "/api/auth/login - Authenticate user with username, password, and department",
        },
        "requiredFields": ["username", "password", "department"],
        "authMethod": "SP_LOGIN_INFO stored procedure",
        "databaseType": "Multi-database with dynamic connections",
    }


# -------------------------------------------------------------------
# CURRENT SESSION
# -------------------------------------------------------------------
@router.get("/me")
async def me(current_user: SessionUser = Depends(get_current_session)):
    role = permission_role(current_user)
    return {
        "success": True,
        "user": current_user.model_dump(by_alias=True),
        "roleInfo": get_role_info(role),
        "allowedPages": [p.value for p in get_allowed_pages(role)],
    }


# -------------------------------------------------------------------
# SESSION REVALIDATION (SP_LOGIN for the bearer of the current token)
# -------------------------------------------------------------------
@router.post("/session")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def revalidate_session(
    request: Request,
    manager: DatabaseManager = Depends(get_db_manager),
    current_user: SessionUser = Depends(get_current_session),
):
    user = await validate_user_session(
        manager, current_user.username, current_user.department.branch_name
    )
    if not user:
        raise PortalError("Session is no longer valid", status_code=401)

    return {
        "success": True,
        "user": user.model_dump(by_alias=True),
        "accessToken": issue_token(user),
    }


# -------------------------------------------------------------------
# LEGACY LOGIN (SP_LOGIN with the shared account password)
# -------------------------------------------------------------------
@router.post("/legacy-login")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def legacy_login(
    request: Request,
    payload: LoginRequest,
    manager: DatabaseManager = Depends(get_db_manager),
):
    if not payload.username or not payload.password or not payload.department:
        raise PortalError("Username, password and department are required", status_code=400)

    try:
        user = await authenticate_legacy(manager, payload.username.strip(), payload.password, payload.department)
    except SQLAlchemyError:
        logger.exception("Legacy login error")
        raise PortalError("Internal server error. Please try again.", status_code=500)

    return {
        "success": True,
        "user": user.model_dump(by_alias=True),
        "authType": "legacy",
        "accessToken": issue_token(user),
        "tokenType": "bearer",
        "expiresIn": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }
