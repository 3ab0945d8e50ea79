# portal/main.py

import sys
import time

import psutil
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from portal.core.config import settings
from portal.core.database import DatabaseManager, db_manager, get_db_manager
from portal.core.errors import PortalError, describe_database_error
from portal.core.rate_limiter import limiter
from portal.services.department_service import test_view_access

# Routers
from portal.api.endpoints import (
    academic as academic_router,
    access as access_router,
    auth as auth_router,
    classes as classes_router,
    credit_classes as credit_classes_router,
    departments as departments_router,
    diagnostics as diagnostics_router,
    enrollment as enrollment_router,
    lecturers as lecturers_router,
    reports as reports_router,
    students as students_router,
    subjects as subjects_router,
    tuition as tuition_router,
)

# ------------------------------------------------------------
# LOGURU CONFIGURATION
# ------------------------------------------------------------
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
           "<level>{level}</level> | "
           "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
           "<level>{message}</level>",
    colorize=True,
    backtrace=True,
    diagnose=settings.ENV != "prod",
)

# ------------------------------------------------------------
# FASTAPI APP INIT
# ------------------------------------------------------------
app = FastAPI(
    title="Student Portal Backend",
    version="1.0.0",
    description="Backend for the distributed student management portal (per-department SQL Server fragments).",
)
app.state.limiter = limiter

START_TIME = time.time()


# ------------------------------------------------------------
# ERROR ENVELOPE {"success": false, "error": ...}
# ------------------------------------------------------------
@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    return JSONResponse(exc.to_content(), status_code=exc.status_code)


@app.exception_handler(DBAPIError)
async def database_error_handler(request: Request, exc: DBAPIError):
    status_code, message = describe_database_error(exc)
    logger.exception(f"Database error on {request.method} {request.url.path}")
    return JSONResponse({"success": False, "error": message}, status_code=status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query"))
    message = f"Invalid value for {field}: {first.get('msg')}" if field else "Invalid request"
    return JSONResponse({"success": False, "error": message}, status_code=400)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        {"success": False, "error": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit exceeded for {request.url.path}: {exc.detail}")
    return JSONResponse(
        {"success": False, "error": f"Too many requests: {exc.detail}"},
        status_code=429,
    )


# ------------------------------------------------------------
# METRICS API
# ------------------------------------------------------------
@app.get("/api/metrics", tags=["System"])
async def metrics(manager: DatabaseManager = Depends(get_db_manager)):
    uptime_seconds = int(time.time() - START_TIME)
    cpu_usage = psutil.cpu_percent(interval=None)
    ram_usage = psutil.virtual_memory().percent
    try:
        disk_usage = psutil.disk_usage("/").percent
    except OSError:
        disk_usage = 0

    # Primary server health & latency
    db_start = time.time()
    db_latency = 0
    current_db_status = "Disconnected"

    try:
        conn = await manager.primary()
        await conn.scalar("SELECT 1 AS test")
        current_db_status = "Connected"
        db_latency = round((time.time() - db_start) * 1000, 2)
    except (SQLAlchemyError, PortalError):
        current_db_status = "Error"

    current_time = time.strftime("%H:%M:%S")
    logs = [
        {"time": current_time, "level": "INFO", "msg": f"Health check: DB Latency {db_latency}ms"}
    ]
    if current_db_status != "Connected":
        logs.append({"time": current_time, "level": "ERROR", "msg": "Primary server connection failed."})

    return {
        "status": "Online",
        "version": app.version,
        "cpu": cpu_usage,
        "ram": ram_usage,
        "disk": disk_usage,
        "uptime": uptime_seconds,
        "database": current_db_status,
        "db_latency": db_latency,
        "pools": manager.connection_status(),
        "logs": logs,
    }


# ------------------------------------------------------------
# CORS CONFIGURATION
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "*"],
)

# ------------------------------------------------------------
# REGISTER ROUTERS
# ------------------------------------------------------------
app.include_router(auth_router.router)
app.include_router(access_router.router)
app.include_router(departments_router.router)
app.include_router(classes_router.router)
app.include_router(students_router.router)
app.include_router(subjects_router.router)
app.include_router(lecturers_router.router)
app.include_router(credit_classes_router.router)
app.include_router(academic_router.router)
app.include_router(enrollment_router.router)
app.include_router(reports_router.router)
app.include_router(tuition_router.router)
app.include_router(diagnostics_router.router)


# ------------------------------------------------------------
# APPLICATION STARTUP / SHUTDOWN
# ------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    logger.info("🚀 Starting Student Portal Backend...")

    # Directory view on the primary server
    view = await test_view_access(db_manager)
    if view.get("accessible"):
        logger.success("VIEW_FRAGMENT_LIST reachable.")
    else:
        logger.warning(f"VIEW_FRAGMENT_LIST not reachable: {view.get('error')}")

    logger.success("Backend startup completed.\n")


@app.on_event("shutdown")
async def on_shutdown():
    await db_manager.close_all()
    logger.info("All connection pools closed.")


# ------------------------------------------------------------
# ROOT HEALTH CHECK
# ------------------------------------------------------------
@app.get("/", tags=["System"])
async def root():
    return {
        "status": "ok",
        "service": "Student Portal Backend",
        "version": app.version,
        "message": "Backend running successfully 🚀",
    }
