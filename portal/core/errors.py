# portal/core/errors.py

from sqlalchemy.exc import DBAPIError


class PortalError(Exception):
    """
    Error rendered as the standard failure envelope:
    {"success": false, "error": message, **extra}

    Many handlers report failures with HTTP 200 and success=false,
    so status_code defaults to 200.
    """

    def __init__(self, message: str, status_code: int = 200, **extra):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.extra = extra

    def to_content(self) -> dict:
        return {"success": False, "error": self.message, **self.extra}


class DatabaseConnectionError(PortalError):
    def __init__(self, server_key: str, reason: str):
        super().__init__(f"Cannot connect to server {server_key}: {reason}", status_code=500)
        self.server_key = server_key
        self.reason = reason


def driver_message(exc: Exception) -> str:
    """Raw driver text for a DB exception (SQLAlchemy wraps it in .orig)."""
    return str(getattr(exc, "orig", None) or exc)


def describe_database_error(exc: Exception) -> tuple[int, str]:
    """
    Returns (http_status, user_message) for a database exception.
    Matches the SQL Server messages the stored procedures are known to raise.
    """
    raw = driver_message(exc)

    if "PRIMARY KEY constraint" in raw and "TUITION_PAYMENT_DETAIL" in raw:
        return 400, (
            "A payment record already exists for this student, academic year, "
            "semester, and date. Please choose a different date or check "
            "existing payment records."
        )

    if "INFORMATION NOT FOUND" in raw:
        return 404, (
            "No tuition information found for the specified class, "
            "academic year, and semester."
        )

    if "Could not find stored procedure" in raw or "Invalid object name" in raw:
        return 500, "Database table or stored procedure not found"

    if "Invalid column name" in raw:
        return 500, "Database schema mismatch"

    if "Login failed" in raw or "connection" in raw.lower():
        return 500, "Database connection failed"

    if isinstance(exc, DBAPIError):
        return 500, raw

    return 500, str(exc) or "Unknown database error"
