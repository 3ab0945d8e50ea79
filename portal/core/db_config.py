# portal/core/db_config.py

from typing import Optional

from pydantic import BaseModel

from portal.core.config import settings


class ServerConfig(BaseModel):
    """Connection settings for one SQL Server instance."""

    server: str
    instance_name: Optional[str] = None
    database: str
    user: str
    password: str
    encrypt: bool = False
    trust_server_certificate: bool = True

    @property
    def address(self) -> str:
        if self.instance_name:
            return f"{self.server}\\{self.instance_name}"
        return self.server


def _build_config(server_name: str, user: str, password: str) -> ServerConfig:
    server, instance = server_name, None

    # Named instances arrive as "HOST\INSTANCE"
    if "\\" in server_name:
        server, instance = server_name.split("\\", 1)

    return ServerConfig(
        server=server,
        instance_name=instance,
        database=settings.DATABASE_NAME,
        user=user,
        password=password,
        encrypt=settings.DB_ENCRYPT,
        trust_server_certificate=settings.DB_TRUST_SERVER_CERTIFICATE,
    )


# ----------------------------------------------------
# Factories
# ----------------------------------------------------
def primary_config() -> ServerConfig:
    return _build_config(
        settings.PRIMARY_SERVER,
        settings.PRIMARY_DB_USER,
        settings.PRIMARY_DB_PASSWORD,
    )


def department_config(server_name: str) -> ServerConfig:
    return _build_config(
        server_name,
        settings.DEPARTMENT_DB_USER,
        settings.DEPARTMENT_DB_PASSWORD,
    )


def student_config(server_name: str) -> ServerConfig:
    return _build_config(
        server_name,
        settings.STUDENT_DB_USER,
        settings.STUDENT_DB_PASSWORD,
    )


def config_for_user(server_name: str, is_student: bool = False) -> ServerConfig:
    if is_student:
        return student_config(server_name)
    return department_config(server_name)


def validate_config(config: ServerConfig) -> tuple[bool, list[str]]:
    errors = []

    if not config.server:
        errors.append("Server name is required")
    if not config.user:
        errors.append("Username is required")
    if not config.password:
        errors.append("Password is required")

    return len(errors) == 0, errors


def odbc_connection_string(config: ServerConfig) -> str:
    parts = [
        f"DRIVER={{{settings.ODBC_DRIVER}}}",
        f"SERVER={config.address}",
        f"DATABASE={config.database}",
        f"UID={config.user}",
        f"PWD={config.password}",
        f"Encrypt={'yes' if config.encrypt else 'no'}",
        f"TrustServerCertificate={'yes' if config.trust_server_certificate else 'no'}",
        f"Connection Timeout={settings.DB_CONNECT_TIMEOUT}",
    ]
    return ";".join(parts)


def display_string(config: ServerConfig) -> str:
    """Connection summary safe to show in diagnostics (no password)."""
    return f"Server: {config.address}, User: {config.user}, Database: {config.database}"


# ----------------------------------------------------
# Static department/server fallback map
# ----------------------------------------------------
DEPARTMENT_SERVER_MAP = {
    "IT Department": "MSI\\MSSQLSERVER1",
    "Information Technology Department": "MSI\\MSSQLSERVER1",
    "Telecommunications Department": "MSI\\MSSQLSERVER2",
    "Accounting Department": "MSI\\MSSQLSERVER3",
}


def server_name_for_department(department_name: str) -> str:
    return DEPARTMENT_SERVER_MAP.get(department_name, department_name)


def department_for_server(server_name: str) -> str:
    for department, server in DEPARTMENT_SERVER_MAP.items():
        if server == server_name:
            return department
    return server_name
