# portal/core/database.py

import asyncio
from typing import Any, Callable, Mapping, Optional, Sequence

from loguru import logger
from sqlalchemy import text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from portal.core.config import settings
from portal.core.db_config import (
    ServerConfig,
    config_for_user,
    department_config,
    odbc_connection_string,
    primary_config,
    student_config,
)
from portal.core.errors import DatabaseConnectionError, driver_message

PRIMARY_KEY = "primary"

# SQL Server allows 2100 bind parameters per request and 1000 rows per VALUES list
MAX_BIND_PARAMS = 2000
MAX_VALUES_ROWS = 1000


def student_key(server_name: str) -> str:
    return f"student_{server_name}"



# ----------------------------------------------------
# Engine factory (one pooled engine per server key)
# ----------------------------------------------------
def create_server_engine(config: ServerConfig) -> AsyncEngine:
    url = URL.create(
        "mssql+aioodbc",
        query={"odbc_connect": odbc_connection_string(config)},
    )
    return create_async_engine(
        url,
        echo=False,
        pool_size=settings.DB_POOL_SIZE,
        pool_pre_ping=True,
    )


def _exec_arguments(params: Mapping[str, Any]) -> str:
    return ", ".join(f"@{name} = :{name}" for name in params)


def table_insert_batches(
    table: str,
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
) -> list[tuple[str, dict[str, Any]]]:
    """INSERT statements for `rows`, each within the bind-parameter and VALUES limits."""
    per_batch = max(1, min(MAX_VALUES_ROWS, MAX_BIND_PARAMS // max(len(columns), 1)))
    column_list = ", ".join(columns)
    batches = []

    for start in range(0, len(rows), per_batch):
        params: dict[str, Any] = {}
        values = []
        for i, row in enumerate(rows[start:start + per_batch], start=start):
            placeholders = []
            for j, value in enumerate(row):
                bind = f"r{i}_{j}"
                params[bind] = value
                placeholders.append(f":{bind}")
            values.append(f"({', '.join(placeholders)})")
        batches.append((f"INSERT INTO {table} ({column_list}) VALUES {', '.join(values)};", params))

    return batches



# ----------------------------------------------------
# Statement runner bound to one server
# ----------------------------------------------------
class ServerConnection:
    """
    Runs statements against one server's pool.
    `statement` may be a SQLAlchemy Core construct or a raw SQL string.
    Rows come back as plain dicts keyed by column name.
    """

    def __init__(self, key: str, engine: AsyncEngine):
        self.key = key
        self.engine = engine

    @staticmethod
    def _compile(statement):
        return text(statement) if isinstance(statement, str) else statement

    @staticmethod
    def _column_names(statement, result) -> list[str]:
        """Database column names (STUDENT_ID), not ORM attribute names (student_id)."""
        keys = list(result.keys())
        selected = getattr(statement, "selected_columns", None)
        if selected is None or len(selected) != len(keys):
            return keys
        return [getattr(column, "name", None) or key for column, key in zip(selected, keys)]

    async def fetch_all(self, statement, params: Optional[Mapping[str, Any]] = None) -> list[dict]:
        async with self.engine.connect() as conn:
            if params:
                result = await conn.execute(self._compile(statement), dict(params))
            else:
                result = await conn.execute(self._compile(statement))
            names = self._column_names(statement, result)
            return [dict(zip(names, row)) for row in result.all()]

    async def fetch_one(self, statement, params: Optional[Mapping[str, Any]] = None) -> Optional[dict]:
        rows = await self.fetch_all(statement, params)
        return rows[0] if rows else None

    async def scalar(self, statement, params: Optional[Mapping[str, Any]] = None) -> Any:
        async with self.engine.connect() as conn:
            if params:
                result = await conn.execute(self._compile(statement), dict(params))
            else:
                result = await conn.execute(self._compile(statement))
            return result.scalar()

    async def execute(self, statement, params: Optional[Mapping[str, Any]] = None) -> int:
        """Runs a write inside a transaction and returns the affected row count."""
        async with self.engine.begin() as conn:
            if params:
                result = await conn.execute(self._compile(statement), dict(params))
            else:
                result = await conn.execute(self._compile(statement))
            return result.rowcount

    async def call_procedure(self, name: str, params: Optional[Mapping[str, Any]] = None) -> list[dict]:
        params = dict(params or {})
        sql = f"SET NOCOUNT ON; EXEC {name} {_exec_arguments(params)}".rstrip()

        async with self.engine.begin() as conn:
            result = await conn.execute(text(sql), params)
            if not result.returns_rows:
                return []
            return [dict(row) for row in result.mappings().all()]

    async def call_procedure_status(self, name: str, params: Optional[Mapping[str, Any]] = None) -> Optional[int]:
        """Executes a procedure and returns its RETURN value."""
        params = dict(params or {})
        sql = (
            "SET NOCOUNT ON; DECLARE @return_value INT; "
            f"EXEC @return_value = {name} {_exec_arguments(params)}; "
            "SELECT @return_value AS return_value"
        )

        async with self.engine.begin() as conn:
            result = await conn.execute(text(sql), params)
            return result.scalar()

    async def call_procedure_with_table(
        self,
        name: str,
        param_name: str,
        type_name: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
    ) -> list[dict]:
        """
        Passes `rows` as a table-valued parameter of user type `type_name`.

        A table variable lives for one batch, and a batch carries at most 2100
        bind parameters. Rows are staged in a session temp table shaped like
        the type, filled in bounded batches, then copied into the table
        variable by the batch that runs the EXEC.
        The create and EXEC batches must stay parameterless: a parameterized
        batch runs through sp_executesql and its temp tables die with it.
        """
        staging = f"#{param_name}"
        column_list = ", ".join(columns)

        async with self.engine.begin() as conn:
            await conn.execute(text(
                f"SET NOCOUNT ON; "
                f"IF OBJECT_ID('tempdb..{staging}') IS NOT NULL DROP TABLE {staging}; "
                f"DECLARE @{param_name} {type_name}; "
                f"SELECT * INTO {staging} FROM @{param_name};"
            ))

            for sql, params in table_insert_batches(staging, columns, rows):
                await conn.execute(text(sql), params)

            result = await conn.execute(text(
                f"SET NOCOUNT ON; DECLARE @{param_name} {type_name}; "
                f"INSERT INTO @{param_name} ({column_list}) SELECT {column_list} FROM {staging}; "
                f"DROP TABLE {staging}; "
                f"EXEC {name} @{param_name} = @{param_name};"
            ))
            if not result.returns_rows:
                return []
            return [dict(row) for row in result.mappings().all()]


# ----------------------------------------------------
# Connection-pool cache
# ----------------------------------------------------
class DatabaseManager:
    """
    Lazily creates and caches one engine per server key:
      - "primary"                 directory lookups (VIEW_FRAGMENT_LIST)
      - "<server_name>"           department (teacher) credentials
      - "student_<server_name>"   student credentials
    Engines live until close()/close_all(). There is no eviction.
    """

    def __init__(self, engine_factory: Callable[[ServerConfig], AsyncEngine] = create_server_engine):
        self._engine_factory = engine_factory
        self._engines: dict[str, AsyncEngine] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def get_engine(self, key: str, config: ServerConfig) -> AsyncEngine:
        engine = self._engines.get(key)
        if engine is not None:
            return engine

        # Concurrent first requests for one key share a single connect attempt
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            engine = self._engines.get(key)
            if engine is None:
                engine = await self._connect(key, config)
                self._engines[key] = engine
            return engine

    async def _connect(self, key: str, config: ServerConfig) -> AsyncEngine:
        logger.info(f"Connecting to {key} ({config.address})...")
        engine = self._engine_factory(config)

        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to connect to {key}: {driver_message(e)}")
            await engine.dispose()
            raise DatabaseConnectionError(key, driver_message(e)) from e

        logger.success(f"Connected to {key} successfully")
        return engine

    async def connection(self, key: str, config: ServerConfig) -> ServerConnection:
        engine = await self.get_engine(key, config)
        return ServerConnection(key, engine)

    async def primary(self) -> ServerConnection:
        return await self.connection(PRIMARY_KEY, primary_config())

    async def department(self, server_name: str) -> ServerConnection:
        return await self.connection(server_name, department_config(server_name))

    async def student(self, server_name: str) -> ServerConnection:
        return await self.connection(student_key(server_name), student_config(server_name))

    async def for_user(self, server_name: str, is_student: bool = False) -> ServerConnection:
        key = student_key(server_name) if is_student else server_name
        return await self.connection(key, config_for_user(server_name, is_student))

    async def shared(self) -> ServerConnection:
        """Server holding catalogues shared by every department (SUBJECT, LECTURER)."""
        return await self.department(settings.SHARED_SERVER)

    async def close(self, key: str) -> None:
        engine = self._engines.pop(key, None)
        if engine is not None:
            await engine.dispose()
            logger.info(f"Closed connection pool {key}")

    async def close_all(self) -> None:
        for key, engine in list(self._engines.items()):
            try:
                await engine.dispose()
            except Exception:
                logger.exception(f"Error closing connection {key}")
        self._engines.clear()

    async def test_connection(self, key: str, config: ServerConfig) -> bool:
        try:
            conn = await self.connection(key, config)
            await conn.scalar("SELECT 1 AS test")
            return True
        except (SQLAlchemyError, DatabaseConnectionError) as e:
            logger.warning(f"Connection test failed for {key}: {e}")
            return False

    async def test_department_connection(self, server_name: str) -> bool:
        return await self.test_connection(server_name, department_config(server_name))

    def connection_status(self) -> dict[str, str]:
        return {key: engine.pool.status() for key, engine in self._engines.items()}


db_manager = DatabaseManager()


def get_db_manager() -> DatabaseManager:
    return db_manager
