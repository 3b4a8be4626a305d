"""
Async database access helpers (raw SQL) using asyncpg.

`Database` owns the connection pool. `main.create_app()` builds one per
process, opens it in the app lifespan and closes it on shutdown; route
handlers receive it through `get_database` instead of a module global.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import asyncpg
from fastapi import Request

from .config import Settings

logger = logging.getLogger(__name__)

# Failures that mean "the database operation failed" rather than a bug.
DB_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)

# Anything with fetchrow/fetch/execute: the pool itself or a checked-out connection.
Executor = Any


def _ssl_mode(settings: Settings) -> str | bool:
    if not settings.db_encrypt:
        return False
    return "require" if settings.db_trust_server_certificate else "verify-full"


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Database:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._pool: asyncpg.Pool | None = None

    def _connect_kwargs(self) -> dict[str, Any]:
        s = self._settings
        kwargs: dict[str, Any] = {
            "min_size": s.db_pool_min_size,
            "max_size": s.db_pool_max_size,
            "command_timeout": s.db_command_timeout,
        }
        if s.database_url:
            # TLS comes from the DSN's own sslmode.
            kwargs["dsn"] = s.database_url
        else:
            kwargs.update(
                host=s.db_server,
                port=s.db_port,
                user=s.db_user,
                password=s.db_password,
                database=s.db_database,
                ssl=_ssl_mode(s),
            )
        return kwargs

    async def connect(self) -> None:
        if self._pool is not None:
            return None
        self._pool = await asyncpg.create_pool(**self._connect_kwargs())
        logger.info("Connected to database.")

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("DB pool is not initialized. Call connect() on startup.")
        return self._pool

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Check out one connection and run everything issued on it in a single
        transaction. Commits on normal exit, rolls back on exception.
        """
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                yield conn

    async def fetch_one(self, sql: str, *args: Any, conn: Executor | None = None) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        row = await (conn if conn is not None else self.pool).fetchrow(sql, *args)
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any, conn: Executor | None = None) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        rows = await (conn if conn is not None else self.pool).fetch(sql, *args)
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any, conn: Executor | None = None) -> str:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL). Returns the command status tag.
        """
        return await (conn if conn is not None else self.pool).execute(sql, *args)


def get_database(request: Request) -> Database:
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database is not configured on app.state.")
    return database
