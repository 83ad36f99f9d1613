"""
Async database access (raw SQL) using asyncpg.

`ConnectionSource` owns the connection pool. The application factory builds
one, opens it on startup and closes it on shutdown (see `api/main.py`), and
hands it to the repositories that need it.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from .errors import StoreFailure

logger = logging.getLogger(__name__)


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class ConnectionSource:
    """
    Bounded pool with scoped acquisition.

    Every connection handed out by `connection()` goes back to the pool when
    the `async with` block exits, whether the block returned or raised.
    """

    def __init__(
        self,
        database_url: str = "",
        *,
        pool_size: int = 4,
        acquire_timeout_s: float | None = 30.0,
        command_timeout_s: float | None = 30.0,
        pool: asyncpg.Pool | None = None,
    ) -> None:
        self._database_url = database_url
        self._pool_size = pool_size
        self._acquire_timeout_s = acquire_timeout_s
        self._command_timeout_s = command_timeout_s
        # An already-built pool can be adopted instead of creating one in open().
        self._pool: asyncpg.Pool | None = pool

    @property
    def pool_size(self) -> int:
        return self._pool_size

    async def open(self) -> None:
        if self._pool is not None:
            return None

        url = (self._database_url or "").strip()
        if not url:
            raise RuntimeError("DATABASE_URL is not set.")
        self._pool = await asyncpg.create_pool(
            dsn=_sanitize_database_url(url),
            min_size=1,
            max_size=self._pool_size,
            command_timeout=self._command_timeout_s,
        )
        logger.info("db_pool_opened max_size=%s", self._pool_size)

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None
        logger.info("db_pool_closed")

    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("DB pool is not initialized. Call open() on startup.")
        return self._pool

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        pool = self.pool()
        # An exhausted pool suspends here until another operation releases.
        try:
            conn = await pool.acquire(timeout=self._acquire_timeout_s)
        except asyncio.TimeoutError as exc:
            raise StoreFailure("Timed out waiting for a database connection.") from exc
        except Exception as exc:
            raise StoreFailure(str(exc) or exc.__class__.__name__) from exc

        try:
            yield conn
        except StoreFailure:
            raise
        except Exception as exc:
            raise StoreFailure(str(exc) or exc.__class__.__name__) from exc
        finally:
            await pool.release(conn)

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        async with self.connection() as conn:
            row = await conn.fetchrow(sql, *args)
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        async with self.connection() as conn:
            rows = await conn.fetch(sql, *args)
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> None:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL). No result returned.
        """
        async with self.connection() as conn:
            await conn.execute(sql, *args)
