"""
Database configuration and statement execution.
Uses the SQLAlchemy 2.0 async engine with a shared connection pool.

Statements are plain SQL text with positional placeholders ``:p1 .. :pN``;
values are passed as a sequence and bound in order.
"""

import os
import re
from functools import lru_cache
from typing import Any, Sequence

from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from shared.config.logging import get_logger
from shared.config.settings import Settings, get_settings

logger = get_logger(__name__)

_PLACEHOLDER_RE = re.compile(r":p(\d+)\b")


def _calculate_pool_size() -> int:
    """
    Calculate pool size based on CPU cores.
    Formula: (2 * CPU cores) + 1, capped at 20 for reasonable limits.
    """
    cores = os.cpu_count() or 4
    return min(cores * 2 + 1, 20)


def bind_values(sql: str, values: Sequence[Any]) -> dict[str, Any]:
    """
    Map positional values onto ``:pN`` placeholders.

    Raises:
        ValueError: If the placeholders in ``sql`` are not exactly p1..pN
            for N == len(values).
    """
    found = {int(n) for n in _PLACEHOLDER_RE.findall(sql)}
    expected = set(range(1, len(values) + 1))
    if found != expected:
        raise ValueError(
            f"Placeholder mismatch: statement uses {sorted(found)} but {len(values)} values were supplied"
        )
    return {f"p{i}": value for i, value in enumerate(values, start=1)}


class Database:
    """
    Thin async executor over a pooled engine.

    Reads run on a plain pooled connection; writes run inside a
    transaction that commits on success and rolls back on error.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    async def fetch_all(self, sql: str, values: Sequence[Any] = ()) -> list[dict[str, Any]]:
        params = bind_values(sql, values)
        async with self.engine.connect() as conn:
            result = await conn.execute(text(sql), params)
            return [dict(row) for row in result.mappings()]

    async def fetch_one(self, sql: str, values: Sequence[Any] = ()) -> dict[str, Any] | None:
        rows = await self.fetch_all(sql, values)
        return rows[0] if rows else None

    async def scalar(self, sql: str, values: Sequence[Any] = ()) -> Any:
        params = bind_values(sql, values)
        async with self.engine.connect() as conn:
            result = await conn.execute(text(sql), params)
            return result.scalar()

    async def execute(self, sql: str, values: Sequence[Any] = ()) -> int:
        """Run a write statement and return the affected row count."""
        params = bind_values(sql, values)
        async with self.engine.begin() as conn:
            result = await conn.execute(text(sql), params)
            return result.rowcount

    async def execute_returning(self, sql: str, values: Sequence[Any] = ()) -> dict[str, Any] | None:
        """Run a write statement ending in RETURNING and return the first row."""
        params = bind_values(sql, values)
        async with self.engine.begin() as conn:
            result = await conn.execute(text(sql), params)
            row = result.mappings().first()
            return dict(row) if row is not None else None

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def table_exists(self, table_name: str) -> bool:
        async with self.engine.connect() as conn:
            return await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).has_table(table_name)
            )

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database pool disposed")


def create_database(settings: Settings | None = None, url: str | None = None) -> Database:
    """
    Build a Database with the configured pool.

    Args:
        settings: Settings to read pool options from (defaults to cached settings).
        url: Overrides ``settings.database_url``.
    """
    settings = settings or get_settings()
    url = url or settings.database_url

    engine_kwargs: dict[str, Any] = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": settings.db_echo,
    }
    if not url.startswith("sqlite"):
        engine_kwargs.update(
            pool_size=settings.db_pool_size or _calculate_pool_size(),
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,  # Wait max N seconds for a pooled connection
            pool_recycle=settings.db_pool_recycle,
        )
    if url.startswith("postgresql+asyncpg"):
        engine_kwargs["connect_args"] = {"timeout": 10}  # Connection establishment timeout

    engine = create_async_engine(url, **engine_kwargs)
    logger.info("Database engine created", dialect=engine.dialect.name)
    return Database(engine)


@lru_cache
def get_database() -> Database:
    """Get the process-wide Database built from settings."""
    return create_database()
