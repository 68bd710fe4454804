from __future__ import annotations

from typing import Optional

from psycopg_pool import AsyncConnectionPool

from app.settings import get_settings

_pool: Optional[AsyncConnectionPool] = None


def _with_connect_timeout(dsn: str, seconds: int) -> str:
    if "connect_timeout=" in dsn:
        return dsn
    sep = "&" if "?" in dsn else "?"
    return f"{dsn}{sep}connect_timeout={seconds}"


def get_pool() -> AsyncConnectionPool:
    """
    Create (if needed) and return the account store pool WITHOUT opening it.
    The app lifespan (or the outbox worker) opens it.
    """
    global _pool
    if _pool is None:
        settings = get_settings()
        _pool = AsyncConnectionPool(
            _with_connect_timeout(settings.database_url, settings.db_connect_timeout),
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            timeout=settings.db_pool_timeout,
            open=False,
        )
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
