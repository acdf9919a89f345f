"""
Database connection factory utilities for recordbook.

Builds the PostgreSQL DSN from settings and opens psycopg connection pools
with retry logic for transient failures (tenacity). Pools are owned by the
session that opened them; there is no process-wide pool.
"""

from __future__ import annotations

from typing import Optional

from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool, PoolTimeout
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from recordbook.config import Settings, get_settings
from recordbook.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(PoolTimeout),
    reraise=True,
)
def open_sync_pool(
    dsn: Optional[str] = None,
    min_size: Optional[int] = None,
    max_size: Optional[int] = None,
    timeout: float = 10.0,
) -> ConnectionPool:
    """
    Open a synchronous connection pool and wait until it holds `min_size`
    connections.

    Parameters
    ----------
    dsn : str, optional
        Connection string; defaults to the one built from settings.
    min_size : int, optional
        Minimum number of idle connections to keep.
    max_size : int, optional
        Maximum total connections in the pool.
    timeout : float
        Seconds to wait for the initial connections before retrying.

    Returns
    -------
    ConnectionPool
        An open pool. The caller is responsible for closing it.
    """
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=dsn or build_dsn(settings),
        min_size=min_size or settings.db_pool_min_size,
        max_size=max_size or settings.db_pool_max_size,
        kwargs={"row_factory": dict_row},
        open=False,
    )
    try:
        pool.open(wait=True, timeout=timeout)
    except PoolTimeout:
        log.warning("Connection pool did not fill in time", extra={"timeout": timeout})
        pool.close()
        raise
    return pool


__all__ = [
    "build_dsn",
    "open_sync_pool",
]
