"""
PostgreSQL connection factory for the case registry.

Opens psycopg connection pools from a DSN, retrying transient
connection failures with tenacity. Pools are owned by the store that opened
them; there is no process-wide pool singleton.
"""

from __future__ import annotations

import psycopg
from psycopg_pool import ConnectionPool, PoolTimeout
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from case_registry.config import get_settings
from case_registry.utils.logging import get_logger

log = get_logger(__name__)

_TRANSIENT_ERRORS = (psycopg.OperationalError, psycopg.InterfaceError, PoolTimeout)


def build_dsn() -> str:
    """Compose a DSN string from settings."""
    return get_settings().dsn


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(_TRANSIENT_ERRORS),
    reraise=True,
)
def open_pool(
    dsn: str | None = None,
    min_size: int = 1,
    max_size: int = 10,
    timeout: float = 10.0,
) -> ConnectionPool:
    """
    Open a synchronous connection pool and wait until it holds `min_size` connections.

    Parameters
    ----------
    dsn : str | None
        Connection string; defaults to the configured database.
    min_size : int
        Minimum number of idle connections to keep.
    max_size : int
        Maximum total connections in the pool.
    timeout : float
        Seconds to wait for the initial connections before retrying.
    """
    pool = ConnectionPool(
        conninfo=dsn or build_dsn(),
        min_size=min_size,
        max_size=max_size,
        open=False,
    )
    try:
        pool.open(wait=True, timeout=timeout)
    except PoolTimeout:
        pool.close()
        log.warning("Connection pool did not become ready", extra={"timeout": timeout})
        raise
    log.debug("Connection pool opened", extra={"min_size": min_size, "max_size": max_size})
    return pool


__all__ = ["build_dsn", "open_pool"]
