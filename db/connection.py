"""
db/connection.py
----------------
Manages the PostgreSQL connection pool used when STORAGE_BACKEND=postgres.
Uses psycopg2's SimpleConnectionPool for connection reuse.
"""

import psycopg2
from psycopg2 import pool

from config import DATABASE_URL
from utils.logger import get_logger

logger = get_logger(__name__)

_pool: pool.SimpleConnectionPool | None = None


def init_pool(min_conn: int = 1, max_conn: int = 3, dsn: str = DATABASE_URL) -> None:
    """
    Open the connection pool. Calling it again is a no-op.

    Raises:
        psycopg2.OperationalError: If the database is unreachable.
    """
    global _pool
    if _pool is not None:
        return
    try:
        _pool = pool.SimpleConnectionPool(min_conn, max_conn, dsn)
        logger.info("Storage database pool initialized.")
    except psycopg2.OperationalError as e:
        logger.error(f"Failed to initialize storage database pool: {e}")
        raise


def get_connection():
    """
    Borrow a connection from the pool.

    Raises:
        RuntimeError: If init_pool() has not been called.
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")
    return _pool.getconn()


def release_connection(conn) -> None:
    """Give a borrowed connection back to the pool."""
    if _pool is not None:
        _pool.putconn(conn)


def close_pool() -> None:
    """Close all pooled connections."""
    global _pool
    if _pool is not None:
        _pool.closeall()
        _pool = None
        logger.info("Storage database pool closed.")
