"""
repositories/kv_repo.py
-----------------------
PostgreSQL implementation of the storage port.
All SQL queries related to the `local_storage` table live here.
"""

from typing import Optional

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)


class PostgresStorage:
    """Key/value storage backed by the local_storage table."""

    def get(self, key: str) -> Optional[str]:
        """Fetch the value stored under key, or None."""
        sql = "SELECT value FROM local_storage WHERE key = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (key,))
                row = cur.fetchone()
                return row[0] if row else None
        finally:
            release_connection(conn)

    def set(self, key: str, value: str) -> None:
        """Insert or replace the value under key."""
        sql = """
            INSERT INTO local_storage (key, value, updated_at)
            VALUES (%s, %s, NOW())
            ON CONFLICT (key)
            DO UPDATE SET value = EXCLUDED.value, updated_at = NOW();
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (key, value))
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to store key '{key}': {e}")
            raise
        finally:
            release_connection(conn)
