"""
repositories/storage.py
-----------------------
Key/value storage port for client-side state (activity logs, notes,
acknowledged plan ids).

Services never touch a global store: they receive a ``StoragePort`` and
read/write serialized strings under fixed keys. Implementations:
    - InMemoryStorage: tests and throwaway sessions.
    - JsonFileStorage: one JSON document on disk (default).
    - PostgresStorage (repositories/kv_repo.py): a key/value table.
"""

import json
import os
import tempfile
from typing import Any, Optional, Protocol

from utils.logger import get_logger

logger = get_logger(__name__)


class StoragePort(Protocol):
    """Minimal get/set interface over named keys holding serialized strings."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class InMemoryStorage:
    """Dict-backed storage. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStorage:
    """
    Stores every key in a single JSON object on disk.

    Each call re-reads the file (read-modify-write), so two processes sharing
    the file follow last-write-wins. A missing or unreadable file behaves as
    an empty store.
    """

    def __init__(self, path: str):
        self.path = path

    def _read_all(self) -> dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring storage file {self.path}: top level is not an object")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to write storage file {self.path}: {e}")
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


def build_storage(backend: str, path: str) -> StoragePort:
    """
    Create the storage selected by STORAGE_BACKEND.

    Args:
        backend: 'file' or 'postgres'.
        path: JSON file location for the 'file' backend.

    Raises:
        ValueError: Unknown backend name.
    """
    if backend == "file":
        logger.info(f"Using JSON file storage at {path}")
        return JsonFileStorage(path)
    if backend == "postgres":
        from db.connection import init_pool
        from db.init_db import create_tables
        from repositories.kv_repo import PostgresStorage

        init_pool()
        create_tables()
        logger.info("Using PostgreSQL storage")
        return PostgresStorage()
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}")


# ── JSON helpers ──────────────────────────────────────────

def load_json(storage: StoragePort, key: str, expected_type: type, default: Any) -> Any:
    """
    Read and decode a JSON value, falling back to ``default`` when the key is
    absent, the content is not valid JSON, or it decodes to the wrong type.
    """
    raw = storage.get(key)
    if raw is None:
        return default
    try:
        value = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        logger.warning(f"Malformed content under '{key}', treating as empty: {e}")
        return default
    if not isinstance(value, expected_type):
        logger.warning(f"Unexpected {type(value).__name__} under '{key}', treating as empty")
        return default
    return value


def save_json(storage: StoragePort, key: str, value: Any) -> None:
    """Encode a value as JSON and store it under ``key``."""
    storage.set(key, json.dumps(value, ensure_ascii=False))
