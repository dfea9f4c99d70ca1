"""
Persistent fallback cache for fetched variable values.

Each namespace (one per API key) is a separate SQLite database file so
that distinct credentials never see each other's entries:

    cache_dir/
        {namespace}.db

Entries hold the raw server payload exactly as received, so values that
arrive encrypted stay encrypted at rest. Entries are overwritten on every
successful fetch and are never expired or deleted.

Thread Safety:
    Connection-per-operation, same as the rest of the storage layer.
    Several processes sharing a namespace race with last-writer-wins,
    which is acceptable for a fallback cache.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from envbee_sdk.errors import CacheWriteError, StorageError

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path.home() / ".envbee" / "cache"

# Namespaces become file names
_NAMESPACE_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS cache_entries (
    key TEXT PRIMARY KEY,
    value_json TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


def namespace_for(api_key: str) -> str:
    """
    Derive the cache namespace for an API key.

    Uses the hex SHA-256 of the key, which keeps the key itself off disk.

    Args:
        api_key: The API key identifying the credentials.

    Returns:
        64-character hex namespace.
    """
    return hashlib.sha256(api_key.encode()).hexdigest()


class CacheStore:
    """
    Namespace-scoped key/value store backed by SQLite.

    Example:
        store = CacheStore.open(namespace_for("my-api-key"))
        store.set("DB_HOST", {"type": "STRING", "value": "db.prod"})
        entry = store.get("DB_HOST")   # None when absent

    Attributes:
        namespace: Namespace this store is bound to.
        cache_dir: Directory holding the namespace databases.
        db_path: Path of this namespace's database file.
    """

    def __init__(self, namespace: str, cache_dir: Path | str | None = None) -> None:
        """
        Bind the store to a namespace.

        Args:
            namespace: Namespace name (letters, digits, "-" and "_").
            cache_dir: Directory for cache files. Defaults to ~/.envbee/cache

        Raises:
            StorageError: If the namespace is not a valid file name.
        """
        if not _NAMESPACE_PATTERN.match(namespace):
            raise StorageError(f"Invalid cache namespace: {namespace!r}")

        if cache_dir is None:
            cache_dir = DEFAULT_CACHE_DIR
        elif isinstance(cache_dir, str):
            cache_dir = Path(cache_dir)

        self.namespace = namespace
        self.cache_dir = cache_dir
        self.db_path = cache_dir / f"{namespace}.db"
        self._initialized = False

    @classmethod
    def open(cls, namespace: str, cache_dir: Path | str | None = None) -> CacheStore:
        """
        Open (creating if needed) the store for a namespace.

        Creation failures are logged, not raised: the store stays usable and
        later writes are dropped while reads report absent.
        """
        store = cls(namespace, cache_dir)
        try:
            store._ensure_initialized()
        except (OSError, sqlite3.Error) as e:
            logger.warning(f"Cache at {store.db_path} is unavailable: {e}")
        return store

    def _ensure_initialized(self) -> None:
        """Create the cache directory and schema on first use."""
        if self._initialized:
            return
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        with self._get_connection() as conn:
            conn.executescript(CREATE_TABLES_SQL)
        self._initialized = True
        logger.debug(f"Opened cache namespace {self.namespace[:8]}... at {self.db_path}")

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Get a database connection.

        Yields:
            SQLite connection in autocommit mode.
        """
        conn = sqlite3.connect(
            str(self.db_path),
            isolation_level=None,
            check_same_thread=False,
        )
        try:
            yield conn
        finally:
            conn.close()

    def get(self, key: str) -> Any | None:
        """
        Read the cached payload for a key.

        Args:
            key: Variable name.

        Returns:
            The payload stored by set(), or None if the key is absent.
            An unreadable cache is logged and reported as absent.
        """
        try:
            self._ensure_initialized()
            with self._get_connection() as conn:
                row = conn.execute(
                    "SELECT value_json FROM cache_entries WHERE key = ?",
                    (key,),
                ).fetchone()
        except (OSError, sqlite3.Error) as e:
            logger.warning(f"Failed to read cache entry '{key}': {e}")
            return None

        if row is None:
            logger.debug(f"Cache miss for '{key}'")
            return None

        try:
            return json.loads(row[0])
        except ValueError as e:
            logger.warning(f"Corrupt cache entry '{key}': {e}")
            return None

    def set(self, key: str, value: Any) -> None:
        """
        Store a payload under a key, overwriting any previous entry.

        Never raises: failures are logged and discarded.

        Args:
            key: Variable name.
            value: JSON-serializable payload as received from the server.
        """
        try:
            self._write(key, value)
        except CacheWriteError as e:
            logger.warning(f"Cache write for '{key}' discarded: {e}")

    def _write(self, key: str, value: Any) -> None:
        """
        Write one entry.

        Raises:
            CacheWriteError: If the value cannot be serialized or stored.
        """
        try:
            value_json = json.dumps(value)
            self._ensure_initialized()
            with self._get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO cache_entries (key, value_json, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value_json = excluded.value_json,
                        updated_at = excluded.updated_at
                    """,
                    (key, value_json, datetime.now(UTC).isoformat()),
                )
        except (TypeError, ValueError, OSError, sqlite3.Error) as e:
            raise CacheWriteError(str(e)) from e

        logger.debug(f"Cached '{key}'")
