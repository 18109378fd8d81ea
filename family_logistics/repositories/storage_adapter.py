"""
Storage Adapters.

Key/value persistence used by the local (mock-mode) engine.  Values are
JSON-serialised on ``set`` and parsed on ``get``; stored content that
fails to parse reads back as ``None`` instead of raising, so a corrupt
table degrades to an empty one.

Two interchangeable implementations:

- :class:`SQLiteStorageAdapter` -- persistent, namespace-prefixed.  Keys
  are stored as ``<prefix>:<key>`` in the ``kv_store`` table of the local
  SQLite database, which may be shared with other consumers; ``clear``
  and ``keys`` only ever touch keys under this adapter's prefix.
- :class:`InMemoryStorageAdapter` -- process-local dict, for tests and
  throw-away demo sessions.

I/O errors from the underlying medium propagate from ``set``/``remove``/
``clear``; the engines above convert them to ``ApiError``.
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
from abc import ABC, abstractmethod
from typing import Any, Optional

from family_logistics.database import DatabaseManager
from family_logistics.logger import StructuredLogger

__all__ = [
    "InMemoryStorageAdapter",
    "SQLiteStorageAdapter",
    "StorageAdapter",
    "create_storage_adapter",
]

DEFAULT_PREFIX: str = "family-logistics"


class StorageAdapter(ABC):
    """Asynchronous key/value contract shared by every adapter."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the parsed value, or ``None`` if absent or unparseable."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Serialise and store *value*, overwriting any previous value."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete *key*; a missing key is not an error."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every key this adapter owns."""

    @abstractmethod
    async def keys(self) -> list[str]:
        """Return every owned key, namespace prefix stripped."""


_UNPARSEABLE = object()


def _parse(raw: Optional[str]) -> Any:
    """Decoded value, ``None`` when absent, or ``_UNPARSEABLE``."""
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return _UNPARSEABLE


def _decode(raw: Optional[str]) -> Optional[Any]:
    value = _parse(raw)
    return None if value is _UNPARSEABLE else value


class InMemoryStorageAdapter(StorageAdapter):
    """Dict-backed adapter.  Values are stored serialised, like on disk."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    async def get(self, key: str) -> Optional[Any]:
        return _decode(self._items.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._items[key] = json.dumps(value)

    async def remove(self, key: str) -> None:
        self._items.pop(key, None)

    async def clear(self) -> None:
        self._items.clear()

    async def keys(self) -> list[str]:
        return list(self._items)


class SQLiteStorageAdapter(StorageAdapter):
    """Persistent adapter over the ``kv_store`` table of the local database.

    Parameters
    ----------
    db:
        Initialised ``DatabaseManager``; its schema must already contain
        ``kv_store`` (see :func:`family_logistics.schema.initialize_schema`).
    logger:
        Structured logger.
    prefix:
        Namespace for every key this adapter writes.
    """

    def __init__(
        self,
        db: DatabaseManager,
        logger: StructuredLogger,
        prefix: str = DEFAULT_PREFIX,
    ) -> None:
        if not prefix:
            raise ValueError("SQLiteStorageAdapter requires a non-empty prefix")
        self._db = db
        self._logger = logger
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        return self._prefix

    def _full_key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    # ------------------------------------------------------------------
    # Blocking helpers (run in a worker thread)
    # ------------------------------------------------------------------

    def _read(self, full_key: str) -> Optional[str]:
        row = self._db.sqlite.execute(
            "SELECT value FROM kv_store WHERE key = ?", (full_key,)
        ).fetchone()
        return row["value"] if row is not None else None

    def _write(self, full_key: str, raw: str) -> None:
        with self._db.write_lock:
            self._db.sqlite.execute(
                """
                INSERT INTO kv_store (key, value)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value      = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (full_key, raw),
            )
            self._db.sqlite.commit()

    def _delete(self, full_keys: list[str]) -> None:
        with self._db.write_lock:
            self._db.sqlite.executemany(
                "DELETE FROM kv_store WHERE key = ?",
                [(full_key,) for full_key in full_keys],
            )
            self._db.sqlite.commit()

    def _owned_keys(self) -> list[str]:
        # substr() rather than LIKE so '%' and '_' in the prefix match literally.
        namespace = f"{self._prefix}:"
        rows = self._db.sqlite.execute(
            "SELECT key FROM kv_store WHERE substr(key, 1, ?) = ? ORDER BY key",
            (len(namespace), namespace),
        ).fetchall()
        return [row["key"][len(namespace):] for row in rows]

    # ------------------------------------------------------------------
    # StorageAdapter
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Optional[Any]:
        raw = await asyncio.to_thread(self._read, self._full_key(key))
        value = _parse(raw)
        if value is _UNPARSEABLE:
            self._logger.warning(
                "Discarding unparseable value stored under '%s'.", self._full_key(key)
            )
            return None
        return value

    async def set(self, key: str, value: Any) -> None:
        raw = json.dumps(value)
        await asyncio.to_thread(self._write, self._full_key(key), raw)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._delete, [self._full_key(key)])

    async def clear(self) -> None:
        owned = await self.keys()
        if owned:
            await asyncio.to_thread(self._delete, [self._full_key(key) for key in owned])
            self._logger.info("Cleared %d keys under prefix '%s'.", len(owned), self._prefix)

    async def keys(self) -> list[str]:
        return await asyncio.to_thread(self._owned_keys)


def create_storage_adapter(
    db: Optional[DatabaseManager],
    logger: StructuredLogger,
    *,
    prefix: str = DEFAULT_PREFIX,
    in_memory: bool = False,
) -> StorageAdapter:
    """Return the persistent adapter when a local database is available.

    Falls back to :class:`InMemoryStorageAdapter` when *in_memory* is set,
    when no ``DatabaseManager`` was supplied, or when the ``kv_store``
    table cannot be probed.
    """
    if in_memory or db is None:
        return InMemoryStorageAdapter()
    try:
        db.sqlite.execute("SELECT 1 FROM kv_store LIMIT 1").fetchall()
    except sqlite3.Error as exc:
        logger.warning(
            "Local key/value store unavailable (%s) - using in-memory storage.", exc
        )
        return InMemoryStorageAdapter()
    return SQLiteStorageAdapter(db=db, logger=logger, prefix=prefix)
