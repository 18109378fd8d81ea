"""
Database Abstraction Layer.

Owns the two backing stores the repositories can sit on:

- **Supabase (cloud PostgreSQL)**: the live backend, reached through an
  async ``supabase.AsyncClient``.  Only created when credentials exist.
- **SQLite (local)**: the persistent medium behind mock mode.  It holds
  the ``kv_store`` table that :class:`SQLiteStorageAdapter` writes to.

This module only manages the raw *connections*; it contains no query
logic.  Data access is performed through the repository engines.

Usage (dependency injection at start-up)::

    from family_logistics.database import DatabaseManager, create_supabase_client

    supabase = await create_supabase_client(url, key, logger)
    db = DatabaseManager(
        sqlite_path=Path("family_logistics_local.db"),
        logger=StructuredLogger(name="database"),
        supabase=supabase,
    )
"""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Optional, Union

from supabase import AsyncClient, acreate_client

from family_logistics.logger import StructuredLogger


async def create_supabase_client(
    supabase_url: str,
    supabase_key: str,
    logger: StructuredLogger,
) -> Optional[AsyncClient]:
    """Create the async Supabase client, or return ``None``.

    ``None`` is returned when either credential is empty or the client
    rejects them; the caller then runs in mock mode.
    """
    if not supabase_url or not supabase_key:
        logger.warning("Supabase credentials not configured - no live client created.")
        return None
    try:
        client = await acreate_client(supabase_url, supabase_key)
    except (ValueError, TypeError) as exc:
        logger.warning("Supabase credential format error: %s.", exc)
        return None
    except Exception as exc:
        logger.error(
            "Unexpected Supabase initialization failure: %s.", exc, exc_info=True,
        )
        return None
    logger.info("Supabase client initialized.")
    return client


class DatabaseManager:
    """Holds the local SQLite connection and the optional Supabase client.

    Parameters
    ----------
    sqlite_path:
        Filesystem path for the local database file, or ``":memory:"``.
    logger:
        A ``StructuredLogger`` instance for structured JSON log output.
    supabase:
        An already-created ``AsyncClient`` (see
        :func:`create_supabase_client`), or ``None`` for offline use.
    """

    def __init__(
        self,
        sqlite_path: Union[Path, str],
        logger: StructuredLogger,
        supabase: Optional[AsyncClient] = None,
    ) -> None:
        self._logger: StructuredLogger = logger
        self._write_lock: threading.RLock = threading.RLock()
        self._supabase: Optional[AsyncClient] = supabase
        self._sqlite_conn: sqlite3.Connection = self._connect_sqlite(sqlite_path)
        self._closed: bool = False

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def supabase(self) -> AsyncClient:
        """Return the live Supabase client.

        Raises
        ------
        RuntimeError
            If no client was supplied (offline / mock mode).
        """
        if self._supabase is None:
            raise RuntimeError(
                "Supabase client is not initialised. "
                "The application is running in mock mode."
            )
        return self._supabase

    @property
    def is_online(self) -> bool:
        """``True`` when a Supabase client is available."""
        return self._supabase is not None

    @property
    def sqlite(self) -> sqlite3.Connection:
        """Return the SQLite connection."""
        return self._sqlite_conn

    @property
    def write_lock(self) -> threading.RLock:
        """Lock every SQLite write must hold::

            with db.write_lock:
                db.sqlite.execute("INSERT ...")
                db.sqlite.commit()
        """
        return self._write_lock

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the local SQLite connection.  Safe to call repeatedly."""
        with self._write_lock:
            if self._closed:
                return
            self._sqlite_conn.close()
            self._closed = True
            self._logger.info("SQLite connection closed.")

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _connect_sqlite(self, path: Union[Path, str]) -> sqlite3.Connection:
        """Open (or create) the local database.

        Raises
        ------
        PermissionError
            If the OS denies access to the database file or its directory.
        """
        try:
            # Connection is shared with asyncio.to_thread workers.
            conn = sqlite3.connect(str(path), check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL;")
            self._logger.info("SQLite database opened at %s", path)
            return conn
        except PermissionError as exc:
            msg = (
                f"Cannot open the local database at '{path}'. "
                "The file or its directory may be read-only or locked by "
                "another process.  Please check file permissions and try again."
            )
            self._logger.error(msg)
            raise PermissionError(msg) from exc
