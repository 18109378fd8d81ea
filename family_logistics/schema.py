"""
Local SQLite Schema Initialization.

Defines the schema of the local database behind mock mode and a single
entry-point -- :func:`initialize_schema` -- that creates it idempotently.
A single-row ``schema_version`` table records which version was applied.

Tables:
    - ``schema_version`` -- version tracker
    - ``kv_store``       -- namespaced key/value rows written by
                            :class:`~family_logistics.repositories.storage_adapter.SQLiteStorageAdapter`

Usage::

    from family_logistics.schema import initialize_schema

    initialize_schema(db.sqlite, StructuredLogger(name="schema"))
"""

from __future__ import annotations

import sqlite3

from family_logistics.logger import StructuredLogger

__all__ = ["CURRENT_SCHEMA_VERSION", "initialize_schema"]

CURRENT_SCHEMA_VERSION: int = 1

_TABLE_DEFINITIONS: list[str] = [
    """
    CREATE TABLE IF NOT EXISTS schema_version (
        id INTEGER PRIMARY KEY CHECK (id = 1),
        version INTEGER NOT NULL,
        applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS kv_store (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
]


def _get_schema_version(conn: sqlite3.Connection) -> int:
    """Return the applied schema version, or ``0`` for a fresh database."""
    row = conn.execute("SELECT version FROM schema_version WHERE id = 1").fetchone()
    return row[0] if row is not None else 0


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    """Upsert the version row.  Does **not** commit."""
    conn.execute(
        """
        INSERT INTO schema_version (id, version) VALUES (1, ?)
        ON CONFLICT(id) DO UPDATE SET version = excluded.version,
                                      applied_at = CURRENT_TIMESTAMP
        """,
        (version,),
    )


def initialize_schema(conn: sqlite3.Connection, logger: StructuredLogger) -> None:
    """Ensure the local database matches :data:`CURRENT_SCHEMA_VERSION`.

    Every DDL statement uses ``CREATE TABLE IF NOT EXISTS``, so the call
    is idempotent and safe on every start-up.  The upgrade runs in one
    transaction; on failure it is rolled back and the error re-raised.
    """
    try:
        for ddl in _TABLE_DEFINITIONS:
            conn.execute(ddl)
        current = _get_schema_version(conn)
        if current >= CURRENT_SCHEMA_VERSION:
            conn.commit()
            logger.info("Schema is up to date (version %d).", current)
            return
        _set_schema_version(conn, CURRENT_SCHEMA_VERSION)
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        logger.error("Schema initialisation failed - rolled back.", exc_info=True)
        raise

    logger.info("Schema initialised at version %d.", CURRENT_SCHEMA_VERSION)
