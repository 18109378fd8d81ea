"""
Family Logistics Entry Point.

Bootstraps the data-access dependency graph via constructor injection:
configuration, logging, the backend decision, the local SQLite store
(persistent mock mode only), repositories and services.  Prints a
one-line JSON status describing the wired backend and exits.  Every
subsystem is wired here; no module-level globals.

Usage::

    python main.py
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from family_logistics import __version__
from family_logistics.backend import (
    BackendMode,
    backend_mode_label,
    resolve_backend_mode,
)
from family_logistics.config import get_config
from family_logistics.database import DatabaseManager, create_supabase_client
from family_logistics.logger import StructuredLogger, get_logger
from family_logistics.repositories.factory import create_repositories
from family_logistics.repositories.storage_adapter import create_storage_adapter
from family_logistics.schema import initialize_schema
from family_logistics.services import create_services


async def bootstrap() -> dict[str, object]:
    """Wire every layer and return the status payload."""
    logger: StructuredLogger = get_logger("main")
    logger.info("Starting Family Logistics %s...", __version__)

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Backend decision (read once, threaded into the factory)
    # ------------------------------------------------------------------
    mode = resolve_backend_mode(config, get_logger("backend"))

    supabase = None
    if mode is BackendMode.LIVE:
        supabase = await create_supabase_client(
            config.SUPABASE_URL,
            config.SUPABASE_ANON_KEY.get_secret_value(),
            StructuredLogger(name="database"),
        )
        if supabase is None:
            logger.warning("Live client unavailable - continuing in mock mode.")
            mode = BackendMode.MOCK

    # ------------------------------------------------------------------
    # 3. Local store (mock mode with persistent tables only)
    # ------------------------------------------------------------------
    db: Optional[DatabaseManager] = None
    if mode is BackendMode.MOCK and not config.MOCK_STORAGE_IN_MEMORY:
        db = DatabaseManager(
            sqlite_path=Path(config.MOCK_STORAGE_PATH),
            logger=StructuredLogger(name="database"),
        )

    try:
        storage = None
        if mode is BackendMode.MOCK:
            if db is not None:
                initialize_schema(db.sqlite, StructuredLogger(name="schema"))
            storage = create_storage_adapter(
                db,
                get_logger("storage"),
                prefix=config.MOCK_STORAGE_PREFIX,
                in_memory=config.MOCK_STORAGE_IN_MEMORY,
            )

        # --------------------------------------------------------------
        # 4. Repositories + services (single composition root each)
        # --------------------------------------------------------------
        repositories = create_repositories(
            mode,
            logger=get_logger("repositories"),
            supabase=supabase,
            storage=storage,
        )
        create_services(repositories, get_logger("services"))
    finally:
        if db is not None:
            db.close()

    tables = sorted(
        repo.TABLE for name, repo in repositories.items() if name != "mock_auth"
    )
    return {
        "version": __version__,
        "backend": backend_mode_label(mode),
        "mode": mode.value,
        "tables": tables,
    }


def main() -> None:
    """Application entry point."""
    try:
        status = asyncio.run(bootstrap())
    except Exception as exc:
        get_logger("main").critical("Startup failed: %s", exc, exc_info=True)
        sys.exit(1)
    print(json.dumps(status))


if __name__ == "__main__":
    main()
