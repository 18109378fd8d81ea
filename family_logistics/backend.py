"""
Backend Selection.

Decides once, at start-up, whether repositories run against Supabase or
against local storage.  The result is threaded into
:func:`family_logistics.repositories.factory.create_repositories`; no
repository reads configuration itself.

Rule:
1. ``USE_MOCK_BACKEND`` forces mock mode.
2. Missing Supabase credentials force mock mode.
3. Otherwise the live backend is used.
"""

from __future__ import annotations

from enum import StrEnum

from family_logistics.config import AppConfig
from family_logistics.logger import StructuredLogger


class BackendMode(StrEnum):
    LIVE = "live"
    MOCK = "mock"


def resolve_backend_mode(config: AppConfig, logger: StructuredLogger) -> BackendMode:
    if config.USE_MOCK_BACKEND:
        logger.info("Mock backend explicitly enabled.")
        return BackendMode.MOCK
    if not config.has_supabase_credentials:
        logger.info("Supabase credentials missing - falling back to mock backend.")
        return BackendMode.MOCK
    return BackendMode.LIVE


def backend_mode_label(mode: BackendMode) -> str:
    """Human-readable name used in status output."""
    if mode is BackendMode.MOCK:
        return "Mock (LocalStorage)"
    return "Supabase"
