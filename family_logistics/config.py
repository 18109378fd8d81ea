"""
Application Configuration.

Pydantic Settings model for the Family Logistics data layer.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Supabase ---
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: SecretStr = SecretStr("")

    # --- Backend selection ---
    USE_MOCK_BACKEND: bool = False

    # --- Mock-mode local storage ---
    MOCK_STORAGE_PREFIX: str = "family-logistics"
    MOCK_STORAGE_PATH: str = "family_logistics_local.db"
    MOCK_STORAGE_IN_MEMORY: bool = False

    # --- Logging ---
    LOG_FILE: str = "family_logistics.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _warn_missing_env(self) -> "AppConfig":
        """Emit a startup warning when backend configuration is empty.

        Pydantic silently falls back to defaults when ``.env`` is missing,
        and empty Supabase credentials silently force mock mode.  Both are
        logged so operators can tell which backend they are talking to.
        """
        _log = logging.getLogger("family_logistics.config")

        if not Path(".env").exists():
            _log.warning(
                "No .env file found - all configuration loaded from "
                "environment variables or defaults."
            )

        if not self.has_supabase_credentials and not self.USE_MOCK_BACKEND:
            _log.warning(
                "SUPABASE_URL or SUPABASE_ANON_KEY is empty - repositories "
                "will run against local mock storage."
            )

        return self

    @property
    def has_supabase_credentials(self) -> bool:
        """``True`` when both the project URL and the anon key are set."""
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY.get_secret_value())


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    Uses a check-lock-check pattern so the lock is only taken during
    first initialisation.  Prefer constructor injection of ``AppConfig``
    in new code; tests build their own instances directly.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance
