"""
Local Authentication Store.

Stands in for Supabase Auth in mock mode.  Registered users and the
current session live in the StorageAdapter under ``auth-data``::

    {"users": [{"id", "email", "password_hash", "salt"}],
     "current_user": {"id", "email"} | null}

The local CRUD engine reads the session from here to answer
``get_authenticated_user_id``, and the local procedures use it to
resolve users by email.

Usage::

    auth = MockAuthStore(storage=InMemoryStorageAdapter(), logger=log)
    await auth.sign_up("ana@example.com", "s3cret!")
    current = await auth.get_current_user()
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from collections.abc import Callable
from typing import Optional

from pydantic import BaseModel, Field

from family_logistics.logger import StructuredLogger
from family_logistics.models.api import ApiError, ApiResponse
from family_logistics.repositories.errors import AUTH_REQUIRED, to_api_error
from family_logistics.repositories.storage_adapter import StorageAdapter
from family_logistics.utils.string_helpers import generate_id

AUTH_DATA_KEY: str = "auth-data"

_PBKDF2_ITERATIONS: int = 120_000


class AuthUser(BaseModel):
    """Identity exposed to callers; never carries credentials."""

    id: str
    email: str


class _StoredUser(BaseModel):
    id: str
    email: str
    password_hash: str
    salt: str


class _AuthData(BaseModel):
    users: list[_StoredUser] = Field(default_factory=list)
    current_user: Optional[AuthUser] = None


AuthListener = Callable[[Optional[AuthUser]], None]


def _hash_password(password: str, salt: str) -> str:
    return hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), bytes.fromhex(salt), _PBKDF2_ITERATIONS
    ).hex()


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class MockAuthStore:
    """Sign-up / sign-in / sign-out against local storage.

    Parameters
    ----------
    storage:
        Adapter shared with the local CRUD engines.
    logger:
        Structured logger.
    """

    def __init__(self, storage: StorageAdapter, logger: StructuredLogger) -> None:
        self._storage = storage
        self._logger = logger
        self._listeners: list[AuthListener] = []

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def _load(self) -> _AuthData:
        raw = await self._storage.get(AUTH_DATA_KEY)
        if not isinstance(raw, dict):
            return _AuthData()
        return _AuthData.model_validate(raw)

    async def _save(self, data: _AuthData) -> None:
        await self._storage.set(AUTH_DATA_KEY, data.model_dump(mode="json"))

    def _notify(self, user: Optional[AuthUser]) -> None:
        for listener in list(self._listeners):
            try:
                listener(user)
            except Exception as exc:
                self._logger.warning("Auth state listener failed: %s", exc)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def sign_up(self, email: str, password: str) -> ApiResponse[AuthUser]:
        """Register a new user and sign them in."""
        normalized = _normalize_email(email)
        try:
            data = await self._load()
            if any(user.email == normalized for user in data.users):
                return ApiResponse.failure(ApiError(message="User already exists"))

            salt = secrets.token_hex(16)
            stored = _StoredUser(
                id=generate_id(),
                email=normalized,
                password_hash=_hash_password(password, salt),
                salt=salt,
            )
            data.users.append(stored)
            current = AuthUser(id=stored.id, email=stored.email)
            data.current_user = current
            await self._save(data)
        except Exception as exc:
            self._logger.warning("Mock sign-up failed: %s", exc)
            return ApiResponse.failure(to_api_error(exc))

        self._logger.info("Mock user registered: %s", current.id)
        self._notify(current)
        return ApiResponse.success(current)

    async def sign_in(self, email: str, password: str) -> ApiResponse[AuthUser]:
        normalized = _normalize_email(email)
        try:
            data = await self._load()
            match = next((user for user in data.users if user.email == normalized), None)
            if match is None or not hmac.compare_digest(
                _hash_password(password, match.salt), match.password_hash
            ):
                return ApiResponse.failure(ApiError(message="Invalid email or password"))

            current = AuthUser(id=match.id, email=match.email)
            data.current_user = current
            await self._save(data)
        except Exception as exc:
            self._logger.warning("Mock sign-in failed: %s", exc)
            return ApiResponse.failure(to_api_error(exc))

        self._notify(current)
        return ApiResponse.success(current)

    async def sign_out(self) -> ApiResponse[None]:
        try:
            data = await self._load()
            data.current_user = None
            await self._save(data)
        except Exception as exc:
            self._logger.warning("Mock sign-out failed: %s", exc)
            return ApiResponse.failure(to_api_error(exc))

        self._notify(None)
        return ApiResponse.success(None)

    async def get_current_user(self) -> ApiResponse[AuthUser]:
        try:
            data = await self._load()
        except Exception as exc:
            return ApiResponse.failure(to_api_error(exc))
        if data.current_user is None:
            return ApiResponse.failure(
                ApiError(message="Not authenticated", code=AUTH_REQUIRED)
            )
        return ApiResponse.success(data.current_user)

    async def find_user_id_by_email(self, email: str) -> Optional[str]:
        """Return the id registered for *email*, or ``None``."""
        normalized = _normalize_email(email)
        data = await self._load()
        return next((user.id for user in data.users if user.email == normalized), None)

    async def find_email_by_user_id(self, user_id: str) -> Optional[str]:
        data = await self._load()
        return next((user.email for user in data.users if user.id == user_id), None)

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

