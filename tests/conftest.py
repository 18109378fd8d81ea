"""Shared pytest fixtures: loggers, clocks, adapters and a scripted Supabase fake."""

from __future__ import annotations

import io
from collections import deque
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from unittest.mock import AsyncMock

import pytest

from family_logistics.backend import BackendMode
from family_logistics.database import DatabaseManager
from family_logistics.logger import StructuredLogger
from family_logistics.repositories.factory import RepositoryContainer, create_repositories
from family_logistics.repositories.storage_adapter import (
    InMemoryStorageAdapter,
    SQLiteStorageAdapter,
)
from family_logistics.schema import initialize_schema

# Handlers are attached once per logger name, so they share one sink.
_LOG_STREAM = io.StringIO()


class FakeClock:
    """Deterministic clock; frozen unless a test advances it."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1.0) -> None:
        self.now += timedelta(seconds=seconds)


class FakeResponse:
    def __init__(self, data: Any) -> None:
        self.data = data


class FakeRequest:
    """Records every chained PostgREST builder call; ``execute`` replays a script."""

    def __init__(self, client: "FakeSupabaseClient", table: Optional[str]) -> None:
        self.client = client
        self.table = table
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)

        def chained(*args: Any, **kwargs: Any) -> "FakeRequest":
            self.calls.append((name, args, kwargs))
            return self

        return chained

    def methods(self) -> list[str]:
        return [name for name, _, _ in self.calls]

    def args_of(self, method: str) -> tuple[Any, ...]:
        return next(args for name, args, _ in self.calls if name == method)

    async def execute(self) -> FakeResponse:
        self.client.executed.append(self)
        outcome = self.client.next_outcome()
        if isinstance(outcome, BaseException):
            raise outcome
        return FakeResponse(outcome)


class FakeAuthUser:
    def __init__(self, user_id: str) -> None:
        self.id = user_id


class FakeUserResponse:
    def __init__(self, user: Optional[FakeAuthUser]) -> None:
        self.user = user


class FakeSupabaseClient:
    """Stand-in for ``supabase.AsyncClient`` covering ``table``, ``rpc`` and ``auth``."""

    def __init__(self) -> None:
        self.requests: list[FakeRequest] = []
        self.executed: list[FakeRequest] = []
        self._outcomes: deque[Any] = deque()
        self.auth = AsyncMock()
        self.auth.get_user = AsyncMock(return_value=FakeUserResponse(FakeAuthUser("user-1")))

    def script(self, *outcomes: Any) -> None:
        """Queue ``data`` payloads (or exceptions to raise) for the next executes."""
        self._outcomes.extend(outcomes)

    def next_outcome(self) -> Any:
        return self._outcomes.popleft() if self._outcomes else []

    def sign_out(self) -> None:
        self.auth.get_user = AsyncMock(return_value=FakeUserResponse(None))

    def table(self, name: str) -> FakeRequest:
        request = FakeRequest(self, name)
        self.requests.append(request)
        return request

    def rpc(self, function: str, params: dict[str, Any]) -> FakeRequest:
        request = FakeRequest(self, None)
        request.calls.append(("rpc", (function, params), {}))
        self.requests.append(request)
        return request


@pytest.fixture
def logger() -> StructuredLogger:
    return StructuredLogger(name="family_logistics.tests", stream=_LOG_STREAM, log_file="")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_storage() -> InMemoryStorageAdapter:
    return InMemoryStorageAdapter()


@pytest.fixture
def db(logger: StructuredLogger) -> Iterator[DatabaseManager]:
    manager = DatabaseManager(sqlite_path=":memory:", logger=logger)
    initialize_schema(manager.sqlite, logger)
    yield manager
    manager.close()


@pytest.fixture
def sqlite_storage(db: DatabaseManager, logger: StructuredLogger) -> SQLiteStorageAdapter:
    return SQLiteStorageAdapter(db=db, logger=logger, prefix="test")


@pytest.fixture
def fake_supabase() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def mock_repos(
    logger: StructuredLogger,
    memory_storage: InMemoryStorageAdapter,
    clock: FakeClock,
) -> RepositoryContainer:
    return create_repositories(
        BackendMode.MOCK, logger=logger, storage=memory_storage, clock=clock
    )


@pytest.fixture
async def signed_in(mock_repos: RepositoryContainer) -> str:
    """Register and sign in ``ana@example.com``; returns the user id."""
    auth = mock_repos["mock_auth"]
    assert auth is not None
    result = await auth.sign_up("ana@example.com", "s3cret-pass")
    assert result.data is not None
    return result.data.id
