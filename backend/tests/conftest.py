"""Pytest fixtures for PureMetrics backend tests."""

import asyncio
from collections.abc import Generator
from datetime import datetime, timezone
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from puremetrics.config import Settings
from puremetrics.database import init_db
from puremetrics.main import app
from puremetrics.models.records import SyncRecord
from puremetrics.services.data_manager import DataManager
from puremetrics.services.events import StateChange, StateObserver
from puremetrics.services.storage import LocalStore

# Use SQLite in-memory for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# Fixed "now" for everything that reads the manager's clock
NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


class FakeRemote:
    """In-memory RemoteStore that records every call.

    Set ``gate`` to an unset ``asyncio.Event`` to hold pushes in flight until
    the test releases them.
    """

    def __init__(self, authenticated: bool = True, user_id: str = "user-1"):
        self.authenticated = authenticated
        self.user_id = user_id
        self.pushes: list[list[SyncRecord]] = []
        self.pull_calls = 0
        self.snapshot: list[SyncRecord] = []
        self.push_error: Optional[Exception] = None
        self.pull_error: Optional[Exception] = None
        self.pull_delay: float = 0.0
        self.gate: Optional[asyncio.Event] = None

    @property
    def is_authenticated(self) -> bool:
        return self.authenticated

    @property
    def current_user_id(self) -> Optional[str]:
        return self.user_id if self.authenticated else None

    async def push(self, records: list[SyncRecord]) -> None:
        self.pushes.append(records)
        if self.gate is not None:
            await self.gate.wait()
        if self.push_error is not None:
            raise self.push_error

    async def pull(self) -> list[SyncRecord]:
        self.pull_calls += 1
        if self.pull_delay:
            await asyncio.sleep(self.pull_delay)
        if self.pull_error is not None:
            raise self.pull_error
        return list(self.snapshot)


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database per test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine: Engine) -> LocalStore:
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return LocalStore(TestingSessionLocal)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        sync_debounce_seconds=0.0,
        sync_timeout_seconds=0.2,
        firebase_project_id="demo-project",
        firebase_api_key="test-key",
    )


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote(authenticated=False)


@pytest.fixture
def signed_in_remote() -> FakeRemote:
    return FakeRemote(authenticated=True)


@pytest.fixture
def events() -> list[StateChange]:
    return []


@pytest.fixture
def observer(events: list[StateChange]) -> StateObserver:
    observer = StateObserver()
    observer.subscribe(events.append)
    return observer


@pytest.fixture
def manager(store, remote, observer, test_settings) -> DataManager:
    """Manager over an empty store with a signed-out remote."""
    return DataManager(store, remote, observer, test_settings, clock=lambda: NOW)


@pytest.fixture
def synced_manager(store, signed_in_remote, observer, test_settings) -> DataManager:
    """Manager whose remote is signed in, so mutations request pushes."""
    return DataManager(store, signed_in_remote, observer, test_settings, clock=lambda: NOW)


@pytest.fixture
def client(manager: DataManager) -> Generator[TestClient, None, None]:
    """Test client serving the fixture manager instead of the lifespan one."""
    app.state.manager = manager
    try:
        yield TestClient(app)
    finally:
        del app.state.manager
