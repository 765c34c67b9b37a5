"""Shared pytest fixtures configured to use SQLite in-memory for unit tests."""

import logging
import os

# Tell app lifespan to skip real DB init
os.environ.setdefault("COLLABNOTES_SKIP_LIFESPAN_DB", "1")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from collabnotes.core.models import BaseModel
from collabnotes.core.repositories import UserRepository
from collabnotes.core.schemas.auth import CurrentUser
from collabnotes.core.services.notification_service import (
    NotificationDispatcher,
    NoteNotification,
    get_notification_dispatcher,
)
from collabnotes.database import get_db_session
from collabnotes.main import app
from collabnotes.security.jwt import create_access_token

# Silence extremely verbose DEBUG logs from aiosqlite to keep test output readable
logging.getLogger("aiosqlite").setLevel(logging.WARNING)


class FakeRedisClient:
    """Stands in for RedisClient; records every publish."""

    def __init__(self, healthy: bool = True):
        self.healthy = healthy
        self.published = []

    @property
    def is_connected(self) -> bool:
        return self.healthy

    async def ping(self) -> bool:
        return self.healthy

    async def publish(self, channel, payload):
        self.published.append((channel, payload))
        return 1


class RecordingDispatcher(NotificationDispatcher):
    """Dispatcher that records events instead of queueing them."""

    def __init__(self):
        super().__init__(redis_client=FakeRedisClient())
        self.sent = []

    @property
    def is_running(self) -> bool:
        return True

    def notify(self, note_id, message, recipients, exclude_user_id=None, kind="note_updated"):
        targets = tuple(dict.fromkeys(r for r in recipients if r != exclude_user_id))
        if not targets:
            return False
        self.sent.append(
            NoteNotification(note_id=note_id, message=message, recipient_ids=targets, kind=kind)
        )
        return True

    def sent_to(self, user_id):
        return [event for event in self.sent if user_id in event.recipient_ids]


@pytest.fixture
async def test_engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,  # keep the same memory DB across connections
        connect_args={"check_same_thread": False},
    )

    # SQLite needs this for ON DELETE CASCADE
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def test_session(test_engine):
    """Database session bound to the per-test engine."""
    session_maker = async_sessionmaker(test_engine, expire_on_commit=False)
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def test_app(test_session, dispatcher):
    """App with DB session and notification dispatcher overridden."""

    async def _override_get_db():
        yield test_session

    app.dependency_overrides[get_db_session] = _override_get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(test_app):
    """Async HTTP client talking to the app in-process."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _create_user(session, name, email, **kwargs):
    return await UserRepository(session).create_user({"name": name, "email": email, **kwargs})


@pytest.fixture
async def alice(test_session):
    return await _create_user(test_session, "Alice", "alice@example.com")


@pytest.fixture
async def bob(test_session):
    return await _create_user(test_session, "Bob", "bob@example.com")


@pytest.fixture
async def carol(test_session):
    return await _create_user(test_session, "Carol", "carol@example.com")


@pytest.fixture
def as_actor():
    """Turn a User row into the CurrentUser passed to services."""
    return CurrentUser.model_validate


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user."""

    def _headers(user):
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _headers
