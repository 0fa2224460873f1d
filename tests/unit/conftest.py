"""Unit test conftest for setting up test environment."""

import os

# Set required environment variables before importing any toggler modules
# so Settings and the engine are built against an in-memory database.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("NOTIFICATIONS_ENABLED", "true")

from typing import Any, List, Tuple  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from toggler import schemas  # noqa: E402
from toggler.core.identity_service import IdentityService  # noqa: E402
from toggler.core.toggle_state_publisher import ToggleStatePublisher  # noqa: E402
from toggler.core.toggle_state_service import ToggleStateService  # noqa: E402
from toggler.models import Base  # noqa: E402


class RecordingBus:
    """In-memory bus that records every publish call."""

    def __init__(self) -> None:
        self.published: List[Tuple[str, Any]] = []

    async def publish(self, topic: str, message: Any) -> int:
        self.published.append((topic, message))
        return 1


class FailingBus:
    """Bus whose publish always fails."""

    def __init__(self) -> None:
        self.attempts = 0

    async def publish(self, topic: str, message: Any) -> int:
        self.attempts += 1
        raise ConnectionError("bus unavailable")


@pytest_asyncio.fixture
async def session_factory():
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    """Database session for a single test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def bus():
    """Recording message bus."""
    return RecordingBus()


@pytest.fixture
def publisher(bus):
    """Toggle state publisher wired to the recording bus."""
    return ToggleStatePublisher(bus=bus, enabled=True)


@pytest.fixture
def identities():
    """Identity registry."""
    return IdentityService()


@pytest.fixture
def state_service(publisher, identities):
    """Toggle state service wired to the recording bus."""
    return ToggleStateService(publisher=publisher, identities=identities)


@pytest_asyncio.fixture
async def dark_mode(db, identities):
    """Toggle 'dark-mode'."""
    return await identities.create_toggle(db, schemas.ToggleCreate(key="dark-mode"))


@pytest_asyncio.fixture
async def web(db, identities):
    """Service 'web'."""
    return await identities.create_service(db, schemas.ServiceCreate(key="web"))


@pytest.fixture
def failing_bus():
    """Message bus that always fails."""
    return FailingBus()


@pytest.fixture
def failing_state_service(failing_bus, identities):
    """Toggle state service whose notifications always fail to publish."""
    return ToggleStateService(
        publisher=ToggleStatePublisher(bus=failing_bus, enabled=True), identities=identities
    )
