"""
Pytest fixtures for test database, client, and image uploads.

Each test gets a fresh in-memory SQLite database (override with
TEST_DATABASE_URL), an HTTP client with the DB and uploader dependencies
overridden, and Redis disabled.
"""

import os

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.api.deps import get_image_uploader
from app.core.exceptions import UpstreamError
from app.db.base import Base
from app.db.session import get_db
from app.models.event import Event

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


class FakeUploader:
    """Stands in for Cloudinary: records uploads and returns a predictable URL."""

    def __init__(self, error: Optional[UpstreamError] = None):
        self.error = error
        self.uploads: list[tuple[str, int]] = []

    async def upload(self, data: bytes, filename: str, content_type: str = "image/png") -> str:
        if self.error is not None:
            raise self.error
        self.uploads.append((filename, len(data)))
        return f"https://res.cloudinary.com/demo/image/upload/dev-events/{filename}"


def make_event(**overrides) -> Event:
    fields = {
        "title": "PyCon Meetup",
        "slug": "pycon-meetup",
        "description": "Monthly Python community meetup",
        "overview": "Talks, lightning talks and pizza",
        "image": "https://res.cloudinary.com/demo/image/upload/dev-events/pycon.png",
        "venue": "Tech Hub",
        "location": "Berlin, DE",
        "date": "2026-11-12",
        "time": "18:30",
        "mode": "offline",
        "audience": "Python developers",
        "organizer": "Berlin Python User Group",
        "agenda": ["Welcome", "Talks", "Networking"],
        "tags": ["python", "community"],
    }
    fields.update(overrides)
    return Event(**fields)


@pytest.fixture
def event_factory():
    return make_event


@pytest.fixture
def event_form() -> dict:
    """A complete, valid multipart form for POST /events."""
    return {
        "title": "Node.js & Express.js: REST API!",
        "description": "Build a REST API from scratch",
        "overview": "Hands-on workshop covering routing, middleware and testing",
        "venue": "Online",
        "location": "Remote",
        "date": "Aug 20, 2026",
        "time": "09:00 AM",
        "mode": " Online ",
        "audience": "Backend developers",
        "organizer": "JS Guild",
        "tags": '["node", "express", "api"]',
        "agenda": '["Intro", "Routing", "Testing"]',
    }


@pytest.fixture
def image_file() -> dict:
    return {"image": ("cover.png", b"\x89PNG\r\n\x1a\nfake-image-bytes", "image/png")}


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh schema per test; disposed afterwards for isolation."""
    engine_options = {}
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine_options = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    engine = create_async_engine(TEST_DATABASE_URL, **engine_options)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def uploader() -> FakeUploader:
    return FakeUploader()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, uploader: FakeUploader) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB and uploader dependencies."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_uploader] = lambda: uploader

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession) -> Event:
    event = make_event()
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest_asyncio.fixture
async def similar_events(db_session: AsyncSession, test_event: Event) -> list[Event]:
    """One event sharing a tag with test_event and one that does not."""
    related = make_event(title="Django Night", slug="django-night", tags=["python", "django"])
    unrelated = make_event(title="Rust Hack Day", slug="rust-hack-day", tags=["rust"])
    db_session.add_all([related, unrelated])
    await db_session.commit()
    await db_session.refresh(related)
    await db_session.refresh(unrelated)
    return [related, unrelated]
