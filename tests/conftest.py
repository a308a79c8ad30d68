"""
Pytest configuration and fixtures.
"""

import os
from collections.abc import AsyncGenerator, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "testing"
os.environ["DEBUG"] = "true"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-32chars!"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"
os.environ["DATABASE_ENABLED"] = "false"
os.environ["DOWNLOAD_DIR"] = "/tmp/nightowl-test-downloads"

from core.exceptions import ContentFetchError, ExternalServiceError, MutationError  # noqa: E402
from services.content_models import ContentKind, Identity, MediaFile  # noqa: E402
from services.data_store import ContentQuery, DataStore  # noqa: E402
from services.download_counter import MediaDownloader  # noqa: E402

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


# ============ App Fixtures ============


@pytest.fixture
def client() -> TestClient:
    """Synchronous test client."""
    from api.main import app

    return TestClient(app)


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Asynchronous test client."""
    from api.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


# ============ Mock Redis ============


class MockRedis:
    """Mock Redis client for testing."""

    def __init__(self):
        self._data: dict[str, Any] = {}
        self._expiry: dict[str, int] = {}
        self.fail = False

    def _check(self):
        if self.fail:
            from redis.exceptions import ConnectionError

            raise ConnectionError("Redis is down")

    async def get(self, key: str) -> str | None:
        self._check()
        return self._data.get(key)

    async def set(self, key: str, value: str, ex: int = None) -> bool:
        self._check()
        self._data[key] = value
        if ex:
            self._expiry[key] = ex
        return True

    async def setex(self, key: str, seconds: int, value: str) -> bool:
        self._check()
        self._data[key] = value
        self._expiry[key] = seconds
        return True

    async def delete(self, key: str) -> int:
        if key in self._data:
            del self._data[key]
            return 1
        return 0

    async def ping(self) -> bool:
        self._check()
        return True

    async def aclose(self):
        pass


@pytest.fixture
def mock_redis():
    """Create a mock Redis instance."""
    return MockRedis()


# ============ Fake Data Store ============


def make_record(content_id: str, **fields) -> dict[str, Any]:
    """Build a raw content record with sensible defaults."""
    record = {
        "id": content_id,
        "user_id": "user-1",
        "title": f"Item {content_id}",
        "category": "General",
        "tags": [],
        "image_url": f"https://cdn.example.com/{content_id}.png",
        "download_count": 0,
        "color": None,
        "status": "approved",
        "created_at": NOW - timedelta(days=1),
        "updated_at": NOW - timedelta(days=1),
    }
    record.update(fields)
    return record


class FakeDataStore(DataStore):
    """In-memory DataStore with failure injection and call recording."""

    def __init__(self):
        self.records: dict[ContentKind, list[dict[str, Any]]] = {kind: [] for kind in ContentKind}
        self.identities: dict[str, Identity] = {}
        self.favorites: set[tuple[str, str, str]] = set()

        self.fail_content: set[ContentKind] = set()
        self.fail_identities = False
        self.fail_mutations = False
        self.fail_list_favorites = False

        self.content_queries: list[tuple[ContentKind, ContentQuery]] = []
        self.identity_queries: list[set[str]] = []
        self.download_writes: list[tuple[ContentKind, str, int]] = []

    def add(self, kind: ContentKind, *records: Mapping[str, Any]) -> None:
        self.records[ContentKind(kind)].extend(dict(record) for record in records)

    def add_identity(self, user_id: str, username: str | None = None, display_name: str | None = None):
        self.identities[user_id] = Identity(user_id=user_id, username=username, display_name=display_name)

    async def query_content(self, kind: ContentKind, query: ContentQuery) -> list[dict[str, Any]]:
        kind = ContentKind(kind)
        self.content_queries.append((kind, query))
        if kind in self.fail_content:
            raise ContentFetchError(message=f"{kind.value} table unavailable")

        rows = [dict(record) for record in self.records[kind]]
        if query.status is not None:
            rows = [row for row in rows if row.get("status", "approved") == query.status]
        if query.updated_since is not None:
            rows = [
                row for row in rows
                if row.get("updated_at") is not None and row["updated_at"] >= query.updated_since
            ]

        present = [row for row in rows if row.get(query.order_by) is not None]
        missing = [row for row in rows if row.get(query.order_by) is None]
        present.sort(key=lambda row: row[query.order_by], reverse=query.descending)
        rows = present + missing

        if query.limit is not None:
            rows = rows[:query.limit]
        return rows

    async def query_identities(self, user_ids: set[str]) -> dict[str, Identity]:
        self.identity_queries.append(set(user_ids))
        if self.fail_identities:
            raise ContentFetchError(message="Profiles unavailable")
        return {user_id: self.identities[user_id] for user_id in user_ids if user_id in self.identities}

    async def add_favorite(self, user_id: str, kind: ContentKind, content_id: str) -> None:
        if self.fail_mutations:
            raise MutationError(message="Favorites write rejected")
        self.favorites.add((user_id, ContentKind(kind).value, content_id))

    async def remove_favorite(self, user_id: str, kind: ContentKind, content_id: str) -> None:
        if self.fail_mutations:
            raise MutationError(message="Favorites write rejected")
        self.favorites.discard((user_id, ContentKind(kind).value, content_id))

    async def list_favorites(self, user_id: str, kind: ContentKind) -> list[str]:
        if self.fail_list_favorites:
            raise ContentFetchError(message="Favorites unavailable")
        kind_value = ContentKind(kind).value
        return sorted(cid for uid, k, cid in self.favorites if uid == user_id and k == kind_value)

    async def increment_download_count(
        self,
        kind: ContentKind,
        content_id: str,
        previous_count: int,
    ) -> None:
        kind = ContentKind(kind)
        if self.fail_mutations:
            raise MutationError(message="Counter write rejected")
        for record in self.records[kind]:
            if record["id"] == content_id:
                record["download_count"] = previous_count + 1
                self.download_writes.append((kind, content_id, previous_count + 1))
                return
        raise MutationError(message="Content no longer exists")


@pytest.fixture
def fake_store() -> FakeDataStore:
    """Empty in-memory data store."""
    return FakeDataStore()


@pytest.fixture
def gallery_store(fake_store) -> FakeDataStore:
    """Data store seeded with a small picture gallery and uploaders."""
    fake_store.add_identity("user-1", username="nightowl")
    fake_store.add_identity("user-2", display_name="Moth")
    fake_store.add(
        ContentKind.PICTURE,
        make_record(
            "p1",
            title="Cat pic",
            tags=["cute", "animal"],
            color="black",
            download_count=5,
            updated_at=NOW - timedelta(days=3),
        ),
        make_record(
            "p2",
            title="Dog pic",
            tags="cute, Dog",
            color="brown",
            download_count=50,
            updated_at=NOW - timedelta(days=2),
            user_id="user-2",
        ),
        make_record(
            "p3",
            title="Sunset",
            tags='["Sky", "orange"]',
            color="orange",
            image_url="https://cdn.example.com/p3.gif?v=2",
            category="Nature",
            updated_at=NOW - timedelta(days=1),
            user_id="ghost",
        ),
    )
    return fake_store


# ============ Fake Downloader ============


class RecordingDownloader(MediaDownloader):
    """MediaDownloader that records fetches instead of touching the network."""

    def __init__(self):
        self.fetched: list[MediaFile] = []
        self.fail_urls: set[str] = set()

    async def fetch(self, media: MediaFile) -> str:
        if media.url in self.fail_urls:
            raise ExternalServiceError(message=f"Failed to fetch {media.url}")
        self.fetched.append(media)
        return f"/downloads/{media.filename}"


@pytest.fixture
def downloader() -> RecordingDownloader:
    return RecordingDownloader()


# ============ SQL Fixtures ============


@pytest.fixture
async def sql_session_factory():
    """Session factory over an in-memory SQLite database with all tables."""
    from database import create_session_factory, create_tables

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(engine)
    try:
        yield create_session_factory(engine)
    finally:
        await engine.dispose()


# ============ Gallery API Fixtures ============


@pytest.fixture
def gallery_client(gallery_store, mock_redis, downloader) -> TestClient:
    """Test client with stores and downloader replaced by in-memory fakes."""
    from api.dependencies import get_data_store, get_local_store, get_media_downloader
    from api.main import app
    from services.local_store import RedisLocalStore

    app.dependency_overrides[get_data_store] = lambda: gallery_store
    app.dependency_overrides[get_local_store] = lambda: RedisLocalStore(mock_redis)
    app.dependency_overrides[get_media_downloader] = lambda: downloader

    yield TestClient(app)

    app.dependency_overrides.clear()


# ============ Test Settings ============


@pytest.fixture
def test_settings(monkeypatch):
    """Override settings for testing."""
    monkeypatch.setenv("ENVIRONMENT", "testing")
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/15")
    monkeypatch.setenv("SECRET_KEY", "test-secret-key-for-testing-only-32chars!")

    # Clear cached settings
    from core.config import get_settings

    get_settings.cache_clear()

    yield

    # Restore cached settings
    get_settings.cache_clear()


# ============ Test Data Fixtures ============


@pytest.fixture
def auth_headers():
    """Authentication headers for user-1."""
    from core.security import create_access_token

    token = create_access_token(data={"sub": "user-1"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def record_factory():
    """The make_record helper, for tests that seed their own stores."""
    return make_record
