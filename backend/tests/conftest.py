"""Shared fixtures: in-memory SQLite, dict-backed redis, temp blob store."""
import base64
import io
import uuid

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from files_manager.database import get_db, get_session_factory
from files_manager.main import app
from files_manager.models import Base
from files_manager.redis_client import get_redis
from files_manager.services.file_storage import FileStorageService, get_file_storage
from files_manager.services.job_queue import JobQueue
from files_manager.services.metadata_repository import MetadataRepository
from files_manager.services.session_gate import SessionStore


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the session store."""

    def __init__(self):
        self.data = {}
        self.ttls = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        self.ttls[key] = ex
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def ping(self):
        return True

    async def aclose(self):
        pass


def make_png(width: int = 800, height: int = 600) -> bytes:
    img = Image.new("RGB", (width, height), color=(200, 30, 90))
    out = io.BytesIO()
    img.save(out, format="PNG")
    return out.getvalue()


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def repo(db):
    return MetadataRepository(db)


@pytest.fixture
def redis():
    return FakeRedis()


@pytest.fixture
def sessions(redis):
    return SessionStore(redis, ttl_seconds=3600)


@pytest.fixture
def storage(tmp_path):
    return FileStorageService(tmp_path / "files")


@pytest.fixture
def queue(session_factory):
    return JobQueue(session_factory, max_attempts=3, retry_backoff=0)


@pytest.fixture
def user_id():
    return str(uuid.uuid4())


@pytest.fixture
def other_user_id():
    return str(uuid.uuid4())


@pytest_asyncio.fixture
async def client(session_factory, redis, storage):
    """API client wired to the test database, fake redis and temp storage."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_redis] = lambda: redis
    app.dependency_overrides[get_file_storage] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def token(sessions, user_id):
    return await sessions.create(user_id)


@pytest_asyncio.fixture
async def other_token(sessions, other_user_id):
    return await sessions.create(other_user_id)
