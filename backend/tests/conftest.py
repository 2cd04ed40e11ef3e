"""
Shared pytest fixtures.

Environment defaults are set before anything imports the cached settings.
"""

import json
import os
import tempfile

_TEST_ROOT = tempfile.mkdtemp(prefix="parley-tests-")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_ROOT}/parley-test.db")
os.environ.setdefault("STORAGE_BASE_PATH", os.path.join(_TEST_ROOT, "storage"))
os.environ.setdefault("BASE_URL", "http://test")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from parley.core import security
from parley.infrastructure.local.database import init_db
from parley.infrastructure.local.message_repository import SqliteMessageRepository
from parley.infrastructure.local.storage_provider import LocalStorageProvider
from parley.infrastructure.local.user_repository import SqliteUserRepository
from parley.services.realtime_service import RealtimeGateway


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    """Full-strength PBKDF2 makes every signup take ~0.5s."""
    monkeypatch.setattr(security, "_PBKDF2_ITERATIONS", 1_000)


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def user_repo(session_factory):
    return SqliteUserRepository(session_factory=session_factory)


@pytest.fixture
def message_repo(session_factory):
    return SqliteMessageRepository(session_factory=session_factory)


@pytest.fixture
def storage(tmp_path):
    return LocalStorageProvider(base_path=str(tmp_path / "storage"), base_url="http://test")


@pytest.fixture
def gateway():
    return RealtimeGateway()


class FakeSocket:
    """Records frames the gateway pushes; can be told to fail."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.frames: list[dict] = []
        self.closed_with: int | None = None

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise RuntimeError("socket is closed")
        self.frames.append(json.loads(data))

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        self.closed_with = code

    def events(self, name: str) -> list:
        return [frame["data"] for frame in self.frames if frame["event"] == name]


@pytest.fixture
def make_socket():
    return FakeSocket
