"""Pytest fixtures for testing."""

import os
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path
from uuid import UUID, uuid4

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("UPLOAD_PATH", tempfile.mkdtemp(prefix="attachment-hub-"))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from attachment_hub.api.deps import get_storage
from attachment_hub.core.database import get_db
from attachment_hub.core.storage import LocalFileStorage
from attachment_hub.main import app
from attachment_hub.models.base import Base
from attachment_hub.models.media_type import MediaType

# Override with a postgresql+asyncpg URL to run against a real server
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")

SEED_MEDIA_TYPES = {
    "pdf": "application/pdf",
    "txt": "text/plain",
    "png": "image/png",
}


@pytest_asyncio.fixture(scope="function")
async def db() -> AsyncGenerator[AsyncSession, None]:
    """Create test database session.

    Builds a fresh schema per test and seeds a few media type mappings.
    """
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        session.add_all(
            MediaType(ext=ext, value=value) for ext, value in SEED_MEDIA_TYPES.items()
        )
        await session.commit()

        try:
            yield session
        finally:
            await session.rollback()
            await session.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def upload_root(tmp_path: Path) -> Path:
    root = tmp_path / "uploads"
    root.mkdir()
    return root


@pytest.fixture
def storage(upload_root: Path) -> LocalFileStorage:
    return LocalFileStorage(upload_root, max_upload_size=1024 * 1024)


@pytest.fixture
def owner_account_id() -> UUID:
    return uuid4()


@pytest.fixture
def other_account_id() -> UUID:
    return uuid4()


@pytest_asyncio.fixture(scope="function")
async def client(
    db: AsyncSession,
    storage: LocalFileStorage,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database and storage overrides.

    Args:
        db: Test database session
        storage: Storage rooted in a per-test temp directory

    Yields:
        AsyncClient configured for testing
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
