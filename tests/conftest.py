# tests/conftest.py
"""
Shared fixtures: in-memory database, wired services and small factories
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.app.dependencies import build_services
from src.app.models import Base, UserRole


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def async_engine():
    """Create async engine for testing"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,  # Required for in-memory SQLite
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine):
    """Create async database session for testing"""
    async_session = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def file_engine(tmp_path):
    """
    File-backed engine: every session gets its own connection, so
    concurrent writers really race on the version column
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def file_sessions(file_engine):
    return async_sessionmaker(file_engine, class_=AsyncSession, expire_on_commit=False)


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def services(db_session):
    return build_services(db_session)


@pytest.fixture
def make_user(services):
    """Factory creating users through UserService"""

    async def _make(username: str, role: UserRole = UserRole.USER):
        return await services.users.create_user(
            {
                "username": username,
                "email": f"{username}@example.com",
                "password_hash": "x" * 60,
                "role": role,
            }
        )

    return _make


@pytest.fixture
def make_video(services):
    """Factory ingesting a video, completed by default"""

    async def _make(owner, title: str = "Video", complete: bool = True, **fields):
        payload = {"title": title, "video_url": f"/uploads/videos/{title}.mp4"}
        payload.update(fields)
        video = await services.videos.ingest(owner.id, payload)
        if complete:
            video = await services.videos.complete_processing(video.id)
        return video

    return _make


@pytest_asyncio.fixture
async def alice(make_user):
    return await make_user("alice")


@pytest_asyncio.fixture
async def bob(make_user):
    return await make_user("bob")


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user("root", role=UserRole.ADMIN)
