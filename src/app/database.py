"""
Database Configuration and Session Management
Uses SQLAlchemy with async support
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.app.config import get_db_settings
from src.app.models import Base

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Owns the async engine and session factory

    Usage:
        async with db_manager.session() as session:
            repo = VideoRepository(session)
            ...
    """

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        settings = get_db_settings()
        self.url = url or settings.url
        self.echo = settings.echo if echo is None else echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        """Create the engine on first use"""
        if self._engine is None:
            kwargs = {"echo": self.echo}
            if self.url.startswith("sqlite") and ":memory:" in self.url:
                # In-memory SQLite must share one connection across sessions
                kwargs["poolclass"] = StaticPool
                kwargs["connect_args"] = {"check_same_thread": False}
            self._engine = create_async_engine(self.url, **kwargs)
            logger.info(f"🔌 Database engine created: {self.url.split('/')[-1]}")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False
            )
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session, rolling back on error"""
        session = self.session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_tables(self) -> None:
        """Create all tables defined by models"""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("✅ Database tables created successfully")
        except Exception as e:
            logger.error(f"❌ Failed to create database tables: {e}")
            raise

    async def drop_tables(self) -> None:
        """
        Drop all tables (use with caution!)
        Only use in development/testing
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.warning("⚠️  All tables dropped")

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections"""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("🔌 Database connections closed")


db_manager = DatabaseManager()
