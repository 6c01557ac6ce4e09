"""
Database connection module.
Provides async connection pooling with SQLAlchemy.
"""

import logging
from typing import AsyncGenerator, Optional
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
    AsyncEngine,
)
from sqlalchemy.pool import StaticPool

from ..config import Settings, load_settings

logger = logging.getLogger(__name__)


class Database:
    """Async database connection manager."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
    ):
        self._database_url = database_url or load_settings().database_url
        self._echo = echo
        self._pool_size = pool_size
        self._max_overflow = max_overflow
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            database_url=settings.database_url,
            echo=settings.database_echo,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )

    @property
    def engine(self) -> AsyncEngine:
        """Get the database engine."""
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call connect() first.")
        return self._engine

    @property
    def is_sqlite(self) -> bool:
        return self._database_url.startswith("sqlite")

    async def connect(self) -> None:
        """Initialize the database connection pool."""
        if self._engine is not None:
            logger.warning("Database already connected")
            return

        logger.info("Connecting to database: %s", self._database_url.split("@")[-1])

        if self.is_sqlite:
            # One shared connection keeps an in-memory database alive
            self._engine = create_async_engine(
                self._database_url,
                echo=self._echo,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        else:
            self._engine = create_async_engine(
                self._database_url,
                echo=self._echo,
                pool_size=self._pool_size,
                max_overflow=self._max_overflow,
                pool_pre_ping=True,
            )

        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        logger.info("Database connection pool initialized")

    async def disconnect(self) -> None:
        """Close the database connection pool."""
        if self._engine is not None:
            logger.info("Closing database connection pool")
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Request-scoped session; one transaction per context.

        Commits on success and rolls back on any error, so a rejected
        mutation leaves the graph unchanged.
        """
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call connect() first.")

        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_tables(self) -> None:
        """Create all database tables."""
        from .models import Base

        logger.info("Creating database tables...")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def drop_tables(self) -> None:
        """Drop all database tables. Use with caution!"""
        from .models import Base

        logger.warning("Dropping all database tables!")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)


# Global database instance
_database: Optional[Database] = None


def get_database() -> Database:
    """Get the global database instance."""
    global _database
    if _database is None:
        _database = Database.from_settings(load_settings())
    return _database
