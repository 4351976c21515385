"""Database handle owning the async engine and session factory."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from .config import Settings

logger = structlog.get_logger("database")


# Base class for models
class Base(DeclarativeBase):
    pass


class Database:
    """Explicitly constructed store-access object.

    Created once in the app lifespan, closed at shutdown, and handed to the
    repository functions. Each ``session()`` checks one connection out of the
    pool and returns it when the block exits.

    Attributes:
        url: SQLAlchemy database URL.
        engine: The async engine (and its connection pool).
    """

    def __init__(self, url: str, echo: bool = False, **engine_kwargs) -> None:
        self.url = url
        self.engine: AsyncEngine = create_async_engine(
            url,
            echo=echo,
            future=True,
            **engine_kwargs,
        )
        self._sessionmaker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build a handle using the pool limits from settings."""
        engine_kwargs = {}
        # SQLite URLs (tests, local runs) keep the dialect's default pool
        if not settings.DATABASE_URL.startswith("sqlite"):
            engine_kwargs = {
                "pool_size": settings.DB_POOL_SIZE,
                "max_overflow": settings.DB_MAX_OVERFLOW,
                "pool_timeout": settings.DB_POOL_TIMEOUT,
                "pool_pre_ping": True,
            }
        return cls(settings.DATABASE_URL, echo=settings.DEBUG, **engine_kwargs)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._sessionmaker() as session:
            yield session

    async def create_tables(self) -> None:
        """Create any missing tables declared on ``Base.metadata``."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_tables_ready")

    async def is_healthy(self) -> bool:
        """Return True if a connection can be acquired and queried."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.error("database_health_check_failed", error=str(e))
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("database_pool_closed")
