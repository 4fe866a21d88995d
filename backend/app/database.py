"""
UserHub Database Configuration
Async SQLAlchemy engine and session management.
"""

import logging
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# Base class for all models
Base = declarative_base()


def _engine_options(database_url: str) -> dict:
    """Pool options per backend. SQLite (tests, local runs) shares one connection."""
    if database_url.startswith("sqlite"):
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "pool_size": 20,
        "max_overflow": 40,
        "pool_pre_ping": True,    # Check connection health before use
        "pool_recycle": 3600,     # Recycle connections every hour
    }


class Database:
    """
    Process-wide engine and session factory.
    Built once by the application factory and disposed on shutdown.
    """

    def __init__(self, database_url: str, echo: bool = False, isolation_level: str | None = None):
        self.url = database_url
        options = _engine_options(database_url)
        if isolation_level:
            options["isolation_level"] = isolation_level

        self.engine = create_async_engine(database_url, echo=echo, future=True, **options)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    async def create_all(self):
        """
        Initialize database tables.
        For development/testing only - use Alembic migrations in production.
        """
        # Register models with Base.metadata
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            return result.scalar() == 1

    async def close(self):
        """Close database connections."""
        await self.engine.dispose()
        logger.info("Database connections closed")


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Dependency that provides a database session.
    Use with FastAPI's Depends().
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
