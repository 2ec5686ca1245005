import contextlib
import logging
from collections.abc import AsyncGenerator
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,  # type: ignore[attr-defined]
    create_async_engine,
)
from sqlmodel import SQLModel

# Register table models on SQLModel.metadata before create_all
from specieshub.accounts import models as _account_models  # noqa: F401
from specieshub.species import models as _species_models  # noqa: F401

logger = logging.getLogger(__name__)


class DatabaseService:
    """Provides an interface for database operations, including initialization."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.db_url = f"sqlite+aiosqlite:///{self.db_path}"

        self.async_engine = create_async_engine(
            self.db_url,
            pool_pre_ping=True,
            pool_recycle=3600,
        )

        # Rows are handed to templates after commit, so they must not expire
        self.async_session_local = async_sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.async_engine,
            class_=AsyncSession,
        )

        # Tables are created by initialize(), which must be awaited after construction

    async def initialize(self) -> None:
        """Create missing tables and apply connection pragmas."""
        async with self.async_engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

        async with self.get_async_db() as session:
            try:
                await session.execute(text("PRAGMA journal_mode = WAL"))
                await session.execute(text("PRAGMA foreign_keys = ON"))
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.warning("Failed to apply startup pragmas: %s", e)

    @contextlib.asynccontextmanager
    async def get_async_db(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide an async database session for dependency injection."""
        async with self.async_session_local() as session:
            yield session

    async def ping(self) -> bool:
        """Check that the database answers a trivial query."""
        async with self.get_async_db() as session:
            try:
                await session.execute(text("SELECT 1"))
                return True
            except SQLAlchemyError as e:
                logger.warning("Database ping failed: %s", e)
                return False

    async def clear_database(self) -> None:
        """Clear all data from the database tables."""
        async with self.get_async_db() as session:
            try:
                for table in reversed(SQLModel.metadata.sorted_tables):
                    await session.execute(table.delete())
                await session.commit()
                logger.info("Database cleared successfully")
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Error clearing database: %s", e)
                raise

    async def dispose(self) -> None:
        """Dispose of the engine to release pooled connections.

        Call this when the DatabaseService is no longer needed, especially in tests,
        to prevent file descriptor leaks.
        """
        if self.async_engine:
            await self.async_engine.dispose()
            logger.debug("Async database engine disposed")
