# Relational store connection management
# popcorn_api/data_access/database.py

"""
Async SQLAlchemy engine and session management for the catalog database.

The engine owns a connection pool shared by all requests; every request gets
its own `AsyncSession` (and therefore its own pooled connection).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Database connection manager.

    Handles engine creation, session scoping and disposal.
    """

    def __init__(self, database_url: str, pool_size: int = 10, echo: bool = False):
        """
        Initialize database manager.

        Args:
            database_url: SQLAlchemy async URL (e.g. mssql+aioodbc://...)
            pool_size: Number of pooled connections kept open
            echo: If True, log all SQL statements (useful for debugging)
        """
        self.engine: AsyncEngine = create_async_engine(
            database_url,
            echo=echo,
            pool_size=pool_size,
            pool_pre_ping=True,
        )
        self.SessionLocal = async_sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session_scope(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Async context manager for a read-only session.

        Rolls back on failure; the catalog is never written to.

        Yields:
            AsyncSession bound to a pooled connection
        """
        session = self.SessionLocal()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def close(self) -> None:
        """Dispose the engine and all pooled connections."""
        await self.engine.dispose()


_db_manager: Optional[DatabaseManager] = None


def init_db_manager(database_url: str, pool_size: int = 10, echo: bool = False) -> DatabaseManager:
    """Create the process-wide database manager."""
    global _db_manager
    _db_manager = DatabaseManager(database_url, pool_size=pool_size, echo=echo)
    logger.info("Database engine created.")
    return _db_manager


def get_db_manager() -> Optional[DatabaseManager]:
    """Return the process-wide database manager, or None before startup."""
    return _db_manager


async def close_db_manager() -> None:
    global _db_manager
    if _db_manager is not None:
        await _db_manager.close()
        logger.info("Database engine disposed.")
        _db_manager = None
