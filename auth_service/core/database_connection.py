"""
Database Connection Manager
---------------------------
Manages PostgreSQL database connections with SQLAlchemy async engine.
Provides both ORM and raw SQL query capabilities.
"""

from typing import Any, Dict, Optional, AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy import text
from loguru import logger

from auth_service.core.config_manager import settings


class DatabaseManager:
    """
    Manages database connections and operations using SQLAlchemy async engine.

    One engine (and therefore one connection pool) exists per process. Every
    connection carries a command timeout so no statement blocks indefinitely;
    asyncio cancellation of the awaiting task aborts the in-flight statement.
    """

    _instance = None
    _engine = None
    _sessionmaker = None

    def __new__(cls, *args, **kwargs):
        """Implement singleton pattern."""
        if cls._instance is None:
            cls._instance = super(DatabaseManager, cls).__new__(cls)
        return cls._instance

    @property
    def is_initialized(self) -> bool:
        return self._sessionmaker is not None

    async def initialize(self, config: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize SQLAlchemy async engine.

        Args:
            config: Optional configuration override
        """
        if self._engine is not None:
            logger.warning("Database engine already initialized")
            return

        if config is None:
            config = {
                "host": settings.database_host,
                "port": settings.database_port,
                "dbname": settings.database_name,
                "user": settings.database_user,
                "password": settings.database_password,
                "min_connections": settings.database_pool_size,
                "max_connections": settings.database_pool_size
                + settings.database_max_overflow,
                "command_timeout": settings.database_command_timeout_seconds,
            }

        logger.info(
            f"Initializing database connection to {config.get('host')}:{config.get('port')}"
        )

        try:
            db_url = (
                f"postgresql+asyncpg://"
                f"{config['user']}:{config['password']}@"
                f"{config['host']}:{config['port']}/"
                f"{config['dbname']}"
            )

            self._engine = create_async_engine(
                db_url,
                pool_size=config.get("min_connections", 5),
                max_overflow=config.get("max_connections", 10)
                - config.get("min_connections", 5),
                pool_pre_ping=True,
                pool_recycle=3600,
                pool_timeout=30,
                connect_args={"command_timeout": config.get("command_timeout", 10.0)},
                echo=False,
            )

            self._sessionmaker = async_sessionmaker(
                bind=self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            logger.info(
                "SQLAlchemy async engine and sessionmaker initialized successfully"
            )

        except Exception as e:
            logger.error(f"Error initializing SQLAlchemy engine: {e}")
            raise

    async def close(self) -> None:
        """Close SQLAlchemy engine."""
        if self._engine is not None:
            logger.info("Disposing SQLAlchemy engine")
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None
            logger.info("SQLAlchemy engine disposed")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get a SQLAlchemy async session from the sessionmaker.

        Everything executed inside one ``async with`` block runs in a single
        transaction (READ COMMITTED, the PostgreSQL default) that commits on
        success and rolls back on any exception.

        Yields:
            AsyncSession: Active SQLAlchemy session

        Raises:
            RuntimeError: If database not initialized
        """
        if not self._sessionmaker:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session = self._sessionmaker()
        try:
            yield session
            await session.commit()
            logger.debug("Session committed successfully")
        except BaseException as e:
            await session.rollback()
            logger.warning(f"Session rolled back due to error: {e!r}")
            raise
        finally:
            await session.close()
            logger.debug("Session closed and returned to pool")

    async def ping(self) -> bool:
        """Run ``SELECT 1`` and report whether the database answered."""
        async with self.get_session() as session:
            result = await session.execute(text("SELECT 1"))
            return result.scalar() == 1


# Global database manager instance
db_manager = DatabaseManager()


async def initialize_db(config=None):
    """Initialize database connection."""
    await db_manager.initialize(config)


async def close_db():
    """Close all database connections."""
    await db_manager.close()


def get_db_manager():
    """Get database manager instance."""
    return db_manager
