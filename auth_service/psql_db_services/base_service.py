"""
Base Database Service
--------------------
Base class for the PostgreSQL storage services with shared session management,
error translation and logging.

This base class provides:
- SQLAlchemy session management
- Transaction handling with automatic rollback
- Translation of SQLAlchemy errors into StorageError
- Query execution utilities
"""

from typing import Optional, List, Dict, Any, AsyncGenerator
from contextlib import asynccontextmanager
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from auth_service.core.database_connection import DatabaseManager
from auth_service.core.exceptions import ConflictError, StorageError, ValidationError


class BaseDatabaseService:
    """
    Base class for all database service classes.

    Provides shared functionality for database operations including:
    - SQLAlchemy session management
    - Transaction handling with commit/rollback
    - Error handling and logging
    """

    def __init__(self, database_manager: Optional[DatabaseManager] = None):
        """
        Initialize the database service with a database manager.

        Args:
            database_manager: Optional DatabaseManager instance. If not provided,
                            uses the singleton instance for connection pooling.
        """
        self.database_manager = database_manager or DatabaseManager()
        self._service_name = self.__class__.__name__

    @asynccontextmanager
    async def get_session(
        self, operation: str = "database operation"
    ) -> AsyncGenerator[AsyncSession, None]:
        """
        Get a SQLAlchemy session with automatic commit/rollback.

        Unique-constraint violations surface as ConflictError and every other
        SQLAlchemy error as StorageError carrying ``operation`` as context.

        Yields:
            AsyncSession: SQLAlchemy session

        Example:
            async with self.get_session("find user") as session:
                result = await session.execute(text("SELECT * FROM users"))
                users = result.mappings().all()
        """
        try:
            async with self.database_manager.get_session() as session:
                yield session
        except IntegrityError as error:
            logger.warning(f"{self._service_name}: {operation} conflicted: {error}")
            raise ConflictError("resource already exists", context=operation) from error
        except SQLAlchemyError as error:
            logger.error(
                f"{self._service_name}: Error during {operation}: {error}",
                exc_info=True,
            )
            raise StorageError(str(error), context=operation) from error

    async def execute_single_query(
        self,
        sql_query: str,
        query_parameters: Optional[Dict[str, Any]] = None,
        operation: str = "query",
    ) -> List[Dict[str, Any]]:
        """
        Run one read query in its own session and return every row.

        Args:
            sql_query: SQL query string to execute
            query_parameters: Optional dictionary of query parameters
            operation: Description used in logs and error context

        Returns:
            Result rows as dictionaries (empty list when nothing matched)
        """
        async with self.get_session(operation) as session:
            result = await session.execute(text(sql_query), query_parameters or {})

            return [dict(row) for row in result.mappings().all()]

    # ========================================================================
    # VALIDATION UTILITIES
    # ========================================================================

    def validate_uuid(self, uuid_value: UUID, parameter_name: str = "UUID") -> None:
        """
        Validate that a UUID is not None and is a valid UUID instance.

        Raises:
            ValidationError: If UUID is invalid or None
        """
        if uuid_value is None:
            raise ValidationError(f"{parameter_name} cannot be None")
        if not isinstance(uuid_value, UUID):
            raise ValidationError(f"{parameter_name} must be a valid UUID instance")

    def log_operation(
        self,
        operation_type: str,
        entity_identifier: Any,
        success: bool = True,
        additional_context: Optional[str] = None,
    ) -> None:
        """
        Log database operations for monitoring and debugging.

        Args:
            operation_type: Type of operation (e.g., "CREATE", "UPDATE", "DELETE")
            entity_identifier: Identifier of the entity being operated on
            success: Whether the operation was successful
            additional_context: Optional additional context information
        """
        log_level = "info" if success else "error"
        status = "succeeded" if success else "failed"

        message = (
            f"{self._service_name}: {operation_type} operation {status} "
            f"for entity: {entity_identifier}"
        )

        if additional_context:
            message += f" - {additional_context}"

        getattr(logger, log_level)(message)
