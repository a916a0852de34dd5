"""
PostgreSQL CRUD Operations for Users
------------------------------------
Implements ``UserLookup``: user creation, lookup by id or email with the role
and its permissions loaded, and role assignment.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import text
from loguru import logger

from auth_service.core.database_connection import DatabaseManager
from auth_service.core.exceptions import ConflictError, NotFoundError
from auth_service.models.domain_models import User
from auth_service.psql_db_services.base_service import BaseDatabaseService
from auth_service.psql_db_services.roles_service import RolesService


class UsersService(BaseDatabaseService):
    """
    User storage.

    Emails are compared exactly as stored; normalisation happens at the HTTP
    boundary.
    """

    def __init__(
        self,
        database_manager: Optional[DatabaseManager] = None,
        roles_service: Optional[RolesService] = None,
    ):
        super().__init__(database_manager)
        self.roles_service = roles_service or RolesService(self.database_manager)

    async def _to_user(self, record: Optional[Dict[str, Any]]) -> Optional[User]:
        if record is None:
            return None
        user = User(**record)
        if user.role_id is not None:
            user.role = await self.roles_service.find_by_id(user.role_id)
        return user

    # ========================================================================
    # READ OPERATIONS
    # ========================================================================

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        """
        Retrieve a user by id.

        Returns:
            User with role loaded, or None if not found
        """
        self.validate_uuid(user_id, "user_id")

        async with self.get_session("find user by id") as session:
            result = await session.execute(
                text(
                    """
                    SELECT id, email, password_hash, role_id, created_at, updated_at
                    FROM users WHERE id = :user_id
                    """
                ),
                {"user_id": user_id},
            )
            record = result.mappings().one_or_none()
        return await self._to_user(dict(record) if record else None)

    async def find_by_email(self, email: str) -> Optional[User]:
        async with self.get_session("find user by email") as session:
            result = await session.execute(
                text(
                    """
                    SELECT id, email, password_hash, role_id, created_at, updated_at
                    FROM users WHERE email = :email
                    """
                ),
                {"email": email},
            )
            record = result.mappings().one_or_none()
        return await self._to_user(dict(record) if record else None)

    # ========================================================================
    # WRITE OPERATIONS
    # ========================================================================

    async def create(self, user: User) -> User:
        """
        Insert a new user.

        Raises:
            ConflictError: If the email is already registered
            StorageError: On database errors
        """
        try:
            async with self.get_session("create user") as session:
                result = await session.execute(
                    text(
                        """
                        INSERT INTO users (
                            id, email, password_hash, role_id, created_at, updated_at
                        )
                        VALUES (
                            :id, :email, :password_hash, :role_id, :created_at, :updated_at
                        )
                        RETURNING id
                        """
                    ),
                    {
                        "id": user.id,
                        "email": user.email,
                        "password_hash": user.password_hash,
                        "role_id": user.role_id,
                        "created_at": user.created_at,
                        "updated_at": user.updated_at,
                    },
                )
                if result.mappings().one_or_none() is None:
                    raise RuntimeError("Failed to create user record")
        except ConflictError as e:
            raise ConflictError("email already registered", context="create user") from e

        logger.info(f"User created successfully: {user.id}")
        return user

    async def update_role(self, user_id: UUID, role_id: Optional[UUID]) -> None:
        """
        Point a user at a role (or at no role).

        Raises:
            NotFoundError: If the user does not exist
        """
        self.validate_uuid(user_id, "user_id")

        async with self.get_session("update user role") as session:
            result = await session.execute(
                text(
                    """
                    UPDATE users SET role_id = :role_id, updated_at = :updated_at
                    WHERE id = :user_id
                    RETURNING id
                    """
                ),
                {
                    "user_id": user_id,
                    "role_id": role_id,
                    "updated_at": datetime.now(timezone.utc),
                },
            )
            if result.mappings().one_or_none() is None:
                raise NotFoundError(f"user {user_id} not found")

        self.log_operation("UPDATE_ROLE", user_id, additional_context=str(role_id))
