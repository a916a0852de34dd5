"""
PostgreSQL Operations for Roles and Permissions
-----------------------------------------------
Implements ``RoleLookup``. A role is always read together with its ordered
permission set, and permission sets are written by replacing every row in the
same transaction as the role change.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from auth_service.core.database_connection import DatabaseManager
from auth_service.core.exceptions import ConflictError, NotFoundError
from auth_service.models.domain_models import (
    DEFAULT_ROLE_PERMISSIONS,
    USER_ROLE,
    Permission,
    Role,
    dedupe_permission_names,
)
from auth_service.psql_db_services.base_service import BaseDatabaseService

ROLE_SELECT = """
    SELECT r.id, r.name, r.created_at, r.updated_at,
           p.id AS permission_id, p.name AS permission_name
    FROM roles r
    LEFT JOIN permissions p ON p.role_id = r.id
"""


def roles_from_rows(rows: List[Dict[str, Any]]) -> List[Role]:
    """Fold joined role/permission rows into Role objects, keeping row order."""
    roles: Dict[UUID, Role] = {}
    for row in rows:
        role = roles.get(row["id"])
        if role is None:
            role = Role(
                id=row["id"],
                name=row["name"],
                created_at=row["created_at"],
                updated_at=row["updated_at"],
            )
            roles[row["id"]] = role
        if row.get("permission_id") is not None:
            role.permissions.append(
                Permission(
                    id=row["permission_id"],
                    name=row["permission_name"],
                    role_id=role.id,
                )
            )
    return list(roles.values())


class RolesService(BaseDatabaseService):
    """Role and permission storage."""

    def __init__(self, database_manager: Optional[DatabaseManager] = None):
        super().__init__(database_manager)

    async def _insert_permissions(self, session: AsyncSession, role: Role) -> None:
        names = dedupe_permission_names([p.name for p in role.permissions])
        role.permissions = [
            Permission(id=uuid4(), name=name, role_id=role.id) for name in names
        ]
        if not role.permissions:
            return
        await session.execute(
            text(
                """
                INSERT INTO permissions (id, role_id, name, position)
                VALUES (:id, :role_id, :name, :position)
                """
            ),
            [
                {
                    "id": permission.id,
                    "role_id": role.id,
                    "name": permission.name,
                    "position": position,
                }
                for position, permission in enumerate(role.permissions)
            ],
        )

    # ========================================================================
    # READ OPERATIONS
    # ========================================================================

    async def find_by_id(self, role_id: UUID) -> Optional[Role]:
        self.validate_uuid(role_id, "role_id")
        rows = await self.execute_single_query(
            ROLE_SELECT + " WHERE r.id = :role_id ORDER BY p.position",
            {"role_id": role_id},
            operation="find role by id",
        )
        roles = roles_from_rows(rows)
        return roles[0] if roles else None

    async def find_by_name(self, name: str) -> Optional[Role]:
        rows = await self.execute_single_query(
            ROLE_SELECT + " WHERE r.name = :name ORDER BY p.position",
            {"name": name},
            operation="find role by name",
        )
        roles = roles_from_rows(rows)
        return roles[0] if roles else None

    async def list(self) -> List[Role]:
        rows = await self.execute_single_query(
            ROLE_SELECT + " ORDER BY r.created_at, r.name, p.position",
            operation="list roles",
        )
        return roles_from_rows(rows)

    async def is_rbac_enabled(self) -> bool:
        """RBAC is enabled as soon as a single role exists."""
        async with self.get_session("check rbac enabled") as session:
            result = await session.execute(
                text("SELECT EXISTS (SELECT 1 FROM roles) AS enabled")
            )
            return bool(result.scalar())

    # ========================================================================
    # WRITE OPERATIONS
    # ========================================================================

    async def create(self, role: Role) -> Role:
        """
        Insert a role and its permissions in one transaction.

        Raises:
            ConflictError: If a role with the same name exists
        """
        now = datetime.now(timezone.utc)
        role.created_at = now
        role.updated_at = now

        async with self.get_session("create role") as session:
            await session.execute(
                text(
                    """
                    INSERT INTO roles (id, name, created_at, updated_at)
                    VALUES (:id, :name, :created_at, :updated_at)
                    """
                ),
                {
                    "id": role.id,
                    "name": role.name,
                    "created_at": role.created_at,
                    "updated_at": role.updated_at,
                },
            )
            await self._insert_permissions(session, role)

        self.log_operation("CREATE", role.name)
        return role

    async def update(self, role: Role) -> Role:
        """
        Persist a role's name and replace its permission set.

        The delete and re-insert of permissions share the transaction of the
        role update, so readers see either the old or the new set.

        Raises:
            NotFoundError: If the role does not exist
            ConflictError: If the new name is taken
        """
        role.updated_at = datetime.now(timezone.utc)

        async with self.get_session("update role") as session:
            result = await session.execute(
                text(
                    """
                    UPDATE roles SET name = :name, updated_at = :updated_at
                    WHERE id = :id
                    RETURNING created_at
                    """
                ),
                {"id": role.id, "name": role.name, "updated_at": role.updated_at},
            )
            updated = result.mappings().one_or_none()
            if updated is None:
                raise NotFoundError(f"role {role.id} not found")
            role.created_at = updated["created_at"]

            await session.execute(
                text("DELETE FROM permissions WHERE role_id = :role_id"),
                {"role_id": role.id},
            )
            await self._insert_permissions(session, role)

        self.log_operation("UPDATE", role.id, additional_context=role.name)
        return role

    async def delete(self, role_id: UUID) -> None:
        """Delete a role. Users holding it keep no role afterwards."""
        self.validate_uuid(role_id, "role_id")

        async with self.get_session("delete role") as session:
            await session.execute(
                text(
                    "UPDATE users SET role_id = NULL, updated_at = CURRENT_TIMESTAMP "
                    "WHERE role_id = :role_id"
                ),
                {"role_id": role_id},
            )
            await session.execute(
                text("DELETE FROM permissions WHERE role_id = :role_id"),
                {"role_id": role_id},
            )
            result = await session.execute(
                text("DELETE FROM roles WHERE id = :role_id"), {"role_id": role_id}
            )
            if result.rowcount == 0:
                raise NotFoundError(f"role {role_id} not found")

        self.log_operation("DELETE", role_id)

    async def find_or_create_default(self) -> Role:
        """Return the ``user`` role, creating it with default permissions if missing."""
        role = await self.find_by_name(USER_ROLE)
        if role is not None:
            return role

        try:
            return await self.create(
                Role.with_permissions(USER_ROLE, DEFAULT_ROLE_PERMISSIONS[USER_ROLE])
            )
        except ConflictError:
            # Created concurrently by another request
            role = await self.find_by_name(USER_ROLE)
            if role is None:
                raise
            return role

    async def seed_default_roles(self) -> List[Role]:
        """Create admin, user and moderator when missing. Returns the roles created."""
        created = []
        for name, permission_names in DEFAULT_ROLE_PERMISSIONS.items():
            if await self.find_by_name(name) is not None:
                continue
            try:
                created.append(
                    await self.create(Role.with_permissions(name, permission_names))
                )
            except ConflictError:
                logger.debug(f"Role '{name}' seeded concurrently, skipping")
        if created:
            logger.info(f"Seeded roles: {', '.join(r.name for r in created)}")
        return created
