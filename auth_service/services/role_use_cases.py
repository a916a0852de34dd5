"""
Role Management Use Cases
-------------------------
Admin-gated role mutation plus role reads.

Every mutation first resolves the acting user through ``UserLookup`` and
requires that user's role to be exactly ``admin``; nothing is written
otherwise.
"""

from typing import List, Optional
from uuid import UUID

from loguru import logger

from auth_service.auth.protocols import RoleLookup, UserLookup
from auth_service.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from auth_service.models.domain_models import (
    ADMIN_ROLE,
    UNDELETABLE_ROLES,
    Permission,
    Role,
    dedupe_permission_names,
)


def _check_role_name(name: str) -> None:
    # Names are stored and matched exactly as given
    if not name or not name.strip():
        raise ValidationError("role name cannot be empty")


class RoleUseCases:
    def __init__(self, users: UserLookup, roles: RoleLookup):
        self.users = users
        self.roles = roles

    async def verify_admin(self, actor_id: UUID) -> None:
        """
        Raises:
            PermissionDeniedError: If the actor is unknown or not an admin
        """
        actor = await self.users.find_by_id(actor_id)
        if actor is None or actor.role is None or actor.role.name != ADMIN_ROLE:
            logger.warning(f"User {actor_id} attempted a role mutation without admin")
            raise PermissionDeniedError("admin privileges required")

    async def _get_existing(self, role_id: UUID) -> Role:
        role = await self.roles.find_by_id(role_id)
        if role is None:
            raise NotFoundError(f"role {role_id} not found")
        return role

    async def create_role(
        self, actor_id: UUID, name: str, permissions: List[str]
    ) -> Role:
        """
        Raises:
            PermissionDeniedError: Actor is not an admin
            ConflictError: A role with this name exists
        """
        await self.verify_admin(actor_id)
        _check_role_name(name)

        if await self.roles.find_by_name(name) is not None:
            raise ConflictError(f"role '{name}' already exists")

        role = await self.roles.create(Role.with_permissions(name, permissions))
        logger.info(f"Role '{role.name}' created by {actor_id}")
        return role

    async def update_role(
        self,
        actor_id: UUID,
        role_id: UUID,
        name: Optional[str] = None,
        permissions: Optional[List[str]] = None,
    ) -> Role:
        """
        Rename a role and/or replace its permission set.

        Raises:
            PermissionDeniedError: Actor is not an admin
            NotFoundError: Unknown role
            ForbiddenError: Target is the admin role
            ConflictError: New name belongs to another role
        """
        await self.verify_admin(actor_id)
        role = await self._get_existing(role_id)
        if role.is_admin:
            raise ForbiddenError("the admin role cannot be modified")

        if name is not None:
            _check_role_name(name)
            if name != role.name:
                other = await self.roles.find_by_name(name)
                if other is not None and other.id != role.id:
                    raise ConflictError(f"role '{name}' already exists")
                role.name = name

        if permissions is not None:
            role.permissions = [
                Permission(name=permission_name, role_id=role.id)
                for permission_name in dedupe_permission_names(permissions)
            ]

        role = await self.roles.update(role)
        logger.info(f"Role {role.id} updated by {actor_id}")
        return role

    async def delete_role(self, actor_id: UUID, role_id: UUID) -> None:
        """
        Raises:
            PermissionDeniedError: Actor is not an admin
            NotFoundError: Unknown role
            ForbiddenError: Target is the admin or user role
        """
        await self.verify_admin(actor_id)
        role = await self._get_existing(role_id)
        if role.name in UNDELETABLE_ROLES:
            raise ForbiddenError(f"the {role.name} role cannot be deleted")

        await self.roles.delete(role_id)
        logger.info(f"Role '{role.name}' deleted by {actor_id}")

    async def get_role(self, role_id: UUID) -> Role:
        return await self._get_existing(role_id)

    async def list_roles(self) -> List[Role]:
        return await self.roles.list()

    async def assign_role_to_user(
        self, actor_id: UUID, user_id: UUID, role_id: UUID
    ) -> None:
        """
        Raises:
            PermissionDeniedError: Actor is not an admin
            NotFoundError: Unknown user or role
            ConflictError: User already holds the role
        """
        await self.verify_admin(actor_id)

        user = await self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"user {user_id} not found")
        role = await self._get_existing(role_id)

        if user.role_id == role.id:
            raise ConflictError("user already has this role")

        await self.users.update_role(user.id, role.id)
        logger.info(f"Role '{role.name}' assigned to user {user.id} by {actor_id}")
