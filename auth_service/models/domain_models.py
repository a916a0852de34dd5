"""
Domain Models
-------------
Core entities shared by the token engine, the RBAC use cases and the storage layer:
User, Role, Permission and RefreshToken.
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# ============================================================================
# RESERVED ROLES
# ============================================================================

ADMIN_ROLE = "admin"
USER_ROLE = "user"
MODERATOR_ROLE = "moderator"

WILDCARD_PERMISSION = "*"

DEFAULT_ROLE_PERMISSIONS = {
    ADMIN_ROLE: [WILDCARD_PERMISSION],
    USER_ROLE: [
        "users:read:self",
        "users:write:self",
        "posts:read",
        "posts:write:self",
    ],
    MODERATOR_ROLE: ["posts:read", "posts:write", "posts:delete", "users:read"],
}

# Roles that can never be deleted
UNDELETABLE_ROLES = (ADMIN_ROLE, USER_ROLE)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def dedupe_permission_names(names: List[str]) -> List[str]:
    """Collapse duplicates keeping the first occurrence and the supplied order."""
    seen = set()
    ordered = []
    for name in names:
        if name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


class Permission(BaseModel):
    """A named capability owned by exactly one role."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    role_id: Optional[UUID] = None


class Role(BaseModel):
    """
    Named bundle of permissions.

    The ``admin`` role is implicitly granted every permission, whatever rows are
    stored for it.
    """

    id: UUID = Field(default_factory=uuid4)
    name: str
    permissions: List[Permission] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_admin(self) -> bool:
        return self.name == ADMIN_ROLE

    def permission_names(self) -> List[str]:
        """Permission names as embedded in access tokens."""
        if self.is_admin:
            return [WILDCARD_PERMISSION]
        return [permission.name for permission in self.permissions]

    def has_permission(self, permission_name: str) -> bool:
        if self.is_admin:
            return True
        for permission in self.permissions:
            if permission.name in (permission_name, WILDCARD_PERMISSION):
                return True
        return False

    @classmethod
    def with_permissions(cls, name: str, permission_names: List[str]) -> "Role":
        """Build a role and its permission rows from a list of names."""
        role = cls(name=name)
        role.permissions = [
            Permission(name=permission_name, role_id=role.id)
            for permission_name in dedupe_permission_names(permission_names)
        ]
        return role


class User(BaseModel):
    """Account record. ``password_hash`` is absent for Google-only accounts."""

    id: UUID = Field(default_factory=uuid4)
    email: str
    password_hash: Optional[str] = None
    role_id: Optional[UUID] = None
    role: Optional[Role] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class RefreshToken(BaseModel):
    """
    Stored refresh token. Only the SHA-256 hex of the secret is kept.

    ``revoked_at`` moves from None to a timestamp once and never back.
    """

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    token_hash: str
    expires_at: datetime
    created_at: datetime = Field(default_factory=utc_now)
    revoked_at: Optional[datetime] = None

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utc_now()) >= self.expires_at

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        return not self.is_revoked and not self.is_expired(now)
