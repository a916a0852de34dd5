"""Storage and identity-provider interfaces consumed by the auth core.

The token engine and the use cases only depend on these protocols. The
PostgreSQL services in ``auth_service.psql_db_services`` implement them for
production; tests substitute in-memory implementations.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional, Protocol, runtime_checkable
from uuid import UUID


if TYPE_CHECKING:
    from auth_service.models.auth_models import GoogleUser
    from auth_service.models.domain_models import RefreshToken, Role, User


@runtime_checkable
class UserLookup(Protocol):
    """User persistence. Returned users carry their role with permissions loaded."""

    async def find_by_id(self, user_id: UUID) -> Optional[User]: ...

    async def find_by_email(self, email: str) -> Optional[User]: ...

    async def create(self, user: User) -> User:
        """Insert a user. Raises ConflictError when the email is taken."""
        ...

    async def update_role(self, user_id: UUID, role_id: Optional[UUID]) -> None: ...


@runtime_checkable
class RoleLookup(Protocol):
    """Role persistence. Permission sets are read and written as a whole."""

    async def find_by_id(self, role_id: UUID) -> Optional[Role]: ...

    async def find_by_name(self, name: str) -> Optional[Role]: ...

    async def create(self, role: Role) -> Role: ...

    async def update(self, role: Role) -> Role:
        """Persist name and permissions; the stored permission set is replaced."""
        ...

    async def delete(self, role_id: UUID) -> None:
        """Delete the role and detach it from every user holding it."""
        ...

    async def list(self) -> List[Role]: ...

    async def find_or_create_default(self) -> Role:
        """Return the ``user`` role, creating it with its default permissions if absent."""
        ...

    async def is_rbac_enabled(self) -> bool:
        """True when at least one role exists."""
        ...


@runtime_checkable
class RefreshTokenStorage(Protocol):
    """Refresh-token persistence keyed by the SHA-256 hex of the secret."""

    async def create(self, token: RefreshToken) -> RefreshToken: ...

    async def find_by_hash(self, token_hash: str) -> Optional[RefreshToken]: ...

    async def revoke(self, token_id: UUID, revoked_at: datetime) -> bool:
        """Set ``revoked_at`` if still unset. Returns whether a row changed."""
        ...

    async def revoke_by_user(self, user_id: UUID, revoked_at: datetime) -> int: ...

    async def rotate(
        self, old_token_id: UUID, new_token: RefreshToken, revoked_at: datetime
    ) -> bool:
        """Revoke the old row and insert the new one in a single transaction.

        Returns False, inserting nothing, when the old row was already revoked.
        """
        ...

    async def delete_expired(self, now: datetime) -> int: ...


@runtime_checkable
class GoogleTokenValidator(Protocol):
    async def validate(self, id_token: str) -> GoogleUser:
        """Verify a Google ID token. Raises AuthenticationError when rejected."""
        ...
