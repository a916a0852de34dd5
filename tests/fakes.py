"""
In-memory implementations of the storage protocols used by unit and API tests.
Every read returns a deep copy so callers cannot mutate stored state.
"""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from auth_service.core.exceptions import AuthenticationError, ConflictError, NotFoundError
from auth_service.models.auth_models import GoogleUser
from auth_service.models.domain_models import (
    DEFAULT_ROLE_PERMISSIONS,
    USER_ROLE,
    RefreshToken,
    Role,
    User,
)


class InMemoryRoleStore:
    def __init__(self):
        self.roles: Dict[UUID, Role] = {}
        self.user_store: Optional["InMemoryUserStore"] = None
        self.write_count = 0

    async def find_by_id(self, role_id: UUID) -> Optional[Role]:
        role = self.roles.get(role_id)
        return role.model_copy(deep=True) if role else None

    async def find_by_name(self, name: str) -> Optional[Role]:
        for role in self.roles.values():
            if role.name == name:
                return role.model_copy(deep=True)
        return None

    async def create(self, role: Role) -> Role:
        if await self.find_by_name(role.name) is not None:
            raise ConflictError("resource already exists", context="create role")
        self.write_count += 1
        self.roles[role.id] = role.model_copy(deep=True)
        return role

    async def update(self, role: Role) -> Role:
        if role.id not in self.roles:
            raise NotFoundError(f"role {role.id} not found")
        other = await self.find_by_name(role.name)
        if other is not None and other.id != role.id:
            raise ConflictError("resource already exists", context="update role")
        self.write_count += 1
        self.roles[role.id] = role.model_copy(deep=True)
        return role

    async def delete(self, role_id: UUID) -> None:
        if role_id not in self.roles:
            raise NotFoundError(f"role {role_id} not found")
        self.write_count += 1
        del self.roles[role_id]
        if self.user_store is not None:
            for user in self.user_store.users.values():
                if user.role_id == role_id:
                    user.role_id = None

    async def list(self) -> List[Role]:
        return [role.model_copy(deep=True) for role in self.roles.values()]

    async def find_or_create_default(self) -> Role:
        role = await self.find_by_name(USER_ROLE)
        if role is None:
            role = await self.create(
                Role.with_permissions(USER_ROLE, DEFAULT_ROLE_PERMISSIONS[USER_ROLE])
            )
        return role

    async def is_rbac_enabled(self) -> bool:
        return bool(self.roles)


class InMemoryUserStore:
    def __init__(self, role_store: InMemoryRoleStore):
        self.users: Dict[UUID, User] = {}
        self.role_store = role_store
        role_store.user_store = self
        self.write_count = 0

    async def _load(self, user: Optional[User]) -> Optional[User]:
        if user is None:
            return None
        loaded = user.model_copy(deep=True)
        loaded.role = (
            await self.role_store.find_by_id(loaded.role_id) if loaded.role_id else None
        )
        return loaded

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        return await self._load(self.users.get(user_id))

    async def find_by_email(self, email: str) -> Optional[User]:
        for user in self.users.values():
            if user.email == email:
                return await self._load(user)
        return None

    async def create(self, user: User) -> User:
        if any(existing.email == user.email for existing in self.users.values()):
            raise ConflictError("email already registered", context="create user")
        self.write_count += 1
        stored = user.model_copy(deep=True)
        stored.role = None
        self.users[user.id] = stored
        return user

    async def update_role(self, user_id: UUID, role_id: Optional[UUID]) -> None:
        if user_id not in self.users:
            raise NotFoundError(f"user {user_id} not found")
        self.write_count += 1
        self.users[user_id].role_id = role_id


class InMemoryRefreshTokenStore:
    def __init__(self):
        self.tokens: Dict[UUID, RefreshToken] = {}

    async def create(self, token: RefreshToken) -> RefreshToken:
        if any(t.token_hash == token.token_hash for t in self.tokens.values()):
            raise ConflictError("resource already exists", context="create refresh token")
        self.tokens[token.id] = token.model_copy(deep=True)
        return token

    async def find_by_hash(self, token_hash: str) -> Optional[RefreshToken]:
        for token in self.tokens.values():
            if token.token_hash == token_hash:
                return token.model_copy(deep=True)
        return None

    async def revoke(self, token_id: UUID, revoked_at: datetime) -> bool:
        token = self.tokens.get(token_id)
        if token is None or token.revoked_at is not None:
            return False
        token.revoked_at = revoked_at
        return True

    async def revoke_by_user(self, user_id: UUID, revoked_at: datetime) -> int:
        count = 0
        for token in self.tokens.values():
            if token.user_id == user_id and token.revoked_at is None:
                token.revoked_at = revoked_at
                count += 1
        return count

    async def rotate(
        self, old_token_id: UUID, new_token: RefreshToken, revoked_at: datetime
    ) -> bool:
        if not await self.revoke(old_token_id, revoked_at):
            return False
        await self.create(new_token)
        return True

    async def delete_expired(self, now: datetime) -> int:
        expired = [tid for tid, t in self.tokens.items() if t.expires_at < now]
        for token_id in expired:
            del self.tokens[token_id]
        return len(expired)


class FakeGoogleValidator:
    """Accepts ID tokens registered in ``accounts``."""

    def __init__(self, accounts: Optional[Dict[str, GoogleUser]] = None):
        self.accounts = accounts or {}

    async def validate(self, id_token: str) -> GoogleUser:
        if id_token not in self.accounts:
            raise AuthenticationError("invalid google token")
        return self.accounts[id_token]
