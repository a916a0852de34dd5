"""
Refresh Token Service
---------------------
Issues, validates, rotates and revokes opaque refresh tokens.

The plaintext is 32 random bytes, hex-encoded, and is only ever returned to the
client. Storage sees the SHA-256 hex digest.
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Tuple
from uuid import UUID

from loguru import logger

from auth_service.auth.protocols import RefreshTokenStorage
from auth_service.core.exceptions import (
    AuthServiceError,
    NotFoundError,
    StorageError,
    TokenInvalidError,
)
from auth_service.models.domain_models import RefreshToken, User

REFRESH_TOKEN_BYTES = 32
INVALID_REFRESH_TOKEN_MESSAGE = "refresh token is invalid or expired"


def hash_token(plaintext: str) -> str:
    """SHA-256 hex digest of a refresh token plaintext."""
    return hashlib.sha256(plaintext.encode("utf-8")).hexdigest()


def generate_token_secret() -> str:
    return secrets.token_bytes(REFRESH_TOKEN_BYTES).hex()


class RefreshTokenService:
    def __init__(
        self,
        storage: RefreshTokenStorage,
        refresh_token_ttl: timedelta = timedelta(days=7),
    ):
        self.storage = storage
        self.refresh_token_ttl = refresh_token_ttl

    def _new_record(self, user_id: UUID) -> Tuple[RefreshToken, str]:
        plaintext = generate_token_secret()
        now = datetime.now(timezone.utc)
        record = RefreshToken(
            user_id=user_id,
            token_hash=hash_token(plaintext),
            expires_at=now + self.refresh_token_ttl,
            created_at=now,
        )
        return record, plaintext

    async def issue(self, user: User) -> str:
        """
        Create and store a new refresh token for a user.

        Returns:
            The plaintext token (64 hex characters)

        Raises:
            StorageError: If the record cannot be stored
        """
        record, plaintext = self._new_record(user.id)
        try:
            await self.storage.create(record)
        except AuthServiceError:
            raise
        except Exception as e:
            logger.error(f"Failed to store refresh token for user {user.id}: {e}")
            raise StorageError(str(e), context="issue refresh token") from e

        logger.debug(f"Refresh token {record.id} issued for user {user.id}")
        return plaintext

    async def validate(self, plaintext: str) -> RefreshToken:
        """
        Resolve a plaintext token to its stored record.

        Raises:
            NotFoundError: No record matches the token
            TokenInvalidError: The record is revoked or expired
        """
        record = await self.storage.find_by_hash(hash_token(plaintext))
        if record is None:
            raise NotFoundError(INVALID_REFRESH_TOKEN_MESSAGE)
        if not record.is_valid():
            raise TokenInvalidError(INVALID_REFRESH_TOKEN_MESSAGE)
        return record

    async def revoke(self, token_id: UUID) -> None:
        """Revoke a single token. Revoking an already revoked token is a no-op."""
        changed = await self.storage.revoke(token_id, datetime.now(timezone.utc))
        if changed:
            logger.info(f"Refresh token {token_id} revoked")

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        count = await self.storage.revoke_by_user(user_id, datetime.now(timezone.utc))
        logger.info(f"Revoked {count} refresh token(s) for user {user_id}")
        return count

    async def rotate(self, plaintext: str, user: User) -> Tuple[RefreshToken, str]:
        """
        Exchange a valid refresh token for a new one.

        The old record is revoked and the new one inserted in one transaction.
        If another request already consumed the old token, the exchange fails.

        Returns:
            Tuple of (new record, new plaintext)

        Raises:
            NotFoundError: Unknown token
            TokenInvalidError: Token revoked, expired, owned by another user, or
                consumed by a concurrent rotation
        """
        old_record = await self.validate(plaintext)
        if old_record.user_id != user.id:
            raise TokenInvalidError(INVALID_REFRESH_TOKEN_MESSAGE)

        new_record, new_plaintext = self._new_record(user.id)
        rotated = await self.storage.rotate(
            old_record.id, new_record, datetime.now(timezone.utc)
        )
        if not rotated:
            logger.warning(
                f"Refresh token {old_record.id} was already consumed; rotation refused"
            )
            raise TokenInvalidError(INVALID_REFRESH_TOKEN_MESSAGE)

        logger.debug(f"Refresh token {old_record.id} rotated to {new_record.id}")
        return new_record, new_plaintext

    async def purge_expired(self) -> int:
        """Hard-delete every expired token. Returns the number of rows removed."""
        count = await self.storage.delete_expired(datetime.now(timezone.utc))
        logger.info(f"Purged {count} expired refresh token(s)")
        return count
