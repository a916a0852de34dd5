"""
PostgreSQL Operations for Refresh Tokens
----------------------------------------
Implements ``RefreshTokenStorage``. Revocation is a monotonic update guarded by
``revoked_at IS NULL``, so concurrent revokes and rotations never un-revoke or
double-consume a row.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import text

from auth_service.core.database_connection import DatabaseManager
from auth_service.models.domain_models import RefreshToken
from auth_service.psql_db_services.base_service import BaseDatabaseService

INSERT_TOKEN = """
    INSERT INTO refresh_tokens (id, user_id, token_hash, expires_at, created_at)
    VALUES (:id, :user_id, :token_hash, :expires_at, :created_at)
"""


def _token_params(token: RefreshToken) -> dict:
    return {
        "id": token.id,
        "user_id": token.user_id,
        "token_hash": token.token_hash,
        "expires_at": token.expires_at,
        "created_at": token.created_at,
    }


class RefreshTokensService(BaseDatabaseService):
    def __init__(self, database_manager: Optional[DatabaseManager] = None):
        super().__init__(database_manager)

    async def create(self, token: RefreshToken) -> RefreshToken:
        async with self.get_session("create refresh token") as session:
            await session.execute(text(INSERT_TOKEN), _token_params(token))
        return token

    async def find_by_hash(self, token_hash: str) -> Optional[RefreshToken]:
        async with self.get_session("find refresh token") as session:
            result = await session.execute(
                text(
                    """
                    SELECT id, user_id, token_hash, expires_at, created_at, revoked_at
                    FROM refresh_tokens WHERE token_hash = :token_hash
                    """
                ),
                {"token_hash": token_hash},
            )
            record = result.mappings().one_or_none()
        return RefreshToken(**dict(record)) if record else None

    async def revoke(self, token_id: UUID, revoked_at: datetime) -> bool:
        self.validate_uuid(token_id, "token_id")
        async with self.get_session("revoke refresh token") as session:
            result = await session.execute(
                text(
                    """
                    UPDATE refresh_tokens SET revoked_at = :revoked_at
                    WHERE id = :token_id AND revoked_at IS NULL
                    """
                ),
                {"token_id": token_id, "revoked_at": revoked_at},
            )
            return result.rowcount > 0

    async def revoke_by_user(self, user_id: UUID, revoked_at: datetime) -> int:
        self.validate_uuid(user_id, "user_id")
        async with self.get_session("revoke user refresh tokens") as session:
            result = await session.execute(
                text(
                    """
                    UPDATE refresh_tokens SET revoked_at = :revoked_at
                    WHERE user_id = :user_id AND revoked_at IS NULL
                    """
                ),
                {"user_id": user_id, "revoked_at": revoked_at},
            )
            return result.rowcount

    async def rotate(
        self, old_token_id: UUID, new_token: RefreshToken, revoked_at: datetime
    ) -> bool:
        """
        Claim the old row and insert its replacement in one transaction.

        Returns False without inserting when another transaction already revoked
        the old row.
        """
        self.validate_uuid(old_token_id, "old_token_id")
        async with self.get_session("rotate refresh token") as session:
            result = await session.execute(
                text(
                    """
                    UPDATE refresh_tokens SET revoked_at = :revoked_at
                    WHERE id = :token_id AND revoked_at IS NULL
                    RETURNING id
                    """
                ),
                {"token_id": old_token_id, "revoked_at": revoked_at},
            )
            if result.mappings().one_or_none() is None:
                return False
            await session.execute(text(INSERT_TOKEN), _token_params(new_token))
        self.log_operation("ROTATE", old_token_id, additional_context=str(new_token.id))
        return True

    async def delete_expired(self, now: datetime) -> int:
        async with self.get_session("delete expired refresh tokens") as session:
            result = await session.execute(
                text("DELETE FROM refresh_tokens WHERE expires_at < :now"),
                {"now": now},
            )
            return result.rowcount
