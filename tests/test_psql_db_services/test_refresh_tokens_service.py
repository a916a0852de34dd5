"""
Unit Tests for RefreshTokensService
-----------------------------------
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from auth_service.auth.refresh_token_service import hash_token
from auth_service.core.exceptions import StorageError
from auth_service.models.domain_models import RefreshToken
from auth_service.psql_db_services.refresh_tokens_service import RefreshTokensService
from tests.test_psql_db_services.conftest import make_result

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def new_token(user_id=None):
    return RefreshToken(
        user_id=user_id or uuid4(),
        token_hash=hash_token("secret"),
        expires_at=NOW + timedelta(days=7),
    )


@pytest.fixture
def service(scripted_db):
    return RefreshTokensService(scripted_db.manager)


class TestRefreshTokensService:
    @pytest.mark.asyncio
    async def test_create_stores_hash_only(self, service, scripted_db):
        token = new_token()

        await service.create(token)

        assert scripted_db.params(0)["token_hash"] == token.token_hash
        assert "secret" not in scripted_db.params(0).values()

    @pytest.mark.asyncio
    async def test_find_by_hash(self, service, scripted_db):
        token = new_token()
        scripted_db.queue(make_result(one=token.model_dump()))

        found = await service.find_by_hash(token.token_hash)

        assert found == token

    @pytest.mark.asyncio
    async def test_find_by_hash_missing(self, service, scripted_db):
        scripted_db.queue(make_result(one=None))

        assert await service.find_by_hash("0" * 64) is None

    @pytest.mark.asyncio
    async def test_revoke_only_reports_first_revocation(self, service, scripted_db):
        scripted_db.queue(make_result(rowcount=1), make_result(rowcount=0))
        token_id = uuid4()

        assert await service.revoke(token_id, NOW) is True
        assert await service.revoke(token_id, NOW) is False
        assert "revoked_at IS NULL" in scripted_db.sql(0)

    @pytest.mark.asyncio
    async def test_revoke_by_user_counts_rows(self, service, scripted_db):
        scripted_db.queue(make_result(rowcount=3))

        assert await service.revoke_by_user(uuid4(), NOW) == 3

    @pytest.mark.asyncio
    async def test_rotate_inserts_replacement(self, service, scripted_db):
        old_id = uuid4()
        replacement = new_token()
        scripted_db.queue(make_result(one={"id": old_id}))

        assert await service.rotate(old_id, replacement, NOW) is True
        assert "INSERT INTO refresh_tokens" in scripted_db.sql(1)
        assert scripted_db.params(1)["id"] == replacement.id

    @pytest.mark.asyncio
    async def test_rotate_of_consumed_token_inserts_nothing(self, service, scripted_db):
        scripted_db.queue(make_result(one=None))

        assert await service.rotate(uuid4(), new_token(), NOW) is False
        assert len(scripted_db.statements) == 1

    @pytest.mark.asyncio
    async def test_delete_expired(self, service, scripted_db):
        scripted_db.queue(make_result(rowcount=5))

        assert await service.delete_expired(NOW) == 5
        assert scripted_db.params(0) == {"now": NOW}

    @pytest.mark.asyncio
    async def test_database_failure(self, service, scripted_db):
        scripted_db.queue(OperationalError("DELETE", {}, Exception("down")))

        with pytest.raises(StorageError):
            await service.delete_expired(NOW)
