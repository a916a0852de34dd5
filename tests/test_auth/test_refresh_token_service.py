"""
Refresh Token Service Tests
---------------------------
Issuance, validation, revocation, rotation and expiry sweep against the
in-memory token store.
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from auth_service.auth.refresh_token_service import (
    INVALID_REFRESH_TOKEN_MESSAGE,
    RefreshTokenService,
    hash_token,
)
from auth_service.core.exceptions import NotFoundError, StorageError, TokenInvalidError
from auth_service.models.domain_models import RefreshToken, User


def test_hash_token_is_sha256_hex():
    assert hash_token("abc") == hashlib.sha256(b"abc").hexdigest()
    assert len(hash_token("abc")) == 64


class TestRefreshTokenIssue:
    def setup_method(self):
        self.user = User(email="alice@example.com")

    @pytest.mark.asyncio
    async def test_issue_returns_64_hex_chars(self, refresh_service):
        plaintext = await refresh_service.issue(self.user)

        assert len(plaintext) == 64
        int(plaintext, 16)

    @pytest.mark.asyncio
    async def test_issue_stores_only_the_hash(self, refresh_service, refresh_store):
        plaintext = await refresh_service.issue(self.user)

        (record,) = refresh_store.tokens.values()
        assert record.token_hash == hash_token(plaintext)
        assert record.token_hash != plaintext
        assert record.user_id == self.user.id
        assert record.revoked_at is None

    @pytest.mark.asyncio
    async def test_issue_sets_expiry_from_ttl(self, refresh_store):
        service = RefreshTokenService(refresh_store, timedelta(days=3))
        before = datetime.now(timezone.utc)

        await service.issue(self.user)

        (record,) = refresh_store.tokens.values()
        assert before + timedelta(days=3) <= record.expires_at
        assert record.expires_at <= datetime.now(timezone.utc) + timedelta(days=3)

    @pytest.mark.asyncio
    async def test_concurrent_issues_are_independent(self, refresh_service, refresh_store):
        first = await refresh_service.issue(self.user)
        second = await refresh_service.issue(self.user)

        assert first != second
        assert len(refresh_store.tokens) == 2

    @pytest.mark.asyncio
    async def test_storage_failure_surfaces_as_storage_error(self):
        storage = AsyncMock()
        storage.create.side_effect = RuntimeError("connection reset")
        service = RefreshTokenService(storage)

        with pytest.raises(StorageError):
            await service.issue(self.user)


class TestRefreshTokenValidate:
    def setup_method(self):
        self.user = User(email="alice@example.com")

    @pytest.mark.asyncio
    async def test_validate_returns_record(self, refresh_service):
        plaintext = await refresh_service.issue(self.user)

        record = await refresh_service.validate(plaintext)

        assert record.user_id == self.user.id

    @pytest.mark.asyncio
    async def test_unissued_token_is_not_found(self, refresh_service):
        with pytest.raises(NotFoundError, match=INVALID_REFRESH_TOKEN_MESSAGE):
            await refresh_service.validate(secrets.token_bytes(32).hex())

    @pytest.mark.asyncio
    async def test_expired_token_is_invalid(self, refresh_service, refresh_store):
        plaintext = secrets.token_bytes(32).hex()
        await refresh_store.create(
            RefreshToken(
                user_id=self.user.id,
                token_hash=hash_token(plaintext),
                expires_at=datetime.now(timezone.utc) - timedelta(seconds=1),
            )
        )

        with pytest.raises(TokenInvalidError, match=INVALID_REFRESH_TOKEN_MESSAGE):
            await refresh_service.validate(plaintext)


class TestRefreshTokenRevoke:
    def setup_method(self):
        self.user = User(email="alice@example.com")
        self.other_user = User(email="dave@example.com")

    @pytest.mark.asyncio
    async def test_revoked_token_fails_validation(self, refresh_service):
        plaintext = await refresh_service.issue(self.user)
        record = await refresh_service.validate(plaintext)

        await refresh_service.revoke(record.id)

        with pytest.raises(TokenInvalidError):
            await refresh_service.validate(plaintext)

    @pytest.mark.asyncio
    async def test_revoke_is_idempotent(self, refresh_service, refresh_store):
        plaintext = await refresh_service.issue(self.user)
        record = await refresh_service.validate(plaintext)

        await refresh_service.revoke(record.id)
        first_revoked_at = refresh_store.tokens[record.id].revoked_at
        await refresh_service.revoke(record.id)

        assert refresh_store.tokens[record.id].revoked_at == first_revoked_at

    @pytest.mark.asyncio
    async def test_revoke_all_only_touches_one_user(self, refresh_service):
        mine = [await refresh_service.issue(self.user) for _ in range(3)]
        theirs = await refresh_service.issue(self.other_user)

        count = await refresh_service.revoke_all_for_user(self.user.id)

        assert count == 3
        for plaintext in mine:
            with pytest.raises(TokenInvalidError):
                await refresh_service.validate(plaintext)
        assert (await refresh_service.validate(theirs)).user_id == self.other_user.id

    @pytest.mark.asyncio
    async def test_revoke_all_skips_already_revoked(self, refresh_service):
        plaintext = await refresh_service.issue(self.user)
        await refresh_service.revoke((await refresh_service.validate(plaintext)).id)
        await refresh_service.issue(self.user)

        assert await refresh_service.revoke_all_for_user(self.user.id) == 1


class TestRefreshTokenRotate:
    def setup_method(self):
        self.user = User(email="alice@example.com")

    @pytest.mark.asyncio
    async def test_rotate_revokes_old_and_issues_new(self, refresh_service):
        old_plaintext = await refresh_service.issue(self.user)

        new_record, new_plaintext = await refresh_service.rotate(old_plaintext, self.user)

        with pytest.raises(TokenInvalidError):
            await refresh_service.validate(old_plaintext)
        validated = await refresh_service.validate(new_plaintext)
        assert validated.id == new_record.id
        assert validated.user_id == self.user.id

    @pytest.mark.asyncio
    async def test_rotate_losing_race_is_invalid(self, refresh_service, refresh_store):
        plaintext = await refresh_service.issue(self.user)
        record = await refresh_service.validate(plaintext)

        # Another request consumes the token between validation and the claim
        original_find = refresh_store.find_by_hash

        async def find_then_race(token_hash):
            found = await original_find(token_hash)
            await refresh_store.revoke(record.id, datetime.now(timezone.utc))
            return found

        refresh_store.find_by_hash = find_then_race

        with pytest.raises(TokenInvalidError):
            await refresh_service.rotate(plaintext, self.user)
        assert len(refresh_store.tokens) == 1

    @pytest.mark.asyncio
    async def test_rotate_rejects_token_of_another_user(self, refresh_service):
        plaintext = await refresh_service.issue(self.user)

        with pytest.raises(TokenInvalidError):
            await refresh_service.rotate(plaintext, User(email="mallory@example.com"))


class TestRefreshTokenPurge:
    @pytest.mark.asyncio
    async def test_purge_removes_only_expired(self, refresh_service, refresh_store):
        user_id = uuid4()
        now = datetime.now(timezone.utc)
        for offset in (timedelta(days=-1), timedelta(days=-2), timedelta(days=1)):
            await refresh_store.create(
                RefreshToken(
                    user_id=user_id,
                    token_hash=secrets.token_hex(32),
                    expires_at=now + offset,
                )
            )

        assert await refresh_service.purge_expired() == 2
        assert len(refresh_store.tokens) == 1
