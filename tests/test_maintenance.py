"""
Tests for the expired refresh token purge command
"""

from unittest.mock import AsyncMock, patch

import pytest

from auth_service import maintenance


@pytest.fixture
def patched_db():
    with patch.object(maintenance, "initialize_db", new=AsyncMock()) as init, patch.object(
        maintenance, "close_db", new=AsyncMock()
    ) as close, patch.object(maintenance, "configure_logger"):
        yield init, close


class TestPurgeExpiredTokens:
    @pytest.mark.asyncio
    async def test_purge_returns_removed_count(self, patched_db):
        init, close = patched_db
        with patch.object(maintenance, "RefreshTokensService") as storage_cls:
            storage_cls.return_value.delete_expired = AsyncMock(return_value=4)

            removed = await maintenance.purge_expired_tokens()

        assert removed == 4
        init.assert_awaited_once()
        close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_database_closed_on_failure(self, patched_db):
        _, close = patched_db
        with patch.object(maintenance, "RefreshTokensService") as storage_cls:
            storage_cls.return_value.delete_expired = AsyncMock(
                side_effect=RuntimeError("down")
            )

            with pytest.raises(RuntimeError):
                await maintenance.purge_expired_tokens()

        close.assert_awaited_once()

    def test_main_exit_codes(self, patched_db):
        with patch.object(
            maintenance, "purge_expired_tokens", new=AsyncMock(return_value=0)
        ):
            assert maintenance.main() == 0
        with patch.object(
            maintenance, "purge_expired_tokens", new=AsyncMock(side_effect=RuntimeError("x"))
        ):
            assert maintenance.main() == 1
