"""
Maintenance Commands
--------------------
``auth-purge-expired-tokens``: deletes every expired refresh token.

Run it from cron or a scheduled job; the service itself never sweeps in the
background.
"""

import asyncio
import sys

from loguru import logger

from auth_service.auth.refresh_token_service import RefreshTokenService
from auth_service.core.config_manager import settings
from auth_service.core.database_connection import close_db, initialize_db
from auth_service.core.logger_setup import configure_logger
from auth_service.psql_db_services.refresh_tokens_service import RefreshTokensService


async def purge_expired_tokens() -> int:
    await initialize_db()
    try:
        service = RefreshTokenService(RefreshTokensService(), settings.refresh_token_ttl)
        return await service.purge_expired()
    finally:
        await close_db()


def main() -> int:
    configure_logger()
    try:
        removed = asyncio.run(purge_expired_tokens())
    except Exception as e:
        logger.error(f"Expired token purge failed: {e}", exc_info=True)
        return 1
    logger.info(f"Expired token purge complete: {removed} removed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
