"""PostgreSQL implementations of the storage protocols."""

from auth_service.psql_db_services.refresh_tokens_service import RefreshTokensService
from auth_service.psql_db_services.roles_service import RolesService
from auth_service.psql_db_services.users_service import UsersService

__all__ = ["RefreshTokensService", "RolesService", "UsersService"]
