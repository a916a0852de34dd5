"""
Dependency Providers
--------------------
FastAPI dependency functions that wire storage services, the token engine and
the use cases together. Tests replace the storage providers through
``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends

from auth_service.auth.access_token_codec import AccessTokenCodec
from auth_service.auth.dependencies import get_access_token_codec
from auth_service.auth.google_validator import GoogleTokenInfoValidator
from auth_service.auth.protocols import (
    GoogleTokenValidator,
    RefreshTokenStorage,
    RoleLookup,
    UserLookup,
)
from auth_service.auth.refresh_token_service import RefreshTokenService
from auth_service.core.config_manager import settings
from auth_service.psql_db_services.refresh_tokens_service import RefreshTokensService
from auth_service.psql_db_services.roles_service import RolesService
from auth_service.psql_db_services.users_service import UsersService
from auth_service.services.auth_use_cases import AuthUseCases
from auth_service.services.role_use_cases import RoleUseCases


@lru_cache(maxsize=1)
def get_roles_service() -> RoleLookup:
    return RolesService()


@lru_cache(maxsize=1)
def get_users_service() -> UserLookup:
    return UsersService(roles_service=get_roles_service())


@lru_cache(maxsize=1)
def get_refresh_token_storage() -> RefreshTokenStorage:
    return RefreshTokensService()


@lru_cache(maxsize=1)
def get_google_validator() -> GoogleTokenValidator:
    return GoogleTokenInfoValidator.from_settings(settings)


def get_refresh_token_service(
    storage: RefreshTokenStorage = Depends(get_refresh_token_storage),
) -> RefreshTokenService:
    return RefreshTokenService(storage, settings.refresh_token_ttl)


def get_auth_use_cases(
    users: UserLookup = Depends(get_users_service),
    roles: RoleLookup = Depends(get_roles_service),
    codec: AccessTokenCodec = Depends(get_access_token_codec),
    refresh_tokens: RefreshTokenService = Depends(get_refresh_token_service),
    google_validator: GoogleTokenValidator = Depends(get_google_validator),
) -> AuthUseCases:
    return AuthUseCases(
        users=users,
        roles=roles,
        codec=codec,
        refresh_tokens=refresh_tokens,
        google_validator=google_validator,
    )


def get_role_use_cases(
    users: UserLookup = Depends(get_users_service),
    roles: RoleLookup = Depends(get_roles_service),
) -> RoleUseCases:
    return RoleUseCases(users=users, roles=roles)
