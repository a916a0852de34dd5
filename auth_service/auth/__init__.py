"""
Token Lifecycle and Authorization Engine
----------------------------------------
- access_token_codec: signed, expiring JWT access tokens
- refresh_token_service: hashed, rotating refresh tokens
- dependencies: FastAPI authentication and role/permission gates
- google_validator: Google ID-token verification
- protocols: storage interfaces the engine consumes

Usage:
    from auth_service.auth import PermissionChecker

    @router.get("/posts", dependencies=[Depends(PermissionChecker(["posts:read"]))])
    async def list_posts(): ...
"""

from auth_service.auth.access_token_codec import AccessTokenCodec
from auth_service.auth.refresh_token_service import RefreshTokenService, hash_token
from auth_service.auth.dependencies import (
    AuthenticatedPrincipal,
    PermissionChecker,
    RoleChecker,
    get_current_user,
    require_admin,
)

__all__ = [
    "AccessTokenCodec",
    "RefreshTokenService",
    "hash_token",
    "AuthenticatedPrincipal",
    "PermissionChecker",
    "RoleChecker",
    "get_current_user",
    "require_admin",
]
