"""
Models Package
--------------
Domain entities and the request/response schemas of the HTTP layer.
"""

from auth_service.models.domain_models import (
    ADMIN_ROLE,
    DEFAULT_ROLE_PERMISSIONS,
    MODERATOR_ROLE,
    USER_ROLE,
    WILDCARD_PERMISSION,
    Permission,
    RefreshToken,
    Role,
    User,
)
from auth_service.models.auth_models import AccessTokenClaims, GoogleUser

__all__ = [
    "ADMIN_ROLE",
    "DEFAULT_ROLE_PERMISSIONS",
    "MODERATOR_ROLE",
    "USER_ROLE",
    "WILDCARD_PERMISSION",
    "Permission",
    "RefreshToken",
    "Role",
    "User",
    "AccessTokenClaims",
    "GoogleUser",
]
