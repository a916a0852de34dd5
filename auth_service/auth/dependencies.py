"""
FastAPI Authorization Dependencies
----------------------------------
FastAPI dependencies for JWT-based authentication and role/permission gates.

Every gate works only from the validated access-token claims; no database query
is made per request. A user whose role changes keeps the old claims until the
token expires.

Each check produces an ``AuthorizationDecision`` (``Authorized`` or ``Denied``)
which ``enforce_decision`` turns into the principal or an HTTP error.
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from loguru import logger

from auth_service.auth.access_token_codec import AccessTokenCodec
from auth_service.core.config_manager import settings
from auth_service.core.exceptions import (
    TokenExpiredError,
    TokenInvalidError,
    TokenMalformedError,
)
from auth_service.models.auth_models import AccessTokenClaims
from auth_service.models.domain_models import ADMIN_ROLE, WILDCARD_PERMISSION

# OAuth2 scheme for extracting Bearer tokens from Authorization header
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login",
    auto_error=False,  # Don't auto-raise 401, let us handle it
)


@lru_cache(maxsize=1)
def get_access_token_codec() -> AccessTokenCodec:
    """Process-wide codec built from settings. Raises ConfigError without a secret."""
    return AccessTokenCodec.from_settings(settings)


# ============================================================================
# AUTHORIZATION DECISIONS
# ============================================================================


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """Identity attached to a request after its access token validated."""

    user_id: UUID
    roles: List[str] = field(default_factory=list)
    permissions: List[str] = field(default_factory=list)
    claims: Optional[AccessTokenClaims] = None

    @classmethod
    def from_claims(cls, claims: AccessTokenClaims) -> "AuthenticatedPrincipal":
        return cls(
            user_id=claims.user_id,
            roles=[claims.role] if claims.role else [],
            permissions=list(claims.permissions or []),
            claims=claims,
        )

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def has_permission(self, permission: str) -> bool:
        if ADMIN_ROLE in self.roles:
            return True
        return permission in self.permissions or WILDCARD_PERMISSION in self.permissions


class DenialReason(str, Enum):
    MISSING_TOKEN = "missing_token"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_MALFORMED = "token_malformed"
    TOKEN_INVALID = "token_invalid"
    ROLE_DENIED = "role_denied"
    PERMISSION_DENIED = "permission_denied"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class Authorized:
    principal: AuthenticatedPrincipal


@dataclass(frozen=True)
class Denied:
    reason: DenialReason
    message: str

    @property
    def status_code(self) -> int:
        if self.reason in (DenialReason.ROLE_DENIED, DenialReason.PERMISSION_DENIED):
            return status.HTTP_403_FORBIDDEN
        return status.HTTP_401_UNAUTHORIZED


AuthorizationDecision = Union[Authorized, Denied]


class AuthorizationDeniedError(HTTPException):
    """HTTP error raised for a Denied decision; ``error_type`` is the denial reason."""

    def __init__(self, decision: Denied):
        headers: Optional[Dict[str, Any]] = None
        if decision.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        super().__init__(
            status_code=decision.status_code, detail=decision.message, headers=headers
        )
        self.error_type = decision.reason.value


def authenticate_token(
    token: Optional[str], codec: AccessTokenCodec
) -> AuthorizationDecision:
    """Validate a bearer token and decide whether the request is authenticated."""
    if not token:
        return Denied(DenialReason.MISSING_TOKEN, "Authorization token required")
    try:
        claims = codec.parse(token)
    except TokenExpiredError:
        return Denied(DenialReason.TOKEN_EXPIRED, "token has expired")
    except TokenMalformedError:
        return Denied(DenialReason.TOKEN_MALFORMED, "token is malformed")
    except TokenInvalidError:
        return Denied(DenialReason.TOKEN_INVALID, "token is invalid")
    return Authorized(AuthenticatedPrincipal.from_claims(claims))


def check_roles(
    principal: AuthenticatedPrincipal, allowed_roles: List[str]
) -> AuthorizationDecision:
    """Authorized when the principal holds any of the allowed roles."""
    if any(principal.has_role(role) for role in allowed_roles):
        return Authorized(principal)
    return Denied(DenialReason.ROLE_DENIED, "Insufficient role")


def check_permissions(
    principal: AuthenticatedPrincipal, required_permissions: List[str]
) -> AuthorizationDecision:
    """Authorized when the principal holds every required permission."""
    if all(principal.has_permission(name) for name in required_permissions):
        return Authorized(principal)
    return Denied(DenialReason.PERMISSION_DENIED, "Insufficient permissions")


def enforce_decision(decision: AuthorizationDecision) -> AuthenticatedPrincipal:
    """
    Turn a decision into the principal, or raise the matching HTTP error.

    Raises:
        AuthorizationDeniedError 401: Missing, expired, malformed or invalid token
        AuthorizationDeniedError 403: Role or permission gate failed
    """
    if isinstance(decision, Authorized):
        return decision.principal
    raise AuthorizationDeniedError(decision)


# ============================================================================
# FASTAPI DEPENDENCIES
# ============================================================================


async def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    codec: AccessTokenCodec = Depends(get_access_token_codec),
) -> AuthenticatedPrincipal:
    """
    Extract and validate the JWT from the Authorization header.

    The principal is also stored on ``request.state.principal``.

    Raises:
        AuthorizationDeniedError 401: If token is missing, malformed, invalid, or expired
    """
    decision = authenticate_token(token, codec)
    if isinstance(decision, Denied):
        logger.warning(f"Authentication failed: {decision.reason}")
    principal = enforce_decision(decision)

    request.state.principal = principal
    logger.debug(f"Token validated for user {principal.user_id}")
    return principal


class RoleChecker:
    """
    Route gate requiring one of the given roles.

    Usage:
        require_moderator = RoleChecker(["moderator", "admin"])
        @router.get("/queue", dependencies=[Depends(require_moderator)])
    """

    def __init__(self, allowed_roles: List[str]):
        if not allowed_roles:
            raise ValueError("RoleChecker needs at least one role")
        self.allowed_roles = list(allowed_roles)

    def __call__(
        self, principal: AuthenticatedPrincipal = Depends(get_current_user)
    ) -> AuthenticatedPrincipal:
        decision = check_roles(principal, self.allowed_roles)
        if isinstance(decision, Denied):
            logger.warning(
                f"Access denied for user {principal.user_id}: "
                f"required roles {', '.join(self.allowed_roles)}"
            )
        return enforce_decision(decision)


class PermissionChecker:
    """
    Route gate requiring every given permission.

    ``*`` or the admin role in the claims satisfies any permission.
    """

    def __init__(self, required_permissions: List[str]):
        if not required_permissions:
            raise ValueError("PermissionChecker needs at least one permission")
        self.required_permissions = list(required_permissions)

    def __call__(
        self, principal: AuthenticatedPrincipal = Depends(get_current_user)
    ) -> AuthenticatedPrincipal:
        decision = check_permissions(principal, self.required_permissions)
        if isinstance(decision, Denied):
            logger.warning(
                f"Access denied for user {principal.user_id}: "
                f"required permissions {', '.join(self.required_permissions)}"
            )
        return enforce_decision(decision)


require_admin = RoleChecker([ADMIN_ROLE])
"""
Allow admins only.
Use for role management endpoints.
"""
