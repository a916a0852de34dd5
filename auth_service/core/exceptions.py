"""
Service Exceptions
------------------
Error taxonomy shared by the token engine, the RBAC use cases and the HTTP layer.

Every error carries the HTTP status it maps to and a stable ``error_type`` string
so the API boundary can translate it without inspecting messages.
"""

from typing import Optional


class AuthServiceError(Exception):
    """Base class for all expected service failures."""

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str, *, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(message if not context else f"{context}: {message}")


class ConfigError(AuthServiceError):
    """Service is misconfigured (for example the signing secret is missing)."""

    status_code = 500
    error_type = "config_error"


class TokenMalformedError(AuthServiceError):
    """Token is structurally broken and cannot be decoded."""

    status_code = 401
    error_type = "token_malformed"


class TokenExpiredError(AuthServiceError):
    """Token expiry has passed."""

    status_code = 401
    error_type = "token_expired"


class TokenInvalidError(AuthServiceError):
    """Bad signature, disallowed algorithm, bad subject, or an unusable refresh token."""

    status_code = 401
    error_type = "token_invalid"


class AuthenticationError(AuthServiceError):
    """Credentials (password or Google ID token) were rejected."""

    status_code = 401
    error_type = "authentication_failed"


class NotFoundError(AuthServiceError):
    status_code = 404
    error_type = "not_found"


class ConflictError(AuthServiceError):
    """Duplicate role name, duplicate role assignment or duplicate email."""

    status_code = 400
    error_type = "conflict"


class ValidationError(AuthServiceError):
    status_code = 400
    error_type = "validation_error"


class PermissionDeniedError(AuthServiceError):
    """Acting principal lacks admin privileges."""

    status_code = 403
    error_type = "permission_denied"


class ForbiddenError(AuthServiceError):
    """Operation targets a protected role."""

    status_code = 403
    error_type = "forbidden"


class StorageError(AuthServiceError):
    """Persistence layer failure."""

    status_code = 500
    error_type = "storage_error"
