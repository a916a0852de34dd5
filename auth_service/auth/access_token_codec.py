"""
Access Token Codec
------------------
Builds and parses signed, expiring JWT access tokens.

Security Best Practices:
- Use python-jose[cryptography] for cryptographic operations
- Only HMAC algorithms are accepted, and the token header must name the configured one
- The signing secret is injected once at construction, never read per call
- Validation is purely cryptographic (no DB queries)
- Follow RFC 8725 JWT Best Current Practices
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from auth_service.core.exceptions import (
    ConfigError,
    TokenExpiredError,
    TokenInvalidError,
    TokenMalformedError,
)
from auth_service.models.auth_models import AccessTokenClaims
from auth_service.models.domain_models import User

HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")


class AccessTokenCodec:
    """
    Stateless access-token issuer and parser.

    Args:
        secret_key: HMAC signing secret
        algorithm: One of HS256, HS384, HS512
        access_token_ttl: Lifetime of issued tokens

    Raises:
        ConfigError: If the secret is empty or the algorithm is not HMAC
    """

    def __init__(
        self,
        secret_key: Optional[str],
        algorithm: str = "HS256",
        access_token_ttl: timedelta = timedelta(hours=24),
    ):
        if not secret_key:
            raise ConfigError("JWT secret key is not configured")
        if algorithm not in HMAC_ALGORITHMS:
            raise ConfigError(
                f"Unsupported JWT algorithm '{algorithm}'. "
                f"Must be one of: {', '.join(HMAC_ALGORITHMS)}"
            )
        if access_token_ttl.total_seconds() <= 0:
            raise ConfigError("Access token lifetime must be positive")

        self._secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_ttl = access_token_ttl

    @classmethod
    def from_settings(cls, app_settings) -> "AccessTokenCodec":
        return cls(
            secret_key=app_settings.jwt_secret_key,
            algorithm=app_settings.jwt_algorithm,
            access_token_ttl=app_settings.access_token_ttl,
        )

    @property
    def expires_in(self) -> int:
        """Access token lifetime in seconds."""
        return int(self.access_token_ttl.total_seconds())

    def issue(self, user: User) -> str:
        """
        Create a signed access token for a user.

        Role and permission claims are embedded only when the user has a loaded role.
        The admin role always embeds the wildcard permission.

        Args:
            user: User the token is issued to

        Returns:
            JWT access token string

        Raises:
            ConfigError: If signing fails
        """
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "sub": str(user.id),
            "iat": now,
            "exp": now + self.access_token_ttl,
        }
        if user.role is not None:
            payload["role"] = user.role.name
            payload["permissions"] = user.role.permission_names()

        try:
            token: str = jwt.encode(payload, self._secret_key, algorithm=self.algorithm)
        except JWTError as e:
            logger.error(f"Failed to create access token: {e}")
            raise ConfigError(f"Token creation failed: {e}") from e

        logger.debug(
            f"Access token created for user {user.id}"
            + (f" with role {user.role.name}" if user.role else "")
        )
        return token

    def parse(self, token: str) -> AccessTokenClaims:
        """
        Decode and validate an access token.

        Checks run in a fixed order: structure, expiry, algorithm, signature,
        then required claims. An expired token is reported as expired even when
        its signature would not verify.

        Args:
            token: JWT token string

        Returns:
            AccessTokenClaims: Validated claims

        Raises:
            TokenMalformedError: Token cannot be decoded
            TokenExpiredError: ``exp`` has passed
            TokenInvalidError: Bad algorithm, signature, ``exp`` or ``sub``
        """
        try:
            header = jwt.get_unverified_header(token)
            unverified_claims = jwt.get_unverified_claims(token)
        except (JWTError, AttributeError, TypeError) as e:
            logger.warning(f"Malformed access token: {e}")
            raise TokenMalformedError("token is malformed") from e

        if "exp" not in unverified_claims:
            raise TokenInvalidError("token is missing expiration")
        try:
            expires_at = datetime.fromtimestamp(
                float(unverified_claims["exp"]), tz=timezone.utc
            )
        except (TypeError, ValueError, OverflowError) as e:
            raise TokenInvalidError("token expiration is invalid") from e
        if expires_at < datetime.now(timezone.utc):
            raise TokenExpiredError("token has expired")

        token_algorithm = header.get("alg")
        if token_algorithm not in HMAC_ALGORITHMS or token_algorithm != self.algorithm:
            logger.warning(f"Rejected access token signed with alg={token_algorithm}")
            raise TokenInvalidError("unexpected signing method")

        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpiredError("token has expired") from e
        except JWTError as e:
            logger.warning(f"JWT decode failed: {e}")
            raise TokenInvalidError("token signature is invalid") from e

        subject = payload.get("sub")
        if not isinstance(subject, str):
            raise TokenInvalidError("token subject is missing")
        try:
            user_id = UUID(subject)
        except ValueError as e:
            raise TokenInvalidError("token subject is not a valid user id") from e

        issued_at = payload.get("iat")
        try:
            claims = AccessTokenClaims(
                user_id=user_id,
                exp=expires_at,
                iat=(
                    datetime.fromtimestamp(float(issued_at), tz=timezone.utc)
                    if issued_at is not None
                    else None
                ),
                role=payload.get("role"),
                permissions=payload.get("permissions"),
            )
        except (PydanticValidationError, TypeError, ValueError) as e:
            raise TokenInvalidError("token claims are invalid") from e

        logger.debug(f"Token decoded successfully for user {claims.user_id}")
        return claims
