"""
Token Lifecycle Use Cases
-------------------------
Registration, password and Google login, refresh-token rotation and logout.

Register and every login issue an access token together with a refresh token.
New users receive the default ``user`` role only while RBAC is enabled (at least
one role exists).
"""

from typing import Optional
from uuid import UUID

from loguru import logger

from auth_service.auth.access_token_codec import AccessTokenCodec
from auth_service.auth.protocols import GoogleTokenValidator, RoleLookup, UserLookup
from auth_service.auth.refresh_token_service import (
    INVALID_REFRESH_TOKEN_MESSAGE,
    RefreshTokenService,
)
from auth_service.core.exceptions import (
    AuthenticationError,
    ConfigError,
    ConflictError,
    NotFoundError,
    TokenInvalidError,
)
from auth_service.models.auth_models import AuthTokenResponse, RefreshTokenResponse
from auth_service.models.domain_models import User
from auth_service.utils.password_hashing import PasswordHasher

INVALID_CREDENTIALS_MESSAGE = "invalid email or password"


class AuthUseCases:
    def __init__(
        self,
        users: UserLookup,
        roles: RoleLookup,
        codec: AccessTokenCodec,
        refresh_tokens: RefreshTokenService,
        google_validator: Optional[GoogleTokenValidator] = None,
        password_hasher: type = PasswordHasher,
    ):
        self.users = users
        self.roles = roles
        self.codec = codec
        self.refresh_tokens = refresh_tokens
        self.google_validator = google_validator
        self.password_hasher = password_hasher

    async def _new_user(self, email: str, password_hash: Optional[str]) -> User:
        user = User(email=email, password_hash=password_hash)
        if await self.roles.is_rbac_enabled():
            default_role = await self.roles.find_or_create_default()
            user.role_id = default_role.id
            user.role = default_role
        return await self.users.create(user)

    async def _token_pair(self, user: User) -> AuthTokenResponse:
        access_token = self.codec.issue(user)
        refresh_token = await self.refresh_tokens.issue(user)
        return AuthTokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self.codec.expires_in,
        )

    async def register(self, email: str, password: str) -> AuthTokenResponse:
        """
        Create a password account and log it in.

        Raises:
            ConflictError: If the email is already registered
        """
        if await self.users.find_by_email(email) is not None:
            raise ConflictError("user already exists")

        password_hash = await self.password_hasher.hash_password_async(password)
        user = await self._new_user(email, password_hash)

        logger.info(f"Registered user {user.id}")
        return await self._token_pair(user)

    async def login(self, email: str, password: str) -> AuthTokenResponse:
        """
        Authenticate with email and password.

        Raises:
            AuthenticationError: Unknown email, Google-only account or wrong password
        """
        user = await self.users.find_by_email(email)
        if user is None or user.password_hash is None:
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        if not await self.password_hasher.verify_password_async(
            password, user.password_hash
        ):
            logger.warning(f"Failed password login for user {user.id}")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        logger.info(f"User {user.id} logged in")
        return await self._token_pair(user)

    async def login_with_google(self, id_token: str) -> AuthTokenResponse:
        """
        Authenticate with a Google ID token, creating the account on first use.

        Raises:
            ConfigError: If Google login is not configured
            AuthenticationError: If the ID token is rejected
        """
        if self.google_validator is None:
            raise ConfigError("Google login is not configured")

        google_user = await self.google_validator.validate(id_token)

        user = await self.users.find_by_email(google_user.email)
        if user is None:
            user = await self._new_user(google_user.email, None)
            logger.info(f"Created user {user.id} from Google login")

        logger.info(f"User {user.id} logged in with Google")
        return await self._token_pair(user)

    async def refresh(self, refresh_token: str) -> RefreshTokenResponse:
        """
        Exchange a refresh token for a new access token and a new refresh token.

        The presented token is revoked. Reusing it afterwards fails.

        Raises:
            TokenInvalidError: Unknown, revoked or expired token, or a token
                already consumed by a concurrent refresh
        """
        try:
            record = await self.refresh_tokens.validate(refresh_token)
        except NotFoundError as e:
            raise TokenInvalidError(INVALID_REFRESH_TOKEN_MESSAGE) from e

        user = await self.users.find_by_id(record.user_id)
        if user is None:
            logger.warning(f"Refresh token {record.id} belongs to a missing user")
            raise TokenInvalidError(INVALID_REFRESH_TOKEN_MESSAGE)

        try:
            new_record, new_plaintext = await self.refresh_tokens.rotate(
                refresh_token, user
            )
        except NotFoundError as e:
            raise TokenInvalidError(INVALID_REFRESH_TOKEN_MESSAGE) from e

        return RefreshTokenResponse(
            access_token=self.codec.issue(user),
            refresh_token=new_plaintext,
            expires_at=new_record.expires_at,
        )

    async def logout(self, refresh_token: str) -> None:
        """
        Revoke one refresh token. Already revoked or expired tokens are accepted.

        Raises:
            TokenInvalidError: If the token was never issued
        """
        try:
            record = await self.refresh_tokens.validate(refresh_token)
        except NotFoundError as e:
            raise TokenInvalidError(INVALID_REFRESH_TOKEN_MESSAGE) from e
        except TokenInvalidError:
            logger.debug("Logout with an already unusable refresh token")
            return

        await self.refresh_tokens.revoke(record.id)

    async def logout_all(self, user_id: UUID) -> int:
        """Revoke every refresh token of a user. Returns the number revoked."""
        return await self.refresh_tokens.revoke_all_for_user(user_id)
