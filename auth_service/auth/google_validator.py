"""
Google ID Token Validation
--------------------------
Verifies Google ID tokens against Google's tokeninfo endpoint and extracts the
account identity.
"""

from typing import Optional

import httpx
from loguru import logger

from auth_service.core.exceptions import AuthenticationError, ConfigError
from auth_service.models.auth_models import GoogleUser

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


class GoogleTokenInfoValidator:
    """
    ``GoogleTokenValidator`` backed by the tokeninfo endpoint.

    Google verifies signature and expiry; this class checks the audience, the
    issuer and the presence of an email claim.
    """

    def __init__(
        self,
        client_id: Optional[str],
        tokeninfo_url: str = "https://oauth2.googleapis.com/tokeninfo",
        timeout: float = 5.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.client_id = client_id
        self.tokeninfo_url = tokeninfo_url
        self.timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_settings(cls, app_settings) -> "GoogleTokenInfoValidator":
        return cls(
            client_id=app_settings.google_client_id,
            tokeninfo_url=app_settings.google_tokeninfo_url,
            timeout=app_settings.google_request_timeout_seconds,
        )

    async def _fetch_token_info(self, id_token: str) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.get(
                self.tokeninfo_url, params={"id_token": id_token}
            )
        async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout)) as client:
            return await client.get(self.tokeninfo_url, params={"id_token": id_token})

    async def validate(self, id_token: str) -> GoogleUser:
        """
        Verify a Google ID token.

        Raises:
            ConfigError: If no Google client id is configured
            AuthenticationError: If Google rejects the token, the audience or issuer
                does not match, or the token has no email claim
        """
        if not self.client_id:
            raise ConfigError("Google client id is not configured")

        try:
            response = await self._fetch_token_info(id_token)
        except httpx.HTTPError as e:
            logger.error(f"Google tokeninfo request failed: {e}")
            raise AuthenticationError("unable to verify google token") from e

        if response.status_code != 200:
            logger.warning(f"Google rejected ID token (status {response.status_code})")
            raise AuthenticationError("invalid google token")

        try:
            token_info = response.json()
        except ValueError as e:
            raise AuthenticationError("invalid google token") from e

        if token_info.get("aud") != self.client_id:
            logger.warning("Google ID token audience mismatch")
            raise AuthenticationError("invalid google token")
        if token_info.get("iss") not in GOOGLE_ISSUERS:
            raise AuthenticationError("invalid google token")

        email = token_info.get("email")
        if not isinstance(email, str) or not email:
            raise AuthenticationError("token does not contain email claim")

        name = token_info.get("name")
        return GoogleUser(email=email, name=name if isinstance(name, str) else None)
