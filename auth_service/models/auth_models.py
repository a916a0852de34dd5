"""
Authentication Models
---------------------
Pydantic models for access-token claims and the authentication endpoints.
Defines the structure for token payloads, responses, and requests.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AccessTokenClaims(BaseModel):
    """
    Validated access-token payload.

    ``role`` and ``permissions`` are present only when the user held a role at
    issuance time. Claims are a snapshot: later role changes are not reflected
    until the token is reissued.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user_id": "550e8400-e29b-41d4-a716-446655440000",
                "exp": "2025-10-21T10:30:00Z",
                "iat": "2025-10-20T10:30:00Z",
                "role": "user",
                "permissions": ["users:read:self", "posts:read"],
            }
        }
    )

    user_id: UUID = Field(..., description="Subject (user id)")
    exp: datetime = Field(..., description="Token expiration timestamp")
    iat: Optional[datetime] = Field(default=None, description="Issued-at timestamp")
    role: Optional[str] = Field(default=None, description="Role name at issuance")
    permissions: Optional[List[str]] = Field(
        default=None, description="Permission names at issuance"
    )


class GoogleUser(BaseModel):
    """Identity extracted from a verified Google ID token."""

    email: str
    name: Optional[str] = None


# ============================================================================
# REQUESTS
# ============================================================================


class RegisterRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {"email": "alice@example.com", "password": "pw12345678"}
        }
    )

    email: EmailStr = Field(..., description="Account email (unique)")
    password: str = Field(..., min_length=8, description="Plain text password")


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, description="Plain text password")


class GoogleLoginRequest(BaseModel):
    """Google sign-in with an ID token obtained by the client."""

    id_token: str = Field(..., min_length=1, description="Google ID token")


class RefreshTokenRequest(BaseModel):
    """Body for both refresh and logout."""

    refresh_token: str = Field(..., min_length=1, description="Refresh token plaintext")


# ============================================================================
# RESPONSES
# ============================================================================


class AuthTokenResponse(BaseModel):
    """
    Token pair returned by register and login.

    ``expires_in`` is the access-token lifetime in seconds.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "refresh_token": "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08",
                "token_type": "Bearer",
                "expires_in": 86400,
            }
        }
    )

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="Opaque refresh token")
    token_type: str = Field(default="Bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class RefreshTokenResponse(BaseModel):
    """Token pair returned by refresh; ``expires_at`` belongs to the new refresh token."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="New opaque refresh token")
    expires_at: datetime = Field(..., description="Refresh token expiry")


class MessageResponse(BaseModel):
    message: str


class CurrentUserResponse(BaseModel):
    """Claims of the presented access token."""

    user_id: UUID
    role: Optional[str] = None
    permissions: List[str] = Field(default_factory=list)
    expires_at: datetime
