"""
Configuration Manager
--------------------
Centralized configuration management using Pydantic Settings.
All application settings are loaded from environment variables with validation.

The JWT signing secret is read once here and handed to the token codec at
startup. Nothing else in the service reads it from the environment.
"""

from datetime import timedelta
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class ApplicationSettings(BaseSettings):
    """Main application configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application metadata
    app_name: str = Field(default="Auth Service", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # FastAPI server configuration
    fastapi_host: str = Field(default="0.0.0.0", description="FastAPI host")
    fastapi_port: int = Field(default=8080, description="FastAPI port")

    # PostgreSQL database configuration
    database_host: str = Field(default="localhost", description="PostgreSQL host")
    database_port: int = Field(default=5432, description="PostgreSQL port")
    database_user: str = Field(default="user", description="PostgreSQL user")
    database_password: str = Field(default="password", description="PostgreSQL password")
    database_name: str = Field(default="authdb", description="PostgreSQL database name")
    database_pool_size: int = Field(default=20, description="Connection pool size")
    database_max_overflow: int = Field(
        default=10, description="Max overflow connections"
    )
    database_command_timeout_seconds: float = Field(
        default=10.0, description="Per-statement timeout applied to every connection"
    )

    # JWT configuration
    jwt_secret_key: Optional[str] = Field(
        default=None, description="HMAC signing secret (required at startup)"
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_access_token_expire_hours: int = Field(
        default=24, description="Access token lifetime in hours"
    )
    jwt_refresh_token_expire_days: int = Field(
        default=7, description="Refresh token lifetime in days"
    )

    # RBAC bootstrap
    rbac_seed_default_roles: bool = Field(
        default=False,
        description="Create admin, user and moderator roles at startup when missing",
    )

    # Google OAuth
    google_client_id: Optional[str] = Field(
        default=None, description="Google OAuth client id (ID token audience)"
    )
    google_tokeninfo_url: str = Field(
        default="https://oauth2.googleapis.com/tokeninfo",
        description="Google endpoint used to validate ID tokens",
    )
    google_request_timeout_seconds: float = Field(
        default=5.0, description="Timeout for calls to Google"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is acceptable."""
        valid_levels = ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        """Only HMAC algorithms are supported for signing."""
        valid_algorithms = ["HS256", "HS384", "HS512"]
        v_upper = v.upper()
        if v_upper not in valid_algorithms:
            raise ValueError(f"JWT algorithm must be one of {valid_algorithms}")
        return v_upper

    @field_validator("jwt_access_token_expire_hours", "jwt_refresh_token_expire_days")
    @classmethod
    def validate_positive_lifetime(cls, v: int) -> int:
        """Token lifetimes must be positive."""
        if v <= 0:
            raise ValueError("Token lifetime must be positive")
        return v

    @property
    def access_token_ttl(self) -> timedelta:
        """Access token lifetime."""
        return timedelta(hours=self.jwt_access_token_expire_hours)

    @property
    def refresh_token_ttl(self) -> timedelta:
        """Refresh token lifetime."""
        return timedelta(days=self.jwt_refresh_token_expire_days)

    @property
    def database_url(self) -> str:
        """Construct async PostgreSQL database URL."""
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )


# Global settings instance
settings = ApplicationSettings()
