"""
Pytest configuration for Auth Service tests.
Sets up the Python path, the test environment and shared fixtures.
"""

import os
import sys
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

import pytest

# Add the project root to Python path for all tests
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set up test environment variables
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("DATABASE_HOST", "localhost")
os.environ.setdefault("DATABASE_PORT", "5432")
os.environ.setdefault("DATABASE_NAME", "authdb_test")
os.environ.setdefault("DATABASE_USER", "myuser")
os.environ.setdefault("DATABASE_PASSWORD", "mypassword")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-unit-tests-only")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id.apps.googleusercontent.com")

from auth_service.auth.access_token_codec import AccessTokenCodec  # noqa: E402
from auth_service.auth.refresh_token_service import RefreshTokenService  # noqa: E402
from auth_service.models.auth_models import GoogleUser  # noqa: E402
from auth_service.models.domain_models import (  # noqa: E402
    DEFAULT_ROLE_PERMISSIONS,
    Role,
    User,
)
from auth_service.services.auth_use_cases import AuthUseCases  # noqa: E402
from auth_service.services.role_use_cases import RoleUseCases  # noqa: E402
from tests.fakes import (  # noqa: E402
    FakeGoogleValidator,
    InMemoryRefreshTokenStore,
    InMemoryRoleStore,
    InMemoryUserStore,
)

TEST_SECRET = "test-secret-key-for-unit-tests-only"
GOOGLE_ID_TOKEN = "google-id-token-for-bob"


# ============================================================================
# STORE HELPERS
# ============================================================================


def add_role(
    role_store: InMemoryRoleStore, name: str, permissions: Optional[List[str]] = None
) -> Role:
    """Insert a role directly into the in-memory store."""
    if permissions is None:
        permissions = DEFAULT_ROLE_PERMISSIONS.get(name, [])
    role = Role.with_permissions(name, permissions)
    role_store.roles[role.id] = role.model_copy(deep=True)
    return role


def add_user(
    user_store: InMemoryUserStore,
    email: str,
    role: Optional[Role] = None,
    password_hash: Optional[str] = None,
) -> User:
    """Insert a user directly into the in-memory store."""
    user = User(
        email=email,
        password_hash=password_hash,
        role_id=role.id if role else None,
    )
    user_store.users[user.id] = user.model_copy(deep=True)
    user.role = role
    return user


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def role_store():
    return InMemoryRoleStore()


@pytest.fixture
def user_store(role_store):
    return InMemoryUserStore(role_store)


@pytest.fixture
def refresh_store():
    return InMemoryRefreshTokenStore()


@pytest.fixture
def codec():
    return AccessTokenCodec(TEST_SECRET, "HS256", timedelta(hours=1))


@pytest.fixture
def refresh_service(refresh_store):
    return RefreshTokenService(refresh_store, timedelta(days=7))


@pytest.fixture
def google_validator():
    return FakeGoogleValidator(
        {GOOGLE_ID_TOKEN: GoogleUser(email="bob@example.com", name="Bob")}
    )


@pytest.fixture
def auth_use_cases(user_store, role_store, codec, refresh_service, google_validator):
    return AuthUseCases(
        users=user_store,
        roles=role_store,
        codec=codec,
        refresh_tokens=refresh_service,
        google_validator=google_validator,
    )


@pytest.fixture
def role_use_cases(user_store, role_store):
    return RoleUseCases(users=user_store, roles=role_store)


@pytest.fixture
def seeded_roles(role_store):
    """admin, user and moderator roles with their default permissions."""
    return {name: add_role(role_store, name) for name in DEFAULT_ROLE_PERMISSIONS}


@pytest.fixture
def admin_user(user_store, seeded_roles):
    return add_user(user_store, "admin@example.com", role=seeded_roles["admin"])


@pytest.fixture
def regular_user(user_store, seeded_roles):
    return add_user(user_store, "carol@example.com", role=seeded_roles["user"])
