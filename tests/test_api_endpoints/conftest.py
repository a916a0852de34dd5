"""
Shared fixtures for endpoint tests: the application with every storage
provider replaced by in-memory stores.
"""

import pytest
from fastapi.testclient import TestClient

from auth_service.api.providers import (
    get_google_validator,
    get_refresh_token_storage,
    get_roles_service,
    get_users_service,
)
from auth_service.app import create_app
from auth_service.auth.dependencies import get_access_token_codec


@pytest.fixture
def app(user_store, role_store, refresh_store, codec, google_validator):
    application = create_app()
    application.dependency_overrides[get_users_service] = lambda: user_store
    application.dependency_overrides[get_roles_service] = lambda: role_store
    application.dependency_overrides[get_refresh_token_storage] = lambda: refresh_store
    application.dependency_overrides[get_google_validator] = lambda: google_validator
    application.dependency_overrides[get_access_token_codec] = lambda: codec
    return application


@pytest.fixture
def client(app):
    # Not used as a context manager, so the lifespan (database, seeding) never runs
    return TestClient(app)


@pytest.fixture
def bearer(codec):
    def _bearer(user):
        return {"Authorization": f"Bearer {codec.issue(user)}"}

    return _bearer
