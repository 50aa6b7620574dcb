"""Test fixtures for the SCIM module."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from app.core.database import get_db
from app.features.iam.models import User
from app.features.iam.schemas import AuthScope
from app.features.scim.deps import require_org_scope
from app.main import app


@pytest.fixture
def org_scope():
    """Organization-scoped auth result."""
    return AuthScope(
        access_level="organization",
        org_id="seed-org-id",
        project_id=None,
        api_key_id="seed-org-api-key",
    )


@pytest.fixture
def mock_db():
    """Mock database session."""
    return AsyncMock()


@pytest.fixture
def client(mock_db):
    """Test client with the database dependency replaced."""

    async def override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def authed_client(client, org_scope):
    """Test client whose requests pass SCIM authentication."""
    app.dependency_overrides[require_org_scope] = lambda: org_scope
    return client


@pytest.fixture
def sample_user():
    """ORM user as stored after provisioning."""
    user = User(
        id="user-42",
        email="jane@example.com",
        name="Jane Doe",
        password=None,
        image=None,
    )
    user.created_at = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    user.updated_at = datetime(2024, 1, 2, 12, 0, tzinfo=UTC)
    return user
