"""Test fixtures for the IAM module."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.security import fast_hash_secret_key, get_display_secret_key, hash_password
from app.features.iam.models import ApiKey, ApiKeyScope

TEST_SALT = "test-salt"


@pytest.fixture
def mock_db():
    """Mock database session."""
    return AsyncMock()


@pytest.fixture
def project_api_key():
    """Project-scoped key with a fast hash for ``sk-lf-1234567890``."""
    return ApiKey(
        id="seed-api-key",
        public_key="pk-lf-1234567890",
        hashed_secret_key="unused",
        fast_hashed_secret_key=fast_hash_secret_key("sk-lf-1234567890", TEST_SALT),
        display_secret_key=get_display_secret_key("sk-lf-1234567890"),
        scope=ApiKeyScope.PROJECT.value,
        project_id="7a88fb47-b4e2-43b8-a06c-a5ce950dc53a",
        org_id=None,
        expires_at=None,
    )


@pytest.fixture
def org_api_key():
    """Organization-scoped key stored with a bcrypt hash only."""
    return ApiKey(
        id="seed-org-api-key",
        public_key="pk-lf-org-1234567890",
        hashed_secret_key=hash_password("sk-lf-org-1234567890", rounds=4),
        fast_hashed_secret_key=None,
        display_secret_key=get_display_secret_key("sk-lf-org-1234567890"),
        scope=ApiKeyScope.ORGANIZATION.value,
        project_id=None,
        org_id="seed-org-id",
        expires_at=None,
    )


@pytest.fixture
def lookup_returning():
    """Factory for a mock ``Result`` whose scalar lookup returns ``value``."""

    def _make(value):
        result = MagicMock()
        result.scalar_one_or_none.return_value = value
        return result

    return _make
