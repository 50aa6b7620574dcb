"""Unit tests for API key authentication."""

import base64
import threading
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest

from app.features.iam.auth import ApiAuthService, parse_basic_auth

TEST_SALT = "test-salt"


def _basic(public_key: str, secret_key: str) -> str:
    token = base64.b64encode(f"{public_key}:{secret_key}".encode()).decode()
    return f"Basic {token}"


class TestParseBasicAuth:
    """Tests for Basic auth header parsing."""

    def test_valid_header(self):
        """Test credentials are split into public and secret key."""
        assert parse_basic_auth(_basic("pk-lf-1", "sk-lf-2")) == ("pk-lf-1", "sk-lf-2")

    def test_secret_may_contain_colon(self):
        """Test only the first colon separates the credentials."""
        assert parse_basic_auth(_basic("pk", "a:b")) == ("pk", "a:b")

    @pytest.mark.parametrize(
        "header",
        [
            "Bearer sk-lf-123",
            "Basic",
            "Basic !!!not-base64!!!",
            f"Basic {base64.b64encode(b'no-separator').decode()}",
            f"Basic {base64.b64encode(b':secret-only').decode()}",
        ],
    )
    def test_invalid_headers(self, header):
        """Test malformed or non-Basic headers are rejected."""
        assert parse_basic_auth(header) is None


class TestVerifyAuthHeader:
    """Tests for ApiAuthService.verify_auth_header_and_return_scope."""

    async def test_missing_header(self, mock_db):
        """Test a missing header is reported without hitting the database."""
        result = await ApiAuthService(mock_db).verify_auth_header_and_return_scope(None)

        assert result.valid_key is False
        assert result.error == "No authorization header"
        mock_db.execute.assert_not_awaited()

    async def test_bearer_header_rejected(self, mock_db):
        """Test non-Basic schemes are rejected with usage guidance."""
        result = await ApiAuthService(mock_db).verify_auth_header_and_return_scope("Bearer x")

        assert result.valid_key is False
        assert result.error.startswith("Invalid authorization header.")

    async def test_unknown_public_key(self, mock_db, lookup_returning):
        """Test unknown keys fail as invalid credentials."""
        mock_db.execute.return_value = lookup_returning(None)

        result = await ApiAuthService(mock_db, salt=TEST_SALT).verify_auth_header_and_return_scope(
            _basic("pk-lf-unknown", "sk-lf-unknown")
        )

        assert result.valid_key is False
        assert result.error == "Invalid credentials"

    async def test_wrong_secret(self, mock_db, lookup_returning, project_api_key):
        """Test a wrong secret fails the fast-hash comparison."""
        mock_db.execute.return_value = lookup_returning(project_api_key)

        result = await ApiAuthService(mock_db, salt=TEST_SALT).verify_auth_header_and_return_scope(
            _basic("pk-lf-1234567890", "sk-lf-wrong")
        )

        assert result.valid_key is False
        assert result.error == "Invalid credentials"

    async def test_project_key_resolves_org(self, mock_db, lookup_returning, project_api_key):
        """Test project keys are verified via the fast hash and resolve their org."""
        mock_db.execute.side_effect = [lookup_returning(project_api_key), MagicMock()]
        mock_db.scalar.return_value = "seed-org-id"

        result = await ApiAuthService(mock_db, salt=TEST_SALT).verify_auth_header_and_return_scope(
            _basic("pk-lf-1234567890", "sk-lf-1234567890")
        )

        assert result.valid_key is True
        assert result.scope.access_level == "project"
        assert result.scope.project_id == "7a88fb47-b4e2-43b8-a06c-a5ce950dc53a"
        assert result.scope.org_id == "seed-org-id"
        # second execute is the last_used_at update
        assert mock_db.execute.await_count == 2

    async def test_org_key_uses_bcrypt_fallback(self, mock_db, lookup_returning, org_api_key):
        """Test keys without a fast hash are verified with bcrypt."""
        mock_db.execute.side_effect = [lookup_returning(org_api_key), MagicMock()]

        result = await ApiAuthService(mock_db, salt=TEST_SALT).verify_auth_header_and_return_scope(
            _basic("pk-lf-org-1234567890", "sk-lf-org-1234567890")
        )

        assert result.valid_key is True
        assert result.scope.access_level == "organization"
        assert result.scope.org_id == "seed-org-id"
        assert result.scope.project_id is None
        mock_db.scalar.assert_not_awaited()

    async def test_expired_key(self, mock_db, lookup_returning, project_api_key):
        """Test expired keys are rejected."""
        project_api_key.expires_at = datetime.now(UTC) - timedelta(minutes=1)
        mock_db.execute.return_value = lookup_returning(project_api_key)

        result = await ApiAuthService(mock_db, salt=TEST_SALT).verify_auth_header_and_return_scope(
            _basic("pk-lf-1234567890", "sk-lf-1234567890")
        )

        assert result.valid_key is False
        assert result.error == "API key has expired"

    async def test_bcrypt_fallback_runs_off_the_event_loop(
        self, mock_db, lookup_returning, org_api_key
    ):
        """Test the bcrypt comparison runs in a worker thread."""
        mock_db.execute.side_effect = [lookup_returning(org_api_key), MagicMock()]
        loop_thread = threading.get_ident()
        seen_threads: list[int] = []

        def fake_verify(_secret, _hashed):
            seen_threads.append(threading.get_ident())
            return True

        with patch("app.features.iam.auth.verify_password", side_effect=fake_verify):
            result = await ApiAuthService(mock_db).verify_auth_header_and_return_scope(
                _basic("pk-lf-org-1234567890", "sk-lf-org-1234567890")
            )

        assert result.valid_key is True
        assert len(seen_threads) == 1
        assert seen_threads[0] != loop_thread
