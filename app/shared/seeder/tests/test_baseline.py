"""Tests for baseline provisioning."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.features.iam.models import ApiKey
from app.shared.seeder.baseline import (
    DEMO_PROJECT_ID,
    SEED_API_KEY,
    SEED_ORG_API_KEY,
    SEED_ORG_ID,
    SEED_PROJECT_ID,
    BaselineSeeder,
)
from app.shared.seeder.config import SeederConfig


@pytest.fixture
def uploader(mock_db):
    """Uploader double bound to the mock session."""
    uploader = MagicMock()
    uploader.db = mock_db
    uploader.upload = AsyncMock(return_value=1)
    uploader.upsert = AsyncMock(return_value=1)
    return uploader


@pytest.fixture(autouse=True)
def fast_hashing():
    """Replace bcrypt with cheap fakes; cost 12 hashing is slow in unit tests."""
    with (
        patch("app.shared.seeder.baseline.hash_password", side_effect=lambda p, r: f"pw:{p}"),
        patch("app.shared.seeder.baseline.hash_secret_key", side_effect=lambda s: f"bc:{s}"),
    ):
        yield


def _added_keys(mock_db) -> list[ApiKey]:
    return [call.args[0] for call in mock_db.add.call_args_list]


def _upserted(uploader, label: str) -> list[dict]:
    rows: list[dict] = []
    for call in uploader.upsert.call_args_list:
        if call.args[0] == label:
            rows.extend(call.args[2])
    return rows


class TestBaselineSeeder:
    """Tests for BaselineSeeder.run()."""

    async def test_default_environment_seeds_seed_project_only(self, uploader, mock_db):
        mock_db.scalar.return_value = None

        result = await BaselineSeeder(SeederConfig(), uploader).run()

        assert result.project_ids == [SEED_PROJECT_ID]
        assert result.api_keys_created == [SEED_API_KEY.id, SEED_ORG_API_KEY.id]
        assert [row["id"] for row in _upserted(uploader, "organizations")] == [SEED_ORG_ID]

    async def test_users_get_hashed_passwords(self, uploader, mock_db):
        mock_db.scalar.return_value = None

        await BaselineSeeder(SeederConfig(), uploader).run()

        users = _upserted(uploader, "users")
        assert [user["email"] for user in users] == ["demo@langfuse.com", "member@langfuse.com"]
        assert all(user["password"] == "pw:password" for user in users)

    async def test_examples_environment_adds_demo_tenant(self, uploader, mock_db):
        mock_db.scalar.return_value = None

        result = await BaselineSeeder(SeederConfig(environment="examples"), uploader).run()

        assert result.project_ids == [SEED_PROJECT_ID, DEMO_PROJECT_ID]
        assert len(result.api_keys_created) == 3

    async def test_keys_are_created_with_default_secrets(self, uploader, mock_db):
        mock_db.scalar.return_value = None

        await BaselineSeeder(SeederConfig(), uploader).run()

        project_key, org_key = _added_keys(mock_db)
        assert project_key.public_key == "pk-lf-1234567890"
        assert project_key.hashed_secret_key == "bc:sk-lf-1234567890"
        assert project_key.fast_hashed_secret_key is not None
        assert project_key.display_secret_key == "sk-lf-...7890"
        assert project_key.project_id == SEED_PROJECT_ID
        assert org_key.scope == "ORGANIZATION"
        assert org_key.org_id == SEED_ORG_ID
        assert org_key.project_id is None

    async def test_existing_keys_are_left_alone(self, uploader, mock_db):
        mock_db.scalar.return_value = "existing-id"

        result = await BaselineSeeder(SeederConfig(), uploader).run()

        assert result.api_keys_created == []
        mock_db.add.assert_not_called()

    async def test_seed_secret_key_overrides_default_secrets(self, uploader, mock_db):
        mock_db.scalar.return_value = None
        config = SeederConfig(seed_secret_key="sk-lf-shared-secret")

        await BaselineSeeder(config, uploader).run()

        assert all(
            key.hashed_secret_key == "bc:sk-lf-shared-secret" for key in _added_keys(mock_db)
        )

    async def test_shared_fast_hash_is_not_reused(self, uploader, mock_db):
        """Test a second key with the same secret falls back to bcrypt-only lookup."""
        mock_db.scalar.side_effect = [
            "membership-1",
            "membership-2",
            None,  # seed key does not exist
            None,  # its fast hash is free
            None,  # org key does not exist
            SEED_API_KEY.id,  # its fast hash is taken by the seed key
        ]
        config = SeederConfig(seed_secret_key="sk-lf-shared-secret")

        await BaselineSeeder(config, uploader).run()

        project_key, org_key = _added_keys(mock_db)
        assert project_key.fast_hashed_secret_key is not None
        assert org_key.fast_hashed_secret_key is None

    async def test_project_membership_links_org_membership(self, uploader, mock_db):
        mock_db.scalar.side_effect = ["membership-1", "membership-2", "k1", "k2"]

        await BaselineSeeder(SeederConfig(), uploader).run()

        (membership,) = _upserted(uploader, "project_memberships")
        assert membership["org_membership_id"] == "membership-2"
        assert membership["role"] == "ADMIN"
