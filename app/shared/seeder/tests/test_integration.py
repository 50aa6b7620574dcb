"""Integration tests for seeder (requires PostgreSQL with migrations applied).

Run with: uv run pytest app/shared/seeder/tests/test_integration.py -v -m integration

SAFETY: These tests delete the seeded organizations and users. They require either:
- APP_ENV=testing, OR
- ALLOW_DESTRUCTIVE_TEST_DB=true environment variable
"""

import base64
import os
from collections.abc import AsyncGenerator
from contextlib import suppress
from datetime import UTC, datetime

import pytest
import pytest_asyncio
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import get_settings
from app.features.evaluation.models import Prompt
from app.features.iam.auth import ApiAuthService
from app.features.iam.models import ApiKey, Organization, User
from app.features.tracing.models import Trace
from app.shared.seeder import DataSeeder, SeederConfig
from app.shared.seeder.baseline import (
    DEMO_ORG_ID,
    DEMO_PROJECT_ID,
    SEED_ORG_ID,
    SEED_PROJECT_ID,
    SEED_USER_ID_1,
    SEED_USER_ID_2,
)

pytestmark = pytest.mark.integration


def _check_destructive_test_guard() -> None:
    """Verify that destructive test operations are explicitly allowed.

    Raises:
        RuntimeError: If destructive operations are not explicitly enabled.
    """
    app_env_testing = os.environ.get("APP_ENV", "").lower() == "testing"
    allow_destructive = os.environ.get("ALLOW_DESTRUCTIVE_TEST_DB", "").lower() == "true"

    if not app_env_testing and not allow_destructive:
        raise RuntimeError(
            "Destructive test operations require explicit opt-in. "
            "Set ALLOW_DESTRUCTIVE_TEST_DB=true or APP_ENV=testing"
        )


async def _cleanup(session_maker: async_sessionmaker[AsyncSession]) -> None:
    async with session_maker() as session:
        try:
            # projects, keys and all generated data cascade from organizations
            await session.execute(
                delete(Organization).where(Organization.id.in_([SEED_ORG_ID, DEMO_ORG_ID]))
            )
            await session.execute(delete(User).where(User.id.in_([SEED_USER_ID_1, SEED_USER_ID_2])))
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a database session, removing seeded tenants before and after."""
    _check_destructive_test_guard()

    settings = get_settings()
    engine = create_async_engine(settings.database_url, echo=False)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await _cleanup(session_maker)

    async with session_maker() as session:
        try:
            yield session
        finally:
            with suppress(Exception):
                await session.rollback()

    _check_destructive_test_guard()
    await _cleanup(session_maker)
    await engine.dispose()


def _config(**overrides) -> SeederConfig:
    values = {
        "environment": "examples",
        "seed": 42,
        "trace_volume": 10,
        "chunk_size": 50,
        "now": datetime(2024, 6, 1, tzinfo=UTC),
        "seed_secret_key": None,
        "openai_api_key": None,
    }
    values.update(overrides)
    return SeederConfig(**values)


async def _count(session: AsyncSession, model, *where) -> int:
    result = await session.execute(select(func.count()).select_from(model).where(*where))
    return result.scalar() or 0


class TestBaseline:
    """Integration tests for the default environment."""

    async def test_seeds_baseline_without_traces(self, db_session: AsyncSession) -> None:
        result = await DataSeeder(_config(environment="default")).run(db_session)

        assert result.projects_count == 1
        assert await _count(db_session, Trace, Trace.project_id == SEED_PROJECT_ID) == 0
        assert await _count(db_session, ApiKey, ApiKey.org_id == SEED_ORG_ID) == 1

    async def test_seeded_project_key_authenticates(self, db_session: AsyncSession) -> None:
        await DataSeeder(_config(environment="default")).run(db_session)

        verification = await ApiAuthService(db_session).verify_auth_header_and_return_scope(
            "Basic " + base64.b64encode(b"pk-lf-1234567890:sk-lf-1234567890").decode()
        )

        assert verification.valid_key
        assert verification.scope is not None
        assert verification.scope.project_id == SEED_PROJECT_ID


class TestExamples:
    """Integration tests for the examples environment."""

    async def test_generates_data_for_both_projects(self, db_session: AsyncSession) -> None:
        result = await DataSeeder(_config()).run(db_session)

        assert result.traces_count == 10
        assert await _count(db_session, Trace, Trace.project_id == SEED_PROJECT_ID) == 5
        assert await _count(db_session, Trace, Trace.project_id == DEMO_PROJECT_ID) == 5

    async def test_rerun_with_same_seed_is_idempotent(self, db_session: AsyncSession) -> None:
        """Test a second run with the same seed inserts nothing new."""
        await DataSeeder(_config()).run(db_session)
        counts_after_first = await DataSeeder(_config()).get_current_counts(db_session)

        await DataSeeder(_config()).run(db_session)
        counts_after_second = await DataSeeder(_config()).get_current_counts(db_session)

        assert counts_after_first == counts_after_second

    async def test_prompt_versions_unique_across_seeds(self, db_session: AsyncSession) -> None:
        await DataSeeder(_config(seed=1)).run(db_session)
        await DataSeeder(_config(seed=2)).run(db_session)

        versions = await _count(db_session, Prompt, Prompt.project_id == SEED_PROJECT_ID)
        # 1 summary prompt + 7 seed prompts + 3 variable versions + 20 versions
        assert versions == 31

    async def test_integrity_checks_pass(self, db_session: AsyncSession) -> None:
        seeder = DataSeeder(_config())
        await seeder.run(db_session)

        errors = await seeder.verify_data_integrity(db_session)

        assert errors == []
