"""Baseline organizations, projects, users, memberships and API keys.

The baseline is what a fresh local environment needs to log in and call the
public API. Every step is idempotent: rows are upserted on their ids or
unique keys, and API keys are only created when absent so rotated secrets
survive a re-run.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from app.core.logging import get_logger
from app.core.security import (
    fast_hash_secret_key,
    get_display_secret_key,
    hash_password,
    hash_secret_key,
)
from app.features.evaluation.models import Prompt
from app.features.iam.models import (
    ApiKey,
    ApiKeyScope,
    Organization,
    OrganizationMembership,
    Project,
    ProjectMembership,
    Role,
    User,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.shared.seeder.config import SeederConfig
    from app.shared.seeder.uploader import BulkUploader

logger = get_logger(__name__)

SEED_ORG_ID = "seed-org-id"
SEED_PROJECT_ID = "7a88fb47-b4e2-43b8-a06c-a5ce950dc53a"
DEMO_ORG_ID = "demo-org-id"
DEMO_PROJECT_ID = "239ad00f-562f-411d-af14-831c75ddd875"

SEED_USER_ID_1 = "user-1"  # owner of the seed org
SEED_USER_ID_2 = "user-2"  # member of the seed org, admin of the seed project
SEED_PASSWORD = "password"
SEED_PASSWORD_ROUNDS = 12
DEMO_AVATAR_URL = "https://static.langfuse.com/langfuse-dev%2Fexample-avatar.png"


@dataclass(frozen=True)
class SeedApiKey:
    """A well-known API key created by the seeder."""

    id: str
    public_key: str
    default_secret: str
    note: str
    scope: ApiKeyScope
    project_id: str | None = None
    org_id: str | None = None


SEED_API_KEY = SeedApiKey(
    id="seed-api-key",
    public_key="pk-lf-1234567890",
    default_secret="sk-lf-1234567890",
    note="seeded key",
    scope=ApiKeyScope.PROJECT,
    project_id=SEED_PROJECT_ID,
)
SEED_ORG_API_KEY = SeedApiKey(
    id="seed-org-api-key",
    public_key="pk-lf-org-1234567890",
    default_secret="sk-lf-org-1234567890",
    note="seeded organization key",
    scope=ApiKeyScope.ORGANIZATION,
    org_id=SEED_ORG_ID,
)
DEMO_API_KEY = SeedApiKey(
    id="seed-api-key-2",
    public_key="pk-lf-asdfghjkl",
    default_secret="sk-lf-asdfghjkl",
    note="seeded key 2",
    scope=ApiKeyScope.PROJECT,
    project_id=DEMO_PROJECT_ID,
)


@dataclass
class BaselineResult:
    """What the baseline step provisioned.

    Attributes:
        project_ids: Projects that receive generated data, seed project first.
        api_keys_created: Ids of API keys created in this run.
    """

    project_ids: list[str] = field(default_factory=list)
    api_keys_created: list[str] = field(default_factory=list)


class BaselineSeeder:
    """Provisions the baseline tenant data."""

    def __init__(self, config: SeederConfig, uploader: BulkUploader) -> None:
        """Initialize the baseline seeder.

        Args:
            config: Seeder configuration.
            uploader: Uploader bound to the seeding session.
        """
        self.config = config
        self.uploader = uploader

    @property
    def db(self) -> AsyncSession:
        return self.uploader.db

    async def run(self) -> BaselineResult:
        """Provision the seed tenant and, for example data, the demo tenant.

        Returns:
            BaselineResult listing the projects to populate.
        """
        result = BaselineResult(project_ids=[SEED_PROJECT_ID])

        await self._seed_users()
        await self.uploader.upsert(
            "organizations",
            Organization,
            [{"id": SEED_ORG_ID, "name": "Seed Org", "cloud_config": {"plan": "Team"}}],
            conflict_target=["id"],
            update_columns=["name", "cloud_config"],
        )
        await self._upsert_project(SEED_PROJECT_ID, "llm-app", SEED_ORG_ID)

        await self._add_org_membership(SEED_ORG_ID, SEED_USER_ID_1, Role.OWNER)
        member_id = await self._add_org_membership(SEED_ORG_ID, SEED_USER_ID_2, Role.MEMBER)
        await self.uploader.upsert(
            "project_memberships",
            ProjectMembership,
            [
                {
                    "project_id": SEED_PROJECT_ID,
                    "user_id": SEED_USER_ID_2,
                    "role": Role.ADMIN.value,
                    "org_membership_id": member_id,
                }
            ],
            conflict_target=["project_id", "user_id"],
            update_columns=["org_membership_id"],
        )

        await self.uploader.upload(
            "prompts",
            Prompt,
            [
                {
                    "project_id": SEED_PROJECT_ID,
                    "name": "summary-prompt",
                    "version": 1,
                    "type": "text",
                    "prompt": "prompt {{variable}} {{anotherVariable}}",
                    "labels": ["production", "latest"],
                    "tags": [],
                    "config": {},
                    "created_by": SEED_USER_ID_1,
                }
            ],
            conflict_target=["project_id", "name", "version"],
        )

        for api_key in (SEED_API_KEY, SEED_ORG_API_KEY):
            if await self._ensure_api_key(api_key):
                result.api_keys_created.append(api_key.id)

        if self.config.environment.generates_examples:
            await self._seed_demo_tenant(result)

        logger.info(
            "seeder.baseline.completed",
            environment=self.config.environment.value,
            projects=result.project_ids,
            api_keys_created=result.api_keys_created,
        )
        return result

    async def _seed_demo_tenant(self, result: BaselineResult) -> None:
        await self.uploader.upsert(
            "organizations",
            Organization,
            [{"id": DEMO_ORG_ID, "name": "Langfuse Demo", "cloud_config": None}],
            conflict_target=["id"],
            update_columns=["name"],
        )
        await self._upsert_project(DEMO_PROJECT_ID, "demo-app", DEMO_ORG_ID, update_name=False)
        await self._add_org_membership(DEMO_ORG_ID, SEED_USER_ID_1, Role.VIEWER)
        if await self._ensure_api_key(DEMO_API_KEY):
            result.api_keys_created.append(DEMO_API_KEY.id)
        result.project_ids.append(DEMO_PROJECT_ID)

    async def _seed_users(self) -> None:
        # bcrypt at cost 12 is slow; hash both users off the event loop
        password_hashes = await asyncio.gather(
            asyncio.to_thread(hash_password, SEED_PASSWORD, SEED_PASSWORD_ROUNDS),
            asyncio.to_thread(hash_password, SEED_PASSWORD, SEED_PASSWORD_ROUNDS),
        )
        users: list[dict[str, Any]] = [
            {
                "id": SEED_USER_ID_1,
                "name": "Demo User",
                "email": "demo@langfuse.com",
                "password": password_hashes[0],
                "image": DEMO_AVATAR_URL,
            },
            {
                "id": SEED_USER_ID_2,
                "name": "Demo User 2",
                "email": "member@langfuse.com",
                "password": password_hashes[1],
                "image": None,
            },
        ]
        await self.uploader.upsert(
            "users",
            User,
            users,
            conflict_target=["id"],
            update_columns=["name", "email", "password"],
        )

    async def _upsert_project(
        self,
        project_id: str,
        name: str,
        org_id: str,
        update_name: bool = True,
    ) -> None:
        await self.uploader.upsert(
            "projects",
            Project,
            [{"id": project_id, "name": name, "org_id": org_id}],
            conflict_target=["id"],
            update_columns=["name", "org_id"] if update_name else ["org_id"],
        )

    async def _add_org_membership(self, org_id: str, user_id: str, role: Role) -> str:
        """Create the membership if missing and return its id.

        An existing membership keeps its role.
        """
        await self.uploader.upload(
            "organization_memberships",
            OrganizationMembership,
            [{"org_id": org_id, "user_id": user_id, "role": role.value}],
            conflict_target=["org_id", "user_id"],
        )
        membership_id = await self.db.scalar(
            select(OrganizationMembership.id).where(
                OrganizationMembership.org_id == org_id,
                OrganizationMembership.user_id == user_id,
            )
        )
        return str(membership_id)

    async def _ensure_api_key(self, api_key: SeedApiKey) -> bool:
        """Create the API key unless a key with its id exists.

        Returns:
            True when the key was created.
        """
        existing = await self.db.scalar(select(ApiKey.id).where(ApiKey.id == api_key.id))
        if existing is not None:
            logger.debug("seeder.api_key.exists", api_key_id=api_key.id)
            return False

        secret = self.config.seed_secret_key or api_key.default_secret
        hashed = await asyncio.to_thread(hash_secret_key, secret)

        # SEED_SECRET_KEY is shared by all seeded keys; the fast hash is unique,
        # so later keys fall back to bcrypt verification
        fast_hash: str | None = fast_hash_secret_key(secret)
        taken = await self.db.scalar(
            select(ApiKey.id).where(ApiKey.fast_hashed_secret_key == fast_hash)
        )
        if taken is not None:
            fast_hash = None

        self.db.add(
            ApiKey(
                id=api_key.id,
                public_key=api_key.public_key,
                hashed_secret_key=hashed,
                fast_hashed_secret_key=fast_hash,
                display_secret_key=get_display_secret_key(secret),
                note=api_key.note,
                scope=api_key.scope.value,
                project_id=api_key.project_id,
                org_id=api_key.org_id,
            )
        )
        await self.db.flush()
        logger.info("seeder.api_key.created", api_key_id=api_key.id, scope=api_key.scope.value)
        return True
