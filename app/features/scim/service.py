"""Service layer for SCIM user provisioning.

All operations are scoped to the organization of the calling API key. A SCIM
"user" is a platform user holding a membership in that organization.
"""

import asyncio
import json
import re
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import ScimError
from app.core.logging import get_logger
from app.core.security import hash_password
from app.features.iam.models import (
    ROLE_VALUES,
    OrganizationMembership,
    Project,
    ProjectMembership,
    Role,
    User,
)
from app.features.scim.schemas import ScimListResponse, ScimUser, ScimUserCreate
from app.shared.models import generate_id

logger = get_logger(__name__)

_USERNAME_FILTER = re.compile(r'userName eq "([^"]+)"', re.IGNORECASE)
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_user_name_filter(filter_expr: str | None) -> str | None:
    """Extract the email from a ``userName eq "..."`` filter.

    Args:
        filter_expr: Raw ``filter`` query parameter.

    Returns:
        Lowercased user name, or None when absent or not an equality filter.
    """
    if not filter_expr:
        return None
    match = _USERNAME_FILTER.search(filter_expr)
    if match is None:
        return None
    return match.group(1).lower()


def parse_positive_int(value: str | None, default: int) -> int:
    """Parse a paging parameter, falling back to ``default``.

    Leading digits are honoured (``"10abc"`` is 10); values below 1 or
    without a leading integer yield the default.
    """
    if value is None:
        return default
    match = _LEADING_INT.match(value)
    if match is None:
        return default
    parsed = int(match.group(1))
    return parsed if parsed >= 1 else default


def parse_request_body(raw: Any) -> dict[str, Any]:
    """Decode a SCIM request body.

    Bodies may arrive as bytes, as a JSON document, or as a JSON-encoded
    string containing the document.

    Raises:
        ScimError: 400 when the payload is not a JSON object.
    """
    body = raw
    try:
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        if isinstance(body, str):
            body = json.loads(body)
        if isinstance(body, str):
            body = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ScimError(400, "Invalid JSON body") from exc

    if not isinstance(body, dict):
        raise ScimError(400, "Invalid JSON body")
    return body


def resolve_role(roles: Any) -> Role:
    """Pick the membership role from a SCIM ``roles`` attribute.

    Entries may be plain strings or ``{"value": ...}`` objects. Every entry
    must name a known role; the first one wins. Missing or empty ``roles``
    yields NONE.

    Raises:
        ScimError: 400 listing the offending input.
    """
    if not isinstance(roles, list) or not roles:
        return Role.NONE

    values = [role.get("value") if isinstance(role, dict) else role for role in roles]
    if not all(isinstance(value, str) and value in ROLE_VALUES for value in values):
        raise ScimError(
            400,
            f"Invalid roles provided: {json.dumps(roles, separators=(',', ':'))}, "
            f"must be one of {', '.join(ROLE_VALUES)}",
        )
    return Role(values[0])


class ScimUserService:
    """SCIM Users resource bound to one organization."""

    def __init__(self, org_id: str) -> None:
        """Initialize the service.

        Args:
            org_id: Organization of the calling API key.
        """
        self.org_id = org_id

    def _members(self):
        return (
            select(User)
            .join(OrganizationMembership, OrganizationMembership.user_id == User.id)
            .where(OrganizationMembership.org_id == self.org_id)
        )

    async def list_users(
        self,
        db: AsyncSession,
        filter_expr: str | None = None,
        start_index: str | None = None,
        count: str | None = None,
    ) -> ScimListResponse:
        """List organization members as SCIM users.

        Args:
            db: Database session.
            filter_expr: Optional ``userName eq "..."`` filter.
            start_index: 1-based index of the first result (raw query value).
            count: Page size (raw query value).

        Returns:
            SCIM ListResponse ordered by email.
        """
        settings = get_settings()
        start = parse_positive_int(start_index, 1)
        page_size = min(
            parse_positive_int(count, settings.scim_default_count), settings.scim_max_count
        )

        stmt = self._members()
        email = parse_user_name_filter(filter_expr)
        if email is not None:
            stmt = stmt.where(User.email == email)

        total = (
            await db.execute(select(func.count()).select_from(stmt.subquery()))
        ).scalar_one()

        result = await db.execute(
            stmt.order_by(User.email, User.id).offset(start - 1).limit(page_size)
        )
        users = result.scalars().all()

        logger.info(
            "scim.users.list_completed",
            org_id=self.org_id,
            total=total,
            returned=len(users),
            filtered=email is not None,
        )

        return ScimListResponse(
            total_results=total,
            start_index=start,
            items_per_page=len(users),
            resources=[ScimUser.from_user(user) for user in users],
        )

    async def get_user(self, db: AsyncSession, user_id: str) -> ScimUser:
        """Fetch one member of the organization.

        Raises:
            ScimError: 404 when the user is not a member.
        """
        result = await db.execute(self._members().where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise ScimError(404, "User not found")
        return ScimUser.from_user(user, include_timestamps=True)

    async def create_user(self, db: AsyncSession, raw_body: Any) -> ScimUser:
        """Provision a user into the organization.

        An existing platform user with the same email is reused; only the
        organization membership is new.

        Args:
            db: Database session.
            raw_body: Request body as received.

        Returns:
            The created SCIM user, with timestamps.

        Raises:
            ScimError: 400 for malformed input, 409 when already a member.
        """
        body = parse_request_body(raw_body)
        try:
            payload = ScimUserCreate.model_validate(body)
        except PydanticValidationError as exc:
            raise ScimError(400, "Invalid request body") from exc

        if not payload.user_name:
            raise ScimError(400, "userName is required")
        role = resolve_role(payload.roles)
        email = payload.user_name.lower()

        existing = await db.execute(
            select(OrganizationMembership.id)
            .join(User, OrganizationMembership.user_id == User.id)
            .where(OrganizationMembership.org_id == self.org_id, User.email == email)
        )
        if existing.scalar_one_or_none() is not None:
            raise ScimError(409, "User with this userName already exists")

        password_hash = None
        if payload.password:
            # bcrypt is CPU bound; keep the event loop free
            password_hash = await asyncio.to_thread(hash_password, payload.password)

        await db.execute(
            pg_insert(User)
            .values(
                id=generate_id(),
                email=email,
                name=payload.full_name,
                password=password_hash,
            )
            .on_conflict_do_nothing(index_elements=[User.email])
        )
        user = (await db.execute(select(User).where(User.email == email))).scalar_one()

        db.add(OrganizationMembership(org_id=self.org_id, user_id=user.id, role=role.value))
        await db.flush()

        logger.info(
            "scim.users.create_completed",
            org_id=self.org_id,
            user_id=user.id,
            role=role.value,
        )
        return ScimUser.from_user(user, include_timestamps=True)

    async def delete_user(self, db: AsyncSession, user_id: str) -> None:
        """Remove a user from the organization.

        Drops the organization membership and the user's memberships in the
        organization's projects. The platform user itself is kept.

        Raises:
            ScimError: 404 when the user is not a member.
        """
        membership_id = (
            await db.execute(
                select(OrganizationMembership.id).where(
                    OrganizationMembership.org_id == self.org_id,
                    OrganizationMembership.user_id == user_id,
                )
            )
        ).scalar_one_or_none()
        if membership_id is None:
            raise ScimError(404, "User not found")

        org_projects = select(Project.id).where(Project.org_id == self.org_id)
        await db.execute(
            delete(ProjectMembership).where(
                ProjectMembership.user_id == user_id,
                ProjectMembership.project_id.in_(org_projects),
            )
        )
        await db.execute(
            delete(OrganizationMembership).where(OrganizationMembership.id == membership_id)
        )
        await db.flush()

        logger.info("scim.users.delete_completed", org_id=self.org_id, user_id=user_id)
