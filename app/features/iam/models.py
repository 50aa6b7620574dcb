"""Identity and access ORM models.

Organizations own projects; users join organizations (and optionally
individual projects) through memberships carrying a role. API keys are
scoped either to a project or to a whole organization.
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.shared.models import StringIdMixin, TimestampMixin


class Role(str, Enum):
    """Membership roles, from most to least privileged."""

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"
    VIEWER = "VIEWER"
    NONE = "NONE"


class ApiKeyScope(str, Enum):
    """What an API key grants access to."""

    PROJECT = "PROJECT"
    ORGANIZATION = "ORGANIZATION"


ROLE_VALUES = tuple(r.value for r in Role)


class Organization(StringIdMixin, TimestampMixin, Base):
    """Organization (tenant) owning projects and memberships."""

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(255))
    cloud_config: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)

    projects: Mapped[list[Project]] = relationship(back_populates="organization")
    memberships: Mapped[list[OrganizationMembership]] = relationship(
        back_populates="organization", cascade="all, delete-orphan"
    )


class Project(StringIdMixin, TimestampMixin, Base):
    """Project within an organization; the scope of all observability data."""

    __tablename__ = "projects"

    org_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("organizations.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255))

    organization: Mapped[Organization] = relationship(back_populates="projects")


class User(StringIdMixin, TimestampMixin, Base):
    """Platform user. ``email`` is stored lowercased."""

    __tablename__ = "users"

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), unique=True, index=True, nullable=True)
    password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)

    org_memberships: Mapped[list[OrganizationMembership]] = relationship(back_populates="user")


class OrganizationMembership(StringIdMixin, TimestampMixin, Base):
    """A user's role in an organization."""

    __tablename__ = "organization_memberships"

    org_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("organizations.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    role: Mapped[str] = mapped_column(String(20), default=Role.NONE.value)

    organization: Mapped[Organization] = relationship(back_populates="memberships")
    user: Mapped[User] = relationship(back_populates="org_memberships")

    __table_args__ = (
        UniqueConstraint("org_id", "user_id", name="uq_org_membership_org_user"),
        CheckConstraint(f"role IN {ROLE_VALUES}", name="ck_org_membership_role"),
    )


class ProjectMembership(TimestampMixin, Base):
    """Project-level role override, tied to the user's organization membership."""

    __tablename__ = "project_memberships"

    project_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    org_membership_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("organization_memberships.id", ondelete="CASCADE"),
        index=True,
    )
    role: Mapped[str] = mapped_column(String(20))

    __table_args__ = (
        CheckConstraint(f"role IN {ROLE_VALUES}", name="ck_project_membership_role"),
    )


class ApiKey(StringIdMixin, TimestampMixin, Base):
    """Public/secret API key pair.

    The secret is never stored in clear: ``hashed_secret_key`` is a bcrypt hash,
    ``fast_hashed_secret_key`` a salted SHA-256 used for constant-cost lookup.

    Attributes:
        public_key: Public half (``pk-lf-...``), unique.
        display_secret_key: Masked secret for display (``sk-lf-...abcd``).
        scope: PROJECT keys carry ``project_id``; ORGANIZATION keys ``org_id``.
        expires_at: Optional expiry; expired keys fail verification.
        last_used_at: Updated on successful verification.
    """

    __tablename__ = "api_keys"

    public_key: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_secret_key: Mapped[str] = mapped_column(String(255), unique=True)
    fast_hashed_secret_key: Mapped[str | None] = mapped_column(
        String(255), unique=True, nullable=True
    )
    display_secret_key: Mapped[str] = mapped_column(String(255))
    note: Mapped[str | None] = mapped_column(String(255), nullable=True)
    scope: Mapped[str] = mapped_column(String(20), default=ApiKeyScope.PROJECT.value)
    project_id: Mapped[str | None] = mapped_column(
        String(255), ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True
    )
    org_id: Mapped[str | None] = mapped_column(
        String(255), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=True, index=True
    )
    last_used_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    expires_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    project: Mapped[Project | None] = relationship()

    __table_args__ = (
        CheckConstraint("scope IN ('PROJECT', 'ORGANIZATION')", name="ck_api_key_scope"),
        CheckConstraint(
            "(scope = 'PROJECT' AND project_id IS NOT NULL) "
            "OR (scope = 'ORGANIZATION' AND org_id IS NOT NULL)",
            name="ck_api_key_scope_target",
        ),
    )
