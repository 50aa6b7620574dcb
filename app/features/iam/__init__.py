"""Identity and access: organizations, projects, users, memberships, API keys."""

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

__all__ = [
    "ApiKey",
    "ApiKeyScope",
    "Organization",
    "OrganizationMembership",
    "Project",
    "ProjectMembership",
    "Role",
    "User",
]
