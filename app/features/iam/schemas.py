"""Pydantic schemas for API key authentication results."""

from typing import Literal

from pydantic import BaseModel, Field


class AuthScope(BaseModel):
    """What a verified API key may access."""

    access_level: Literal["organization", "project"] = Field(
        ..., description="'organization' for org-scoped keys, 'project' for project keys."
    )
    org_id: str | None = Field(None, description="Organization the key belongs to.")
    project_id: str | None = Field(None, description="Project for project-scoped keys.")
    api_key_id: str = Field(..., description="Primary key of the verified API key.")


class AuthVerificationResult(BaseModel):
    """Outcome of verifying an ``Authorization`` header."""

    valid_key: bool
    error: str | None = None
    scope: AuthScope | None = None

    @classmethod
    def invalid(cls, error: str) -> "AuthVerificationResult":
        """Build a failed verification result."""
        return cls(valid_key=False, error=error)
