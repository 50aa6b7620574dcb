"""Pydantic schemas for the SCIM 2.0 Users resource (RFC 7643 / RFC 7644).

Field names follow the SCIM wire format through aliases; responses are
serialized with ``by_alias=True``.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.features.iam.models import User

SCIM_USER_SCHEMA = "urn:ietf:params:scim:schemas:core:2.0:User"
SCIM_LIST_RESPONSE_SCHEMA = "urn:ietf:params:scim:api:messages:2.0:ListResponse"


class ScimName(BaseModel):
    """SCIM ``name`` complex attribute (only ``formatted`` is supported)."""

    formatted: str | None = None


class ScimEmail(BaseModel):
    """SCIM ``emails`` entry."""

    primary: bool = True
    value: str | None = None
    type: str = "work"


class ScimMeta(BaseModel):
    """SCIM resource metadata."""

    model_config = ConfigDict(populate_by_name=True)

    resource_type: str = Field("User", alias="resourceType")
    created: str | None = None
    last_modified: str | None = Field(None, alias="lastModified")


class ScimUser(BaseModel):
    """User resource as returned to SCIM clients."""

    model_config = ConfigDict(populate_by_name=True)

    schemas: list[str] = Field(default_factory=lambda: [SCIM_USER_SCHEMA])
    id: str
    user_name: str | None = Field(None, alias="userName")
    name: ScimName = Field(default_factory=ScimName)
    emails: list[ScimEmail] = Field(default_factory=list)
    meta: ScimMeta = Field(default_factory=ScimMeta)

    @classmethod
    def from_user(cls, user: User, include_timestamps: bool = False) -> "ScimUser":
        """Build the SCIM representation of a user.

        Args:
            user: ORM user.
            include_timestamps: Add ``meta.created`` / ``meta.lastModified``.

        Returns:
            ScimUser resource.
        """
        meta = ScimMeta()
        if include_timestamps:
            meta.created = _isoformat(user.created_at)
            meta.last_modified = _isoformat(user.updated_at)
        return cls(
            id=user.id,
            user_name=user.email,
            name=ScimName(formatted=user.name),
            emails=[ScimEmail(primary=True, value=user.email, type="work")],
            meta=meta,
        )

    def to_wire(self) -> dict[str, Any]:
        """Serialize for the response body; unset ``meta`` timestamps are omitted."""
        body = self.model_dump(by_alias=True)
        body["meta"] = {k: v for k, v in body["meta"].items() if v is not None}
        return body


class ScimListResponse(BaseModel):
    """SCIM ``ListResponse`` message."""

    model_config = ConfigDict(populate_by_name=True)

    schemas: list[str] = Field(default_factory=lambda: [SCIM_LIST_RESPONSE_SCHEMA])
    total_results: int = Field(..., ge=0, alias="totalResults")
    start_index: int = Field(..., ge=1, alias="startIndex")
    items_per_page: int = Field(..., ge=0, alias="itemsPerPage")
    resources: list[ScimUser] = Field(default_factory=list, alias="Resources")

    def to_wire(self) -> dict[str, Any]:
        """Serialize for the response body."""
        body = self.model_dump(by_alias=True, exclude={"resources"})
        body["Resources"] = [resource.to_wire() for resource in self.resources]
        return body


class ScimUserCreate(BaseModel):
    """Accepted fields of a SCIM user creation request.

    ``roles`` is validated separately so the error message can echo the raw
    input back to the client. ``name`` is kept loose: clients send both the
    SCIM object and plain strings.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_name: str | None = Field(None, alias="userName")
    name: Any = None
    display_name: str | None = Field(None, alias="displayName")
    password: str | None = None
    roles: Any = None

    @property
    def full_name(self) -> str | None:
        """Name to store: ``name.formatted`` wins over ``displayName``.

        ``name`` is only read when it is an object; any other value is ignored.
        """
        formatted = self.name.get("formatted") if isinstance(self.name, dict) else None
        if isinstance(formatted, str) and formatted:
            return formatted
        return self.display_name


def _isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")
