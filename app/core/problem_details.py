"""Machine-readable error bodies.

Two wire shapes are produced by this application:

- RFC 7807 Problem Details (``application/problem+json``) for the internal API.
- The SCIM 2.0 error schema (``application/scim+json``) for ``/api/public/scim``
  routes, as required by RFC 7644 section 3.12.

References:
    https://datatracker.ietf.org/doc/html/rfc7807
    https://datatracker.ietf.org/doc/html/rfc7644#section-3.12
"""

from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from app.core.logging import request_id_ctx

# =============================================================================
# Error Type URIs
# =============================================================================

ERROR_TYPE_BASE = "/errors"

ERROR_TYPES = {
    "VALIDATION_ERROR": f"{ERROR_TYPE_BASE}/validation",
    "INTERNAL_ERROR": f"{ERROR_TYPE_BASE}/internal",
}

SCIM_ERROR_SCHEMA = "urn:ietf:params:scim:api:messages:2.0:Error"


# =============================================================================
# Problem Detail Schema
# =============================================================================


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    Attributes:
        type: URI identifying the error type.
        title: Short human-readable summary of the problem.
        status: HTTP status code.
        detail: Human-readable explanation specific to this occurrence.
        instance: URI reference for this specific problem occurrence.
        errors: Optional field-level validation errors (extension for 422).
        code: Machine-readable error code.
        request_id: Request correlation ID.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(default="about:blank", description="URI reference identifying the problem type.")
    title: str = Field(..., description="Short, human-readable summary of the problem type.")
    status: int = Field(..., ge=400, le=599, description="HTTP status code for this occurrence.")
    detail: str | None = Field(None, description="Explanation specific to this occurrence.")
    instance: str | None = Field(None, description="URI reference for this occurrence.")
    errors: list[dict[str, Any]] | None = Field(None, description="Field-level validation errors.")
    code: str | None = Field(None, description="Machine-readable error code.")
    request_id: str | None = Field(None, description="Request correlation ID.")


class ScimErrorBody(BaseModel):
    """SCIM 2.0 error message body."""

    schemas: list[str] = Field(default_factory=lambda: [SCIM_ERROR_SCHEMA])
    detail: str
    status: int = Field(..., ge=400, le=599)


# =============================================================================
# Responses
# =============================================================================


class ProblemDetailResponse(JSONResponse):
    """JSON response with RFC 7807 content type."""

    media_type = "application/problem+json"


class ScimResponse(JSONResponse):
    """JSON response with the SCIM content type."""

    media_type = "application/scim+json"


# =============================================================================
# Helper Functions
# =============================================================================


def create_problem_detail(
    status: int,
    title: str,
    detail: str | None = None,
    error_code: str = "INTERNAL_ERROR",
    errors: list[dict[str, Any]] | None = None,
) -> ProblemDetail:
    """Create a ProblemDetail instance with proper type URI and instance.

    Args:
        status: HTTP status code.
        title: Short problem summary.
        detail: Detailed explanation (optional).
        error_code: Internal error code for type URI lookup.
        errors: Field-level validation errors (optional).

    Returns:
        Configured ProblemDetail instance.
    """
    request_id = request_id_ctx.get()

    return ProblemDetail(
        type=ERROR_TYPES.get(error_code, f"{ERROR_TYPE_BASE}/{error_code.lower()}"),
        title=title,
        status=status,
        detail=detail,
        instance=f"/requests/{request_id}" if request_id else None,
        errors=errors,
        code=error_code,
        request_id=request_id,
    )


def problem_response(
    status: int,
    title: str,
    detail: str | None = None,
    error_code: str = "INTERNAL_ERROR",
    errors: list[dict[str, Any]] | None = None,
) -> ProblemDetailResponse:
    """Create a ProblemDetailResponse with proper content type."""
    problem = create_problem_detail(
        status=status,
        title=title,
        detail=detail,
        error_code=error_code,
        errors=errors,
    )

    return ProblemDetailResponse(
        status_code=status,
        content=problem.model_dump(exclude_none=True),
    )


def scim_error_response(status: int, detail: str) -> ScimResponse:
    """Create a SCIM error response.

    Args:
        status: HTTP status code (also echoed in the body, as SCIM requires).
        detail: Human-readable error detail.

    Returns:
        JSONResponse with the SCIM error schema body.
    """
    body = ScimErrorBody(detail=detail, status=status)
    return ScimResponse(status_code=status, content=body.model_dump())
