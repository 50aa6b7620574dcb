"""Custom exceptions and FastAPI exception handlers.

Validation and unexpected errors are rendered as RFC 7807 Problem Details,
except under the SCIM prefix where every error uses the SCIM error schema.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.logging import get_logger
from app.core.problem_details import problem_response, scim_error_response

logger = get_logger(__name__)

SCIM_PATH_PREFIX = "/api/public/scim"


# =============================================================================
# Exception Classes
# =============================================================================


class ScimError(Exception):
    """Error raised by SCIM handlers, rendered in the SCIM error schema."""

    def __init__(self, status_code: int, detail: str) -> None:
        """Initialize SCIM error.

        Args:
            status_code: HTTP status code.
            detail: Human-readable detail returned to the client.
        """
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


# =============================================================================
# Exception Handlers
# =============================================================================


async def scim_exception_handler(
    request: Request,
    exc: ScimError,
) -> JSONResponse:
    """Handle ScimError exceptions with the SCIM error schema.

    Server-side failures are logged at error level, client errors at warning.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "scim.error_handled",
        detail=exc.detail,
        status_code=exc.status_code,
        method=request.method,
        path=str(request.url.path),
    )
    return scim_error_response(exc.status_code, exc.detail)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle Pydantic validation errors with RFC 7807 Problem Details.

    Converts Pydantic validation errors to the 'errors' extension field.
    """
    field_errors: list[dict[str, str]] = []
    for error in exc.errors():
        loc = error.get("loc", [])
        field_path = ".".join(str(part) for part in loc if part != "body")
        field_errors.append(
            {
                "field": field_path,
                "message": str(error.get("msg", "Validation failed")),
                "type": str(error.get("type", "unknown")),
            }
        )

    logger.warning(
        "app.validation_error",
        error_count=len(field_errors),
        path=str(request.url.path),
        fields=[e["field"] for e in field_errors],
    )

    if request.url.path.startswith(SCIM_PATH_PREFIX):
        return scim_error_response(400, "; ".join(e["message"] for e in field_errors))

    return problem_response(
        status=422,
        title="Validation Error",
        detail=f"Request validation failed with {len(field_errors)} error(s). "
        "Check the 'errors' field for details.",
        error_code="VALIDATION_ERROR",
        errors=field_errors,
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected exceptions.

    SCIM clients receive the SCIM error schema; everything else gets
    RFC 7807 Problem Details.
    """
    logger.error(
        "app.unhandled_error",
        error=str(exc),
        error_type=type(exc).__name__,
        path=str(request.url.path),
        exc_info=True,
    )

    if request.url.path.startswith(SCIM_PATH_PREFIX):
        return scim_error_response(500, "Internal server error")

    return problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred. Please try again later or "
        "contact support with the request_id.",
        error_code="INTERNAL_ERROR",
    )


# =============================================================================
# Handler Registration
# =============================================================================


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.add_exception_handler(ScimError, scim_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
