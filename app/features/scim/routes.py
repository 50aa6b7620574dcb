"""SCIM 2.0 Users endpoints for identity-provider provisioning.

Only organization-scoped API keys may call these routes. Responses, including
errors, use the ``application/scim+json`` media type.
"""

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import ScimError
from app.core.logging import get_logger
from app.core.problem_details import ScimResponse
from app.features.iam.schemas import AuthScope
from app.features.scim.deps import require_org_scope
from app.features.scim.service import ScimUserService

logger = get_logger(__name__)

router = APIRouter(prefix="/api/public/scim", tags=["scim"])


def _internal_error(exc: Exception, operation: str) -> ScimError:
    logger.error(
        "scim.users.operation_failed",
        operation=operation,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )
    return ScimError(500, "Internal server error")


def _log_method_not_allowed(request: Request) -> None:
    logger.error("scim.users.method_not_allowed", method=request.method, path=request.url.path)


@router.get(
    "/Users",
    summary="List users",
    description="""
List members of the API key's organization.

**Filtering**: only `userName eq "<email>"` is supported (case-insensitive).

**Pagination**: `startIndex` is 1-based (default 1); `count` defaults to 100
and is capped. Non-numeric or non-positive values fall back to the defaults.
""",
)
async def list_users(
    filter: str | None = Query(None, description='SCIM filter, e.g. userName eq "a@b.com"'),
    start_index: str | None = Query(None, alias="startIndex"),
    count: str | None = Query(None),
    scope: AuthScope = Depends(require_org_scope),
    db: AsyncSession = Depends(get_db),
) -> ScimResponse:
    """List SCIM users of the organization."""
    service = ScimUserService(org_id=scope.org_id or "")
    try:
        result = await service.list_users(
            db=db, filter_expr=filter, start_index=start_index, count=count
        )
    except ScimError:
        raise
    except Exception as exc:
        raise _internal_error(exc, "list") from exc
    return ScimResponse(content=result.to_wire())


@router.post(
    "/Users",
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="""
Provision a user into the organization.

`userName` (the email) is required. `roles` takes one of OWNER, ADMIN,
MEMBER, VIEWER, NONE (default NONE). An existing platform user with the
same email is added to the organization instead of being recreated.
""",
)
async def create_user(
    request: Request,
    scope: AuthScope = Depends(require_org_scope),
    db: AsyncSession = Depends(get_db),
) -> ScimResponse:
    """Create a SCIM user."""
    service = ScimUserService(org_id=scope.org_id or "")
    raw_body = await request.body()
    try:
        user = await service.create_user(db=db, raw_body=raw_body)
    except ScimError:
        raise
    except Exception as exc:
        raise _internal_error(exc, "create") from exc
    return ScimResponse(content=user.to_wire(), status_code=status.HTTP_201_CREATED)


@router.api_route(
    "/Users", methods=["PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"], include_in_schema=False
)
async def users_method_not_allowed(request: Request) -> None:
    """Reject unsupported methods on the collection."""
    _log_method_not_allowed(request)
    raise ScimError(405, "Method not allowed")


@router.get("/Users/{user_id}", summary="Get user")
async def get_user(
    user_id: str,
    scope: AuthScope = Depends(require_org_scope),
    db: AsyncSession = Depends(get_db),
) -> ScimResponse:
    """Fetch one SCIM user of the organization."""
    service = ScimUserService(org_id=scope.org_id or "")
    try:
        user = await service.get_user(db=db, user_id=user_id)
    except ScimError:
        raise
    except Exception as exc:
        raise _internal_error(exc, "get") from exc
    return ScimResponse(content=user.to_wire())


@router.delete(
    "/Users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove user from organization",
)
async def delete_user(
    user_id: str,
    scope: AuthScope = Depends(require_org_scope),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Remove a user's organization and project memberships."""
    service = ScimUserService(org_id=scope.org_id or "")
    try:
        await service.delete_user(db=db, user_id=user_id)
    except ScimError:
        raise
    except Exception as exc:
        raise _internal_error(exc, "delete") from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.api_route(
    "/Users/{user_id}",
    methods=["PUT", "PATCH", "POST", "HEAD", "OPTIONS"],
    include_in_schema=False,
)
async def user_method_not_allowed(user_id: str, request: Request) -> None:
    """Reject unsupported methods on a single user."""
    _log_method_not_allowed(request)
    raise ScimError(405, "Method not allowed")
