"""Request dependencies for SCIM routes."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import ScimError
from app.core.logging import get_logger
from app.features.iam.auth import ApiAuthService
from app.features.iam.schemas import AuthScope

logger = get_logger(__name__)

ORG_KEY_REQUIRED = (
    "Invalid API key. Organization-scoped API key required for this operation."
)


async def require_org_scope(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> AuthScope:
    """Authenticate the request with an organization-scoped API key.

    Raises:
        ScimError: 401 when credentials are missing or invalid, 403 when the
            key is not organization-scoped.
    """
    auth = await ApiAuthService(db).verify_auth_header_and_return_scope(
        request.headers.get("authorization")
    )
    if not auth.valid_key or auth.scope is None:
        raise ScimError(401, auth.error or "Unauthorized")

    if auth.scope.access_level != "organization" or not auth.scope.org_id:
        raise ScimError(403, ORG_KEY_REQUIRED)

    logger.info(
        "scim.request_authorized",
        method=request.method,
        path=str(request.url.path),
        org_id=auth.scope.org_id,
    )
    return auth.scope
