"""API key verification for public API routes.

Clients authenticate with HTTP Basic auth where the username is the public key
and the password is the secret key.
"""

import asyncio
import base64
import binascii
import hmac
from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.core.security import fast_hash_secret_key, verify_password
from app.features.iam.models import ApiKey, ApiKeyScope, Project
from app.features.iam.schemas import AuthScope, AuthVerificationResult

logger = get_logger(__name__)


def parse_basic_auth(authorization: str) -> tuple[str, str] | None:
    """Split a ``Basic`` Authorization header into (public_key, secret_key).

    Args:
        authorization: Raw header value.

    Returns:
        Credentials tuple, or None when the header is not valid Basic auth.
    """
    scheme, _, encoded = authorization.strip().partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    public_key, sep, secret_key = decoded.partition(":")
    if not sep or not public_key or not secret_key:
        return None
    return public_key, secret_key


class ApiAuthService:
    """Verifies API key credentials and resolves their access scope."""

    def __init__(self, db: AsyncSession, salt: str | None = None) -> None:
        """Initialize the service.

        Args:
            db: Database session.
            salt: Salt override for fast secret hashing (defaults to settings).
        """
        self.db = db
        self.salt = salt

    async def _secret_matches(self, api_key: ApiKey, secret_key: str) -> bool:
        if api_key.fast_hashed_secret_key:
            candidate = fast_hash_secret_key(secret_key, self.salt)
            return hmac.compare_digest(candidate, api_key.fast_hashed_secret_key)
        return await asyncio.to_thread(verify_password, secret_key, api_key.hashed_secret_key)

    async def verify_auth_header_and_return_scope(
        self,
        authorization: str | None,
    ) -> AuthVerificationResult:
        """Verify an Authorization header.

        Args:
            authorization: Raw ``Authorization`` header value (may be None).

        Returns:
            AuthVerificationResult with the key's scope when valid, or an
            error message suitable for the client when not.
        """
        if not authorization:
            return AuthVerificationResult.invalid("No authorization header")

        credentials = parse_basic_auth(authorization)
        if credentials is None:
            return AuthVerificationResult.invalid(
                "Invalid authorization header. Use Basic auth with public key as "
                "username and secret key as password."
            )
        public_key, secret_key = credentials

        result = await self.db.execute(select(ApiKey).where(ApiKey.public_key == public_key))
        api_key = result.scalar_one_or_none()

        if api_key is None or not await self._secret_matches(api_key, secret_key):
            logger.warning("iam.api_key.invalid_credentials", public_key=public_key)
            return AuthVerificationResult.invalid("Invalid credentials")

        now = datetime.now(UTC)
        if api_key.expires_at is not None and api_key.expires_at <= now:
            logger.warning("iam.api_key.expired", api_key_id=api_key.id)
            return AuthVerificationResult.invalid("API key has expired")

        if api_key.scope == ApiKeyScope.ORGANIZATION.value:
            scope = AuthScope(
                access_level="organization",
                org_id=api_key.org_id,
                project_id=None,
                api_key_id=api_key.id,
            )
        else:
            org_id = await self.db.scalar(
                select(Project.org_id).where(Project.id == api_key.project_id)
            )
            scope = AuthScope(
                access_level="project",
                org_id=org_id,
                project_id=api_key.project_id,
                api_key_id=api_key.id,
            )

        await self.db.execute(
            update(ApiKey).where(ApiKey.id == api_key.id).values(last_used_at=now)
        )

        logger.debug(
            "iam.api_key.verified",
            api_key_id=api_key.id,
            access_level=scope.access_level,
        )
        return AuthVerificationResult(valid_key=True, scope=scope)
