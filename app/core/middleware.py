"""Request middleware for correlation and logging."""

import time
import uuid
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.logging import get_logger, request_id_ctx

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Probes hit these every few seconds; keep them out of info logs
QUIET_PATHS = frozenset({"/health", "/health/ready"})


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Propagates ``X-Request-ID`` and logs each request with its duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request with correlation ID.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware/handler in chain.

        Returns:
            Response with X-Request-ID header.
        """
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = request_id_ctx.set(request_id)
        path = request.url.path
        log = logger.debug if path in QUIET_PATHS else logger.info
        started = time.perf_counter()

        try:
            # query strings may carry SCIM filters with e-mail addresses
            log("http.request_started", method=request.method, path=path)

            response = await call_next(request)

            log(
                "http.request_completed",
                method=request.method,
                path=path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )

            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_ctx.reset(token)
