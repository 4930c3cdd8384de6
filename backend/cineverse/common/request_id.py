"""Request ID middleware and utilities."""

import re
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from cineverse.core.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
# Accepted from upstream proxies as-is; anything else is replaced
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")
# Health checks poll these every few seconds
QUIET_PATHS = frozenset({"/api/health"})


def get_request_id(request: Request) -> str:
    """Get request ID from request state."""
    return getattr(request.state, "request_id", "unknown")


def resolve_request_id(incoming: str | None) -> str:
    """Reuse a well-formed incoming request ID, otherwise mint a new one."""
    if incoming and _REQUEST_ID_PATTERN.match(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to generate and track request IDs."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Tag the request with an ID and log its start, failure or completion."""
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        path = request.url.path
        log_level_info = path not in QUIET_PATHS

        start_time = time.perf_counter()
        if log_level_info:
            logger.info(
                "Request started",
                extra={"request_id": request_id, "method": request.method, "path": path},
            )

        try:
            response = await call_next(request)
        except Exception as e:
            # Unhandled errors still get a log line carrying the request ID
            elapsed_ms = int((time.perf_counter() - start_time) * 1000)
            logger.error(
                "Request failed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": path,
                    "status_code": 500,
                    "latency_ms": elapsed_ms,
                    "error": str(e),
                },
                exc_info=True,
            )
            raise

        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        response.headers[REQUEST_ID_HEADER] = request_id

        log = logger.info if log_level_info else logger.debug
        log(
            "Request completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "latency_ms": elapsed_ms,
            },
        )

        return response
