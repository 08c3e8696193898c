"""
Request context middleware.

Every request gets a request id: the client's X-Request-ID when it is safe
to log, a generated one otherwise. The id is bound into structlog's
contextvars (so the loader and engine logs carry it), tagged on Sentry
events, and echoed back in the X-Request-ID response header.
"""

import re
import time
from typing import Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from cardvault.core.context import clear_context, generate_request_id, set_request_id

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Client ids are logged verbatim; anything else is replaced
_SAFE_REQUEST_ID = re.compile(r"^[a-zA-Z0-9_\-]{1,64}$")


def resolve_request_id(provided: Optional[str]) -> str:
    if provided and _SAFE_REQUEST_ID.match(provided):
        return provided
    return generate_request_id()


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        set_request_id(request_id)
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id, path=request.url.path, method=request.method)

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            if not request.url.path.startswith("/health"):
                logger.info(
                    "request completed",
                    status_code=status_code,
                    duration_ms=round((time.perf_counter() - started) * 1000, 1),
                )
            clear_context()
            structlog.contextvars.clear_contextvars()
