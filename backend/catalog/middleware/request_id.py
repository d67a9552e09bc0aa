"""
Resource Catalog — Request ID Middleware
========================================

What:  Tags every request with an ID and echoes it in the X-Request-ID header.
How:   Reuses the client's X-Request-ID when present, otherwise generates a
       short UUID. The ID lives in a ContextVar for loggers and error
       handlers, and on request.state for route handlers.
Who:   Applied to every request; runs before the logging middleware.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# ── Context Variable ──────────────────────────────────────────────────────
# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns or propagates X-Request-ID for tracing."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
