# This project was developed with assistance from AI tools.
"""Per-request metadata captured for logging and the audit writer.

Every request gets a request id (taken from ``X-Request-Id`` or generated),
echoed back in the response headers. Client IP, user agent, path and method
are stored in a context variable so ``services.audit`` can attach them
without threading the Request object through every service call.
"""

import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-Id"


@dataclass(frozen=True)
class RequestContext:
    request_id: str
    ip_address: str | None = None
    user_agent: str | None = None
    path: str | None = None
    method: str | None = None


_request_context: ContextVar[RequestContext | None] = ContextVar("request_context", default=None)


def get_request_context() -> RequestContext | None:
    """Return metadata for the in-flight request, or None outside a request."""
    return _request_context.get()


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Ensures every request has a request id and captured client metadata."""

    def __init__(self, app, header_name: str = REQUEST_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = rid
        token = _request_context.set(
            RequestContext(
                request_id=rid,
                ip_address=_client_ip(request),
                user_agent=request.headers.get("user-agent"),
                path=request.url.path,
                method=request.method,
            )
        )
        try:
            response = await call_next(request)
        finally:
            _request_context.reset(token)
        response.headers[self.header_name] = rid
        return response
