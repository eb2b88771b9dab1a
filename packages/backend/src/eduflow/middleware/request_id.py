"""Request correlation for logs.

Learn: The ID comes from the caller's X-Request-ID (so a frontend or proxy
can correlate its own logs) or is generated here. It's bound to structlog's
contextvars, so auth failures and tenant-guard rejections logged deeper in
the stack carry it without being passed around. Caller-supplied values are
untrusted input headed for the logs: anything long or unusual is replaced.
"""

import re
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

HEADER = "X-Request-ID"
_ACCEPTED = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


def resolve_request_id(incoming: str | None) -> str:
    if incoming and _ACCEPTED.match(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = resolve_request_id(request.headers.get(HEADER))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response = await call_next(request)
        response.headers[HEADER] = request_id
        return response
