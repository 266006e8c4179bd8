"""
CritterTrack Backend — Request ID Middleware
============================================

What:  Tags every request with a short correlation id.
How:   Reuses a well-formed inbound X-Request-ID header, otherwise generates
       one. The id lives in a ContextVar (read by the access log and the
       exception handlers) and in request.state, and is echoed back in the
       X-Request-ID response header.
When:  Outermost application middleware, so everything downstream sees it.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Client ids are echoed into logs and headers; keep them short and plain
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        inbound = request.headers.get("X-Request-ID", "")
        rid = inbound if _VALID_REQUEST_ID.match(inbound) else str(uuid.uuid4())[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
