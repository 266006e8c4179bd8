"""
CritterTrack Backend — Access Log Middleware
============================================

One log line per request on the "crittertrack.access" logger:

    PUT /api/animals/{animal_id} 404 3.1ms [3f2a9c1d]

The matched route template is logged rather than the raw URL, so owner and
record ids never end up in access logs; unmatched paths are logged as
"<unmatched>". Bodies, query strings and the Authorization header are
never logged. /health is skipped to keep probe noise out.

Level follows the status class: 5xx ERROR, 401/403 INFO (a normal event
for a bearer API), other 4xx WARNING, everything else INFO.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from crittertrack.middleware.request_id import request_id_var

logger = logging.getLogger("crittertrack.access")

UNMATCHED = "<unmatched>"


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code in (401, 403):
        return logging.INFO
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path == "/health":
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        # The router fills scope["route"] while handling the request
        route = _route_template(request)
        rid = request_id_var.get("")

        logger.log(
            _level_for(response.status_code),
            "%s %s %d %.1fms [%s]",
            request.method,
            route,
            response.status_code,
            elapsed_ms,
            rid,
            extra={
                "request_id": rid,
                "method": request.method,
                "route": route,
                "status": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
            },
        )
        return response
