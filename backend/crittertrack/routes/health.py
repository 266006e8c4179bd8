"""
CritterTrack Backend — Health Check Route
=========================================

What:  Liveness/readiness probe for Docker and load balancers.
How:   Asks the configured credential store for a cheap round trip
       (SELECT 1 for SQL, a one-row GET for the REST data API).

Status levels:
    healthy:    store reachable   (HTTP 200)
    unhealthy:  store unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Request, Response, status

from crittertrack import __version__
from crittertrack.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    store = request.app.state.store
    reachable = await store.ping()
    if not reachable:
        logger.warning("Health check: credential store unreachable")
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if reachable else "unhealthy",
        version=__version__,
        store="connected" if reachable else "disconnected",
        store_backend=request.app.state.settings.store_backend,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
