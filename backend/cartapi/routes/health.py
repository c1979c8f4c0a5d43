"""
Cart API — Health Check Route
==============================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings every configured document store and reports the aggregate.
Who:   Called by container health checks, load balancers, and monitoring.

Status levels:
    - healthy:   every store answered (HTTP 200)
    - unhealthy: at least one store is unreachable (HTTP 503)

Not behind authentication: probes carry no credentials.
"""

import logging
import time

from fastapi import APIRouter, Request, Response

from cartapi import __version__
from cartapi.schemas.documents import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    stores = {}
    overall = "healthy"

    for name, store in request.app.state.stores:
        if await store.ping():
            stores[name] = "connected"
        else:
            stores[name] = "disconnected"
            overall = "unhealthy"
            logger.warning("Health check: store '%s' unreachable", name)

    if overall != "healthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        stores=stores,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
