"""
FreePaste — Health Check Route
================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings the configured repository and reports status, backend and uptime.

    Status levels:
    - healthy:   storage reachable (HTTP 200)
    - unhealthy: storage unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from freepaste import __version__
from freepaste.schemas.paste import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Storage unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    repository = request.app.state.paste_service.repository
    connected = await repository.ping()
    if not connected:
        logger.warning("Health check: %s storage unreachable", repository.backend_name)

    body = HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        storage_backend=repository.backend_name,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if not connected:
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
