"""
FreePaste — Request Logging Middleware
========================================

What:  One access log line per HTTP request with status and duration.
How:   Times the downstream call, picks the log level from the status class,
       and attaches structured fields through `extra=`.

Logged:      method, path, status, duration, request id, client address
Not logged:  request bodies (paste content), cookies, owner tokens, query strings
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from freepaste.middleware.request_id import request_id_var

logger = logging.getLogger("freepaste.access")

# Polled by load balancers and container health checks
QUIET_PATHS = {"/health"}


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Typical durations:
        - GET /raw/{id}, GET /api/get/{id}: single primary-key lookup, a few ms
        - POST /api/new: one insert, more on id collisions
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        status = response.status_code

        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
