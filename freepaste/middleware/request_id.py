"""
FreePaste — Request ID Middleware
===================================

What:  Assigns a short correlation id to each request and echoes it back in
       the X-Request-ID response header.
How:   Accepts a well-formed client-supplied X-Request-ID, otherwise generates
       one; stores it in a ContextVar so loggers and exception handlers can
       read it without access to the request object.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Client ids are echoed into logs; restrict them to a safe shape
_CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Use the client's X-Request-ID if it matches [A-Za-z0-9._-]{1,64}
        2. Otherwise generate an 8-char hex id
        3. Store in request_id_var and request.state.request_id
        4. Add X-Request-ID to the response
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        supplied = request.headers.get("X-Request-ID", "")
        rid = supplied if _CLIENT_ID_PATTERN.match(supplied) else new_request_id()

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
