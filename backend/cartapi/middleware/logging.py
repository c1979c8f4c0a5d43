"""
Cart API — Request Logging Middleware
======================================

What:  One access-log line per HTTP request: method, path, status, duration.
How:   Measures from middleware entry to response; picks the log level from
       the status code (5xx ERROR, 4xx WARNING, else INFO).

Logged:     method, path, status, duration, client IP, request ID
Not logged: request bodies (documents may hold personal data), the
            Authorization header
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from cartapi.middleware.request_id import request_id_var

logger = logging.getLogger("cartapi.access")

# Probed every few seconds; logging them drowns everything else
QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    The `extra` fields (request_id, method, path, status, duration_ms,
    client_ip) are attached to the record for formatters that emit them.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = request_id_var.get("")
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
