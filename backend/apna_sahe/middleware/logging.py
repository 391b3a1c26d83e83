"""
Apna SAHE Backend — Request Logging Middleware
================================================

What:  One access log line per request with method, path, status, duration,
       request id and client address.
How:   Logged on the `apna_sahe.access` logger; the level follows the status
       (5xx → ERROR, 4xx → WARNING, otherwise INFO) so alerting can key on it.

Privacy:
    Logged:     method, path, status, duration, client IP, request id
    Not logged: bodies (passwords, PDFs), the Authorization header, query
                strings (search terms)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from apna_sahe.middleware.request_id import request_id_var

logger = logging.getLogger("apna_sahe.access")

# Probed every few seconds by the host; logging them buries real traffic
QUIET_PATHS = {"/health"}


def status_log_level(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access logging with request-id correlation."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        rid = request_id_var.get("")

        logger.log(
            status_log_level(status),
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
