"""
Restaurant CRM Backend - Request Logging Middleware
====================================================

What:  One access-log line per request: method, path, status, duration,
       request ID, client IP and authenticated principal.
How:   Measures from middleware entry to response return; the log level
       follows the status (5xx ERROR, 4xx WARNING, else INFO).
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

Not logged:
    - health / info probe requests (polled every few seconds)
    - request bodies and the Authorization header
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from restaurant_crm.middleware.request_id import request_id_var

logger = logging.getLogger("restaurant_crm.access")

_PROBE_PATHS = frozenset({"/health", "/info"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Structured access logging, keyed by request ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in _PROBE_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        # Set by AccessPolicyMiddleware further down the chain
        principal = getattr(request.state, "principal", "-")

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s user=%s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            principal,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "principal": principal,
            },
        )

        return response
