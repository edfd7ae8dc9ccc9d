"""
East Village Everything — Access Log Middleware
=================================================

What:  One log line per request: method, path, status, duration, request ID,
       client IP and, for admin calls, the acting user.
How:   Times the downstream call and picks the level from the status code
       (5xx → ERROR, 4xx → WARNING, otherwise INFO). Health probes are not
       logged.

Never logged: request bodies (passwords, place text) and cookies.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("eve.access")

QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        client_ip = request.client.host if request.client else "unknown"
        # Set by require_admin on authenticated admin calls
        user = getattr(request.state, "user", None)
        actor = user.email if user is not None else "-"
        rid = request_id_var.get("")

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s as %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            client_ip,
            actor,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "actor": actor,
            },
        )
        return response
