"""
Little Application: Request Logging Middleware
=================================================

What:  One access-log line per HTTP request.
How:   Times the downstream call and logs method, path, query string,
       status and duration with the request id. Level follows the status
       class: 5xx → ERROR, 4xx → WARNING, otherwise INFO.

    GET /api/v1/posts?page=2&limit=10 200 12.4ms [1f2e3d4c] from 10.0.0.7

Bodies and Authorization headers are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from littleapp.middleware.request_id import request_id_var

logger = logging.getLogger("littleapp.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    # Probed every few seconds; would drown the log
    QUIET_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            target,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
