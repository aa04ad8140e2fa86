"""
Synapse Scribble Backend - Request Logging Middleware
=====================================================

What:  One access-log line per HTTP request.
How:   Measures the request duration and logs method, path, status,
       duration, request ID and client IP. The level follows the status:
       5xx → ERROR, 4xx → WARNING, otherwise INFO.

Bodies are never logged: transcripts, audio and images may carry
personal data.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from synapse_scribble.middleware.request_id import request_id_var

logger = logging.getLogger("synapse_scribble.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request except health probes.

    Typical durations:
        - GET /health: 1-5ms (not logged)
        - POST /api/flows/summarize: 1-5s (one Gemini call)
        - POST /api/sessions/{id}/analyze: 10-40s (five Gemini calls)
    """

    QUIET_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        client_ip = request.client.host if request.client else "unknown"
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
            request.method,
            request.url.path,
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
