"""
LinguaHub Backend — Access Log Middleware
===========================================

One line per request on the "linguahub.access" logger:

    PUT /profile/update 400 12.4ms from 10.0.0.7

Level follows the outcome: 5xx or an exception → ERROR, 4xx → WARNING,
otherwise INFO. Request IDs are added by RequestIDLogFilter. Bodies are
never logged: registration and profile forms carry passwords and
personal data.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

access_logger = logging.getLogger("linguahub.access")

# Hit by uptime probes every few seconds
QUIET_PATHS = frozenset({"/", "/health"})


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception:
            access_logger.error(
                "%s %s raised after %.1fms from %s",
                request.method,
                request.url.path,
                (time.perf_counter() - started) * 1000,
                client_ip,
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        access_logger.log(
            _level_for(response.status_code),
            "%s %s %d %.1fms from %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            client_ip,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
