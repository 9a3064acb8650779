"""
LinguaHub Backend — Rate Limiting Middleware
==============================================

What:  Caps how many requests one client IP may make per time window.
Why:   No endpoint requires authentication, so this is the only brake on a
       single client hammering registration or uploads.

SlidingWindowLog keeps, per key, the timestamps of accepted requests inside
the window (a deque, oldest on the left). A request is refused when the
deque is already full; Retry-After is the time until its oldest entry
leaves the window.

State lives in process memory: every uvicorn worker counts separately.
"""

import logging
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from app.exceptions import RateLimitExceededError
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class SlidingWindowLog:

    # Sweep idle keys after this many accepted requests
    SWEEP_EVERY = 1000

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._accepted = 0

    def hit(self, key: str) -> Optional[int]:
        """
        Record a request for `key`.

        Returns None when it is allowed, otherwise the seconds to wait.
        """
        now = self._clock()
        horizon = now - self.window_seconds
        hits = self._hits.setdefault(key, deque())
        while hits and hits[0] <= horizon:
            hits.popleft()

        if len(hits) >= self.max_requests:
            return int(hits[0] - horizon) + 1

        hits.append(now)
        self._accepted += 1
        if self._accepted % self.SWEEP_EVERY == 0:
            self._sweep(horizon)
        return None

    def _sweep(self, horizon: float) -> None:
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= horizon]
        for key in idle:
            del self._hits[key]
        if idle:
            logger.debug("Rate limiter dropped %d idle clients", len(idle))


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Args:
        max_requests:   requests allowed per window per client IP
        window_seconds: window length

    Probes and API docs are never limited.
    """

    EXCLUDED_PATHS = frozenset({"/", "/health", "/docs", "/openapi.json", "/redoc"})

    def __init__(self, app: ASGIApp, max_requests: int = 1000, window_seconds: int = 3600):
        super().__init__(app)
        self.limiter = SlidingWindowLog(max_requests, window_seconds)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        retry_after = self.limiter.hit(client_ip)
        if retry_after is None:
            return await call_next(request)

        exc = RateLimitExceededError(retry_after=retry_after, context={"client_ip": client_ip})
        logger.warning("Rate limit exceeded for %s on %s %s", client_ip, request.method, request.url.path)

        # This layer sits outside the app's exception handlers
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": exc.error_code,
                "message": exc.public_message,
                "details": exc.public_details,
                "request_id": request_id_var.get(""),
            },
            headers={"Retry-After": str(retry_after)},
        )
