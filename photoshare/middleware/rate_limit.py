"""
Photoshare Backend - Rate Limiting Middleware
==============================================

What:  Per-IP sliding-window request limiter.
How:   Keeps the timestamps of each client's requests inside the last
       RATE_LIMIT_WINDOW seconds; once RATE_LIMIT_REQUESTS are in the window
       further requests get 429 with a Retry-After header.

State is in process memory, so limits are per worker. The health probes and
the API docs are never limited.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from photoshare.config import settings
from photoshare.middleware.request_id import REQUEST_ID_HEADER

logger = logging.getLogger(__name__)

# Drop idle clients every this many recorded requests
CLEANUP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window limiter.

    Args:
        max_requests: Requests allowed per window. Defaults to settings.
        window:       Window length in seconds. Defaults to settings.
    """

    EXCLUDED_PATHS = {"/", "/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window: Optional[int] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window = window or settings.rate_limit_window
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._recorded = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - self.window

        history = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = history

        if len(history) >= self.max_requests:
            retry_after = int(history[0] + self.window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(history),
                self.window,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": f"Too many requests. Please wait {retry_after} seconds before retrying.",
                    "details": {"retry_after": retry_after},
                    "request_id": request.headers.get(REQUEST_ID_HEADER, ""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        history.append(now)
        self._recorded += 1
        if self._recorded % CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive:
            del self._requests[ip]

        if inactive:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive))
