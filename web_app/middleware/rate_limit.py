"""Per-client rate limiting middleware."""

import math
import time
from typing import Callable, Dict, Iterable, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse


class FixedWindowRateLimiter:
    """Fixed window rate limiter.

    Counts requests per key in windows of ``window_seconds``. A client can
    get up to 2x the limit across a window boundary.

    ``allow`` never awaits, so it needs no lock on the event loop.
    """

    def __init__(self, limit: int, window_seconds: int = 60, clock: Callable[[], float] = time.time):
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: Dict[str, Tuple[int, int]] = {}

    def allow(self, key: str) -> Tuple[bool, int]:
        """Record a request for key.

        Returns:
            Tuple of (allowed, seconds until the current window ends)
        """
        now = self.clock()
        window_start = int(now // self.window_seconds) * self.window_seconds
        retry_after = max(1, math.ceil(window_start + self.window_seconds - now))

        start, count = self._windows.get(key, (window_start, 0))
        if start != window_start:
            # Drop windows that have ended so the table stays bounded
            self._windows = {k: v for k, v in self._windows.items() if v[0] == window_start}
            count = 0

        if count >= self.limit:
            return False, retry_after

        self._windows[key] = (window_start, count + 1)
        return True, retry_after

    def reset(self, key: Optional[str] = None) -> None:
        if key is None:
            self._windows.clear()
        else:
            self._windows.pop(key, None)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests over the per-client limit with 429."""

    def __init__(
        self,
        app,
        limiter: FixedWindowRateLimiter,
        exempt_paths: Iterable[str] = ("/health", "/api/health"),
    ):
        super().__init__(app)
        self.limiter = limiter
        self.exempt_paths = frozenset(exempt_paths)

    async def dispatch(self, request: Request, call_next: Callable):
        if request.url.path in self.exempt_paths:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        allowed, retry_after = self.limiter.allow(client_ip)

        if not allowed:
            return JSONResponse(
                status_code=429,
                content={"error": "Rate limit exceeded", "detail": {"retry_after": retry_after}},
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)
