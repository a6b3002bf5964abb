"""Per-client request rate limiting, applied to routes as a FastAPI dependency."""

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import HTTPException, Request, Response, status

from memantra.core.config import settings

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS = "Too many requests, please try again later."
TOO_MANY_REQUESTS_FROM_IP = "Too many requests from this IP, please try again later."

# Expired windows are swept once this many clients are tracked.
MAX_TRACKED_KEYS = 10_000


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    # Whole seconds until the current window ends.
    reset_after: int


def client_key(request: Request) -> str:
    client = request.client.host if request.client else "unknown"
    return f"ip:{client}"


class FixedWindowRateLimiter:
    """
    Count requests per client IP in fixed windows of window_sec seconds.

    Counters live in process memory behind a lock, so each worker process
    enforces its own limit. Rejected requests still count toward the window.
    Use the instance as a dependency on a route or router: allowed requests get
    X-RateLimit-* headers, rejected ones raise a 429 HTTPException that also
    carries Retry-After.
    """

    def __init__(
        self,
        max_requests: int,
        window_sec: int,
        *,
        message: str = TOO_MANY_REQUESTS,
        enabled: bool = True,
        now: Callable[[], float] | None = None,
    ) -> None:
        self.max_requests = max_requests
        self.window_sec = window_sec
        self.message = message
        self.enabled = enabled
        self._now = now or time.monotonic
        self._windows: dict[str, tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> RateLimitResult:
        """Record one request for key and report whether it is within the limit."""
        now = self._now()
        with self._lock:
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_sec:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)
            if len(self._windows) > MAX_TRACKED_KEYS:
                self._sweep(now)

        return RateLimitResult(
            allowed=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_after=max(1, math.ceil(started + self.window_sec - now)),
        )

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def _sweep(self, now: float) -> None:
        expired = [k for k, (started, _) in self._windows.items() if now - started >= self.window_sec]
        for k in expired:
            del self._windows[k]

    def __call__(self, request: Request, response: Response) -> None:
        if not self.enabled:
            return
        key = client_key(request)
        result = self.hit(key)
        headers = {
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": str(result.remaining),
            "X-RateLimit-Reset": str(result.reset_after),
        }
        if not result.allowed:
            logger.warning("Rate limit exceeded for %s on %s", key, request.url.path)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=self.message,
                headers={**headers, "Retry-After": str(result.reset_after)},
            )
        response.headers.update(headers)


# Every route under the API prefix.
api_limiter = FixedWindowRateLimiter(
    settings.RATE_LIMIT_MAX,
    settings.RATE_LIMIT_WINDOW_SEC,
    message=TOO_MANY_REQUESTS_FROM_IP,
    enabled=settings.RATE_LIMIT_ENABLED,
)

# GET /auth/me, counted separately from api_limiter.
me_limiter = FixedWindowRateLimiter(
    settings.AUTH_RATE_LIMIT_MAX,
    settings.RATE_LIMIT_WINDOW_SEC,
    message=TOO_MANY_REQUESTS,
    enabled=settings.RATE_LIMIT_ENABLED,
)
