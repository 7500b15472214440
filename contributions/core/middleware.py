from collections import deque
from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Iterable
from threading import RLock
from time import monotonic

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response


PRUNE_THRESHOLD = 1024


class SlidingWindowLimiter:
    """Counts hits per key over a rolling window of `window_seconds`."""

    def __init__(
        self,
        max_hits: int,
        window_seconds: float,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        self.max_hits = max(1, max_hits)
        self.window_seconds = max(1, window_seconds)
        self.clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = RLock()

    def acquire(self, key: str) -> int | None:
        """Record a hit for `key`, or return the seconds to wait when full."""

        now = self.clock()
        with self._lock:
            if len(self._hits) >= PRUNE_THRESHOLD:
                self.prune()
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= now - self.window_seconds:
                hits.popleft()

            if len(hits) >= self.max_hits:
                return max(1, int(self.window_seconds - (now - hits[0])))

            hits.append(now)
            return None

    def prune(self) -> None:
        """Forget keys whose hits have all left the window."""

        cutoff = self.clock() - self.window_seconds
        with self._lock:
            stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
            for key in stale:
                del self._hits[key]

    def __len__(self) -> int:
        return len(self._hits)


class ScrapeRateLimitMiddleware(BaseHTTPMiddleware):
    """Limits GET requests to the endpoints that scrape GitHub, per client IP."""

    def __init__(
        self,
        app,
        limited_paths: Iterable[str],
        requests_per_window: int = 30,
        window_seconds: int = 60,
    ) -> None:
        super().__init__(app)
        self.limited_paths = frozenset(limited_paths)
        self.limiter = SlidingWindowLimiter(requests_per_window, window_seconds)

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.method != "GET" or request.url.path not in self.limited_paths:
            return await call_next(request)

        retry_after = self.limiter.acquire(client_ip(request))
        if retry_after is not None:
            return JSONResponse(
                status_code=429,
                content={"detail": "Too Many Requests"},
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)


def client_ip(request: Request) -> str:
    # Reverse proxies put the original client first in X-Forwarded-For.
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip() or "unknown"

    if request.client and request.client.host:
        return request.client.host

    return "unknown"
