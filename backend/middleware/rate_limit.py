"""Per-client request throttling for the CircuitSage API."""

import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

# Path prefixes that run the evaluator; graph sampling can be expensive
COMPUTE_ROUTES = ("/api/calculate", "/api/graph")

EXEMPT_PATHS = ("/api/health",)

WINDOW_SECONDS = 60.0


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding one-minute window per client, in process memory.

    Every request counts against the general budget; compute routes also
    count against a smaller compute budget. Not shared between workers.
    """

    _PRUNE_EVERY = 300.0

    def __init__(self, app, requests_per_minute: int = 60, compute_requests_per_minute: int = 30,
                 clock: Callable[[], float] = time.monotonic):
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.compute_requests_per_minute = compute_requests_per_minute
        self._clock = clock
        self._windows: Dict[str, Deque[float]] = defaultdict(deque)
        self._last_prune = clock()

    @staticmethod
    def client_key(request: Request) -> str:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _prune(self, now: float) -> None:
        if now - self._last_prune < self._PRUNE_EVERY:
            return
        self._last_prune = now
        for key in [k for k, window in self._windows.items() if not window or window[-1] <= now - WINDOW_SECONDS]:
            del self._windows[key]

    def _retry_after(self, key: str, limit: int, now: float) -> Optional[float]:
        """Record a hit under ``key``; return seconds to wait if the budget is spent."""
        window = self._windows[key]
        while window and window[0] <= now - WINDOW_SECONDS:
            window.popleft()
        if len(window) >= limit:
            return max(window[0] + WINDOW_SECONDS - now, 0.0)
        window.append(now)
        return None

    @staticmethod
    def _too_many(message: str, wait: float) -> JSONResponse:
        return JSONResponse(
            status_code=429,
            content={"detail": message},
            headers={"Retry-After": str(int(wait) + 1)},
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if path in EXEMPT_PATHS:
            return await call_next(request)

        now = self._clock()
        self._prune(now)
        client = self.client_key(request)

        if path.startswith(COMPUTE_ROUTES):
            wait = self._retry_after(f"{client}:compute", self.compute_requests_per_minute, now)
            if wait is not None:
                return self._too_many("Calculation rate limit exceeded. Please wait before trying again.", wait)

        wait = self._retry_after(client, self.requests_per_minute, now)
        if wait is not None:
            return self._too_many("Rate limit exceeded. Please wait before trying again.", wait)

        return await call_next(request)
