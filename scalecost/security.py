"""Per-IP rate limiting for the estimate API."""
import logging
import os
import time
from collections import defaultdict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

# Fixed window per IP: (count, window_start). 0 disables the limit.
_RATE_LIMIT_REQUESTS = int(os.environ.get("SCALECOST_RATE_LIMIT_REQUESTS", "300"))
_RATE_LIMIT_WINDOW_SEC = int(os.environ.get("SCALECOST_RATE_LIMIT_WINDOW_SEC", "60"))
_store: dict[str, tuple[int, float]] = defaultdict(lambda: (0, 0.0))
_last_sweep = 0.0


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
    client = request.scope.get("client")
    return (client and client[0]) or forwarded or "unknown"


def _evict_expired(now: float) -> None:
    """Drop IPs whose window has closed; runs at most once per window."""
    global _last_sweep
    if now - _last_sweep < _RATE_LIMIT_WINDOW_SEC:
        return
    _last_sweep = now
    for ip in [ip for ip, (_, start) in _store.items() if now - start >= _RATE_LIMIT_WINDOW_SEC]:
        del _store[ip]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """In-memory per-IP rate limit on /v1/ routes (health excluded)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if _RATE_LIMIT_REQUESTS <= 0 or path == "/v1/health" or not path.startswith("/v1/"):
            return await call_next(request)
        ip = _client_ip(request)
        now = time.time()
        _evict_expired(now)
        count, start = _store[ip]
        if now - start >= _RATE_LIMIT_WINDOW_SEC:
            _store[ip] = (1, now)
        elif count >= _RATE_LIMIT_REQUESTS:
            logger.warning("Rate limit hit for %s on %s", ip, path)
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests. Try again later."},
                headers={"Retry-After": str(_RATE_LIMIT_WINDOW_SEC)},
            )
        else:
            _store[ip] = (count + 1, start)
        return await call_next(request)
