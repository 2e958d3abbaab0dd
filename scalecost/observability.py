"""Structured request logging and in-process metrics."""
import logging
import time
import uuid
from collections import defaultdict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

_LOG = logging.getLogger(__name__)

# Reset on restart. Multi-instance deployments should scrape each instance.
_request_total: dict[str, int] = defaultdict(int)
_estimate_total: dict[str, int] = defaultdict(int)
_request_duration_sec: list[float] = []
_start_time = time.time()
_MAX_DURATION_SAMPLES = 1000


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Add request_id and log structured request/response with duration."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        path = request.url.path
        method = request.method
        start = time.time()
        response = await call_next(request)
        elapsed = time.time() - start
        _request_total[f"{method} {path}"] += 1
        _request_total["_total"] += 1
        _request_duration_sec.append(elapsed)
        if len(_request_duration_sec) > _MAX_DURATION_SAMPLES:
            _request_duration_sec[:] = _request_duration_sec[-_MAX_DURATION_SAMPLES:]
        _LOG.info(
            "request finished",
            extra={
                "request_id": request_id,
                "method": method,
                "path": path,
                "status": response.status_code,
                "duration_ms": round(elapsed * 1000, 2),
            },
        )
        response.headers["X-Request-ID"] = request_id
        return response


def record_estimate(kind: str, outcome: str) -> None:
    """Count an estimate computation, e.g. ("project", "ok") or ("project", "not_ready")."""
    _estimate_total[f"{kind} {outcome}"] += 1


def get_metrics_text() -> str:
    """Prometheus-style text for GET /v1/metrics."""
    uptime = time.time() - _start_time
    lines = [
        "# HELP scalecost_uptime_seconds Process uptime in seconds.",
        "# TYPE scalecost_uptime_seconds gauge",
        f"scalecost_uptime_seconds {uptime:.2f}",
        "# HELP scalecost_http_requests_total Total HTTP requests by method and path.",
        "# TYPE scalecost_http_requests_total counter",
    ]
    for key, count in sorted(_request_total.items()):
        if key == "_total":
            lines.append(f'scalecost_http_requests_total{{aggregate="all"}} {count}')
        else:
            method, _, path = key.partition(" ")
            path = path.replace('"', r"\"")
            lines.append(f'scalecost_http_requests_total{{method="{method}",path="{path}"}} {count}')
    lines.extend([
        "# HELP scalecost_estimates_total Cost estimates computed, by kind and outcome.",
        "# TYPE scalecost_estimates_total counter",
    ])
    for key, count in sorted(_estimate_total.items()):
        kind, _, outcome = key.partition(" ")
        lines.append(f'scalecost_estimates_total{{kind="{kind}",outcome="{outcome}"}} {count}')
    if _request_duration_sec:
        avg = sum(_request_duration_sec) / len(_request_duration_sec)
        lines.extend([
            "# HELP scalecost_http_request_duration_seconds Recent request duration (avg).",
            "# TYPE scalecost_http_request_duration_seconds gauge",
            f"scalecost_http_request_duration_seconds {avg:.4f}",
        ])
    return "\n".join(lines) + "\n"
