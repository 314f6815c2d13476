# order_tracking/obs/metrics.py
import time

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

http_requests_total = Counter("http_requests_total", "HTTP requests", ["method", "route", "code"])
http_request_duration = Histogram(
    "http_request_duration_seconds", "HTTP request duration seconds", ["method", "route"]
)

# kind: rest / graphql / staged_upload; outcome: ok / transport / upstream / decode
platform_requests_total = Counter(
    "platform_requests_total", "Calls made to the commerce platform", ["kind", "outcome"]
)


def _route_label(request) -> str:
    # templated path keeps order numbers out of the label set
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            http_requests_total.labels(request.method, _route_label(request), "500").inc()
            raise
        elapsed = time.perf_counter() - start
        route = _route_label(request)
        http_requests_total.labels(request.method, route, str(response.status_code)).inc()
        http_request_duration.labels(request.method, route).observe(elapsed)
        return response


router = APIRouter(tags=["metrics"])


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
