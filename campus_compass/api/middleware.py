"""
Request middleware: request IDs, access logging and HTTP metrics.

Every request is tagged with a request id (the caller's X-Request-ID when
present) that is bound into the structlog context, so logs emitted by the
services during the request carry it too. Calls scoped to a university
(listings, categories, map) also carry `university_id`.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from campus_compass.core.logging import get_logger
from campus_compass.core.metrics import record_http_request

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Probes are scraped every few seconds
_UNLOGGED_PATHS = frozenset({"/health", "/metrics"})


def _route_template(request: Request) -> str:
    """`/api/v1/events/{event_id}` rather than the concrete path, to keep metric labels bounded."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        started = time.perf_counter()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id, method=request.method, path=request.url.path)
        university_id = request.query_params.get("university_id")
        if university_id:
            structlog.contextvars.bind_contextvars(university_id=university_id)

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed = time.perf_counter() - started
            record_http_request(request.method, _route_template(request), 500, elapsed)
            logger.error("request_failed", error=str(e), duration_ms=round(elapsed * 1000, 2))
            raise

        elapsed = time.perf_counter() - started
        duration_ms = round(elapsed * 1000, 2)
        record_http_request(request.method, _route_template(request), response.status_code, elapsed)

        if request.url.path not in _UNLOGGED_PATHS:
            if response.status_code >= 500:
                logger.warning("request_completed", status_code=response.status_code, duration_ms=duration_ms)
            else:
                logger.info("request_completed", status_code=response.status_code, duration_ms=duration_ms)

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        return response
