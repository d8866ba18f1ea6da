"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at the /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# HTTP metrics
http_requests = Counter(
    'http_requests_total',
    'HTTP requests by route template',
    ['method', 'route', 'status']
)

http_request_latency = Histogram(
    'http_request_latency_seconds',
    'HTTP request latency',
    ['route'],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)

# Registration metrics
registration_operations = Counter(
    'registration_operations_total',
    'Registration state changes',
    ['action', 'result']  # register/cancel/interested, created/updated/not_found/conflict
)

# ETA metrics
eta_lookups = Counter(
    'eta_lookups_total',
    'Walking ETA lookups',
    ['result']  # ok, unavailable
)

eta_latency = Histogram(
    'eta_lookup_latency_seconds',
    'Routing gateway round-trip latency',
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)

# LLM extraction metrics
extraction_requests = Counter(
    'event_extraction_requests_total',
    'LLM event extraction requests',
    ['result']  # success, failure
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_http_request(method: str, route: str, status: int, seconds: float):
    http_requests.labels(method=method, route=route, status=str(status)).inc()
    http_request_latency.labels(route=route).observe(seconds)


def record_registration(action: str, result: str):
    registration_operations.labels(action=action, result=result).inc()


def record_eta_lookup(available: bool):
    eta_lookups.labels(result="ok" if available else "unavailable").inc()


def record_cache_operation(operation: str, hit: bool):
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()


def record_extraction(success: bool):
    extraction_requests.labels(result="success" if success else "failure").inc()
