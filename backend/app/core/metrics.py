"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Event ingestion metrics
event_creations = Counter(
    'event_creations_total',
    'Event creation attempts',
    ['status']  # created, invalid, conflict, upload_failed
)

slug_retries = Counter(
    'slug_conflict_retries_total',
    'Inserts retried after a slug unique-constraint violation'
)

upload_latency = Histogram(
    'image_upload_latency_seconds',
    'Image upload latency',
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 120.0]
)

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking attempts',
    ['status']  # created, invalid, dangling
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


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_event_creation(status: str):
    """Record event creation outcome. Status: created, invalid, conflict, upload_failed"""
    event_creations.labels(status=status).inc()


def record_booking_attempt(status: str):
    """Record booking attempt. Status: created, invalid, dangling"""
    booking_attempts.labels(status=status).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
