"""
Prometheus metrics for the Car Manager service.

Tracks HTTP requests, car operations, validation failures and the size of
the stored collection.
"""

from fastapi import Response
from prometheus_client import (CONTENT_TYPE_LATEST, Counter, Gauge, Histogram,
                               generate_latest)

from .events import CollectionChanged

# Request metrics
http_requests_total = Counter(
    "car_manager_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "car_manager_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0),
)

# Car operation metrics
car_operations_total = Counter(
    "car_manager_car_operations_total",
    "Total car collection operations",
    ["operation", "status"],
)

car_validation_failures_total = Counter(
    "car_manager_validation_failures_total",
    "Total rejected car submissions",
    ["field"],
)

cars_stored = Gauge("car_manager_cars_stored", "Number of cars in the collection")


def track_request_metrics(
    method: str, endpoint: str, status_code: int, duration: float
):
    """Track HTTP request metrics."""
    http_requests_total.labels(
        method=method, endpoint=endpoint, status=status_code
    ).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
        duration
    )


def track_car_operation(operation: str, success: bool):
    """Track create/update/delete outcomes."""
    status = "success" if success else "failure"
    car_operations_total.labels(operation=operation, status=status).inc()


def track_validation_failure(field: str):
    """Track rejected submissions by offending field."""
    car_validation_failures_total.labels(field=field).inc()


def update_cars_stored(event: CollectionChanged):
    """Collection listener keeping the stored-cars gauge current."""
    cars_stored.set(event.size)


async def metrics_endpoint():
    """
    Prometheus metrics endpoint.

    Returns:
        Response with Prometheus metrics in text format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
