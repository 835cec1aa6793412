"""
Prometheus metrics for the vehicle registry service.

Tracks HTTP traffic, registration workflow outcomes and the number
of registered vehicles.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest

# Request metrics
http_requests_total = Counter(
    "vehicle_registry_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "vehicle_registry_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

# Workflow metrics
vehicle_operations_total = Counter(
    "vehicle_registry_operations_total",
    "Registration workflow calls by outcome",
    ["operation", "outcome"],
)

registered_vehicles = Gauge(
    "vehicle_registry_registered_vehicles",
    "Number of vehicles currently registered",
)


def record_operation(operation: str, outcome: str) -> None:
    """
    Count one workflow call.

    Args:
        operation: Workflow name (create, update, find, list, delete)
        outcome: success, validation_error, not_found, conflict or error
    """
    vehicle_operations_total.labels(operation=operation, outcome=outcome).inc()


def metrics_response() -> Response:
    """Render all metrics in Prometheus exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
