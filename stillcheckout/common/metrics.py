"""Prometheus metric definitions for the checkout service."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


checkout_requests_total = Counter(
    "checkout_requests_total",
    "Checkout requests by terminal outcome",
    ["service", "outcome"],
)
checkout_upstream_latency_seconds = Histogram(
    "checkout_upstream_latency_seconds",
    "Latency of the upstream checkout session call",
    ["service"],
)
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
