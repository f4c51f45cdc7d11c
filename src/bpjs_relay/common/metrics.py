"""Prometheus metrics for relay observability."""

import os
import time

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    multiprocess,
)
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

# === Counters ===

RELAY_CALLS_TOTAL = Counter(
    "bpjs_relay_calls_total",
    "Total relay calls",
    ["operation", "outcome"],  # outcome: success, validation_error, upstream_error, transport_error
)

HTTP_REQUESTS_TOTAL = Counter(
    "bpjs_relay_http_requests_total",
    "Total inbound HTTP requests",
    ["method", "endpoint", "status"],
)

# === Histograms ===

UPSTREAM_LATENCY = Histogram(
    "bpjs_relay_upstream_latency_seconds",
    "VClaim API call latency in seconds",
    ["operation"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

HTTP_REQUEST_LATENCY = Histogram(
    "bpjs_relay_http_request_latency_seconds",
    "Inbound HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)


# === Helper Functions ===


def record_relay_call(operation: str, outcome: str) -> None:
    """Record a relay call outcome."""
    RELAY_CALLS_TOTAL.labels(operation=operation, outcome=outcome).inc()


def record_upstream_latency(operation: str, latency: float) -> None:
    """Record the latency of one upstream request."""
    UPSTREAM_LATENCY.labels(operation=operation).observe(latency)


def record_http_request(
    method: str,
    endpoint: str,
    status: int,
    latency: float,
) -> None:
    """Record an HTTP request."""
    HTTP_REQUESTS_TOTAL.labels(
        method=method,
        endpoint=endpoint,
        status=str(status),
    ).inc()
    HTTP_REQUEST_LATENCY.labels(
        method=method,
        endpoint=endpoint,
    ).observe(latency)


# === HTTP Endpoint ===


class MetricsMiddleware(BaseHTTPMiddleware):
    """HTTP request metrics middleware."""

    def __init__(self, app: ASGIApp, exclude_paths: list[str] | None = None) -> None:
        super().__init__(app)
        self._exclude_paths = set(exclude_paths or [])

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in self._exclude_paths:
            return await call_next(request)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            record_http_request(
                method=request.method,
                endpoint=request.url.path,
                status=500,
                latency=time.perf_counter() - start,
            )
            raise

        record_http_request(
            method=request.method,
            endpoint=request.url.path,
            status=response.status_code,
            latency=time.perf_counter() - start,
        )
        return response


async def metrics_endpoint(_request: Request) -> Response:
    """Prometheus metrics in text exposition format."""
    multiproc_dir = os.environ.get("PROMETHEUS_MULTIPROC_DIR")
    if multiproc_dir:
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)  # type: ignore[no-untyped-call]
        return Response(
            generate_latest(registry),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    return Response(
        generate_latest(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
