from __future__ import annotations

from typing import Optional

from prometheus_client import Counter, Histogram, Gauge

CLIENT_REQUESTS_TOTAL = Counter(
    "journy_client_requests_total",
    "Total API calls made by the client",
    labelnames=("operation", "outcome"),
)

CLIENT_LATENCY_MS = Histogram(
    "journy_client_latency_ms",
    "API call latency in milliseconds",
    labelnames=("operation",),
)

CALLS_REMAINING = Gauge(
    "journy_calls_remaining",
    "Last X-RateLimit-Remaining value reported by the API",
)

QUEUE_DEPTH = Gauge(
    "journy_queue_depth",
    "Number of work items waiting in dispatch queues",
)


def record_call(operation: str, outcome: str, duration_ms: float) -> None:
    CLIENT_REQUESTS_TOTAL.labels(operation=operation, outcome=outcome).inc()
    CLIENT_LATENCY_MS.labels(operation=operation).observe(duration_ms)


def update_calls_remaining(remaining: Optional[int]) -> None:
    if remaining is None:
        return
    CALLS_REMAINING.set(remaining)
