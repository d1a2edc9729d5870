"""Prometheus metrics inventory.

Every metric the service exposes is declared here; the modules that own
the behavior import the metric and increment it at the point of action.
Scraped from GET /metrics.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Course progression metrics
# ---------------------------------------------------------------------------

CACHE_OPERATIONS = Counter(
    "cache_operations_total",
    "Outline cache lookups by result",
    ["operation"],  # "hit" or "miss"
)

PROVIDER_FAILURES = Counter(
    "provider_failures_total",
    "Snapshot fetches that raised, by provider",
    ["provider"],  # "outline", "progress", "role", "unit_lessons"
)

MALFORMED_TIMESTAMPS = Counter(
    "malformed_timestamps_total",
    "Completed progress entries whose completed_at could not be parsed",
)
