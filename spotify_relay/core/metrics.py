"""Application metrics using the Prometheus client library.

All metrics are defined here so there is a single inventory of what the
relay measures.  Other modules import a metric and increment/observe it
at the point of action.

  COUNTER   only goes up; Prometheus derives rates from it
  GAUGE     goes up and down; a snapshot of current state
  HISTOGRAM bucketed observations; Prometheus derives percentiles

Prometheus pulls these from GET /metrics.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
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
    # Every relayed request includes one round-trip to Spotify, so the
    # interesting range starts around 50ms.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Upstream metrics
# ---------------------------------------------------------------------------

UPSTREAM_REQUESTS = Counter(
    "upstream_requests_total",
    "Calls made to Spotify by target and outcome",
    # target: "token" (accounts token endpoint) or "api" (resource API)
    # outcome: "success", "http_error" or "transport_error"
    ["target", "outcome"],
)
