"""Prometheus metrics for monitoring.

Tracks request latency, activity mutations and analytics build times.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram, Info

# Application info
APP_INFO = Info("portal_app", "Researcher Portal application info")

# HTTP metrics
HTTP_REQUESTS_TOTAL = Counter(
    "portal_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION = Histogram(
    "portal_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Activity CRUD
ACTIVITY_MUTATIONS = Counter(
    "portal_activity_mutations_total",
    "Activity record mutations",
    ["activity_type", "operation", "status"],
)

# Analytics
ANALYTICS_BUILD_DURATION = Histogram(
    "portal_analytics_build_duration_seconds",
    "Analytics payload build duration",
    ["granularity"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

ANALYTICS_EVENTS_LOADED = Histogram(
    "portal_analytics_events_loaded",
    "Unified activity events loaded per analytics window",
    buckets=(0, 10, 50, 100, 250, 500, 1000, 5000),
)
