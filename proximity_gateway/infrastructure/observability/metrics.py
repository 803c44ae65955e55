"""Prometheus metrics for monitoring match rates, notifications and push delivery"""

from prometheus_client import Counter, Histogram, Gauge

# Matching metrics
proximity_match_counter = Counter(
    "proximity_match_total",
    "Proximity lookups by mode and outcome",
    ["mode", "outcome"],  # exact | nearby | tracking ; match | no_match
)

location_store_failures_counter = Counter(
    "location_store_failures_total",
    "Failed location store queries",
)

# Notification metrics
notification_counter = Counter(
    "proximity_notification_total",
    "Location notifications by outcome",
    ["outcome"],  # sent | failed | cooldown | disabled
)

push_latency_histogram = Histogram(
    "push_latency_seconds",
    "Push notification service response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

push_failure_counter = Counter(
    "push_failures_total",
    "Failed push notification deliveries",
)

# Live tracking
tracked_users_gauge = Gauge(
    "tracked_users",
    "Users with live location state",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_match(mode: str, matched: bool) -> None:
    """Record a proximity lookup for match-rate dashboards"""
    proximity_match_counter.labels(mode=mode, outcome="match" if matched else "no_match").inc()


def record_notification(outcome: str) -> None:
    notification_counter.labels(outcome=outcome).inc()
