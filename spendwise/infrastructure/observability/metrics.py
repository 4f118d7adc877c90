"""Prometheus metrics for monitoring nudge volume, engine latency and store health"""

from typing import List
from prometheus_client import Counter, Histogram

from spendwise.domain.models import Nudge

# Insight metrics
insight_request_counter = Counter(
    "spendwise_insight_requests_total",
    "Insight engine invocations",
    ["endpoint", "outcome"],  # ok | not_found | store_error | error
)

nudge_counter = Counter(
    "spendwise_nudges_emitted_total",
    "Nudges returned to users after prioritization",
    ["kind", "priority"],
)

insight_duration_histogram = Histogram(
    "spendwise_insight_generation_seconds",
    "Time spent gathering data and evaluating rules",
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

# Store metrics
store_failures_counter = Counter(
    "spendwise_store_failures_total",
    "Failed reads from the transaction/category/profile store",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_nudges(endpoint: str, nudges: List[Nudge]) -> None:
    """Record a successful engine run and the nudges it surfaced"""
    insight_request_counter.labels(endpoint=endpoint, outcome="ok").inc()
    for nudge in nudges:
        nudge_counter.labels(kind=nudge.kind.value, priority=nudge.priority.value).inc()
