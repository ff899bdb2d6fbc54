"""Prometheus metrics for client requests and retries."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

request_count = Counter(
    "docqa_client_requests_total",
    "Total HTTP requests issued by the client",
    ["method", "outcome"],
)
request_latency = Histogram(
    "docqa_client_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method"],
)
retry_count = Counter(
    "docqa_client_retries_total",
    "Retries scheduled per logical operation",
    ["operation"],
)
operation_count = Counter(
    "docqa_client_operations_total",
    "Logical operations by final outcome",
    ["operation", "outcome"],
)
