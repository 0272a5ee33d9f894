"""Prometheus metrics for simulations, validation rejections and upstream health"""

from prometheus_client import Counter, Histogram

# Simulation metrics
simulation_counter = Counter(
    "depco_simulation_total",
    "Scenario simulations run",
    ["risk_level"],  # low | moderate | high | very_high
)

validation_rejection_counter = Counter(
    "depco_validation_rejections_total",
    "Credit items rejected before simulation",
    ["field"],
)

# Upstream lending API metrics
upstream_failure_counter = Counter(
    "lending_api_failures_total",
    "Failed lending API calls",
    ["operation"],
)

upstream_latency_histogram = Histogram(
    "lending_api_latency_seconds",
    "Lending API response time",
    ["operation"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_simulation(risk_level: str) -> None:
    simulation_counter.labels(risk_level=risk_level).inc()


def record_validation_rejection(field: str) -> None:
    validation_rejection_counter.labels(field=field).inc()
