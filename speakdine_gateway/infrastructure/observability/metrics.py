"""Prometheus metrics for monitoring settlements, debt recovery and processor failures"""

from prometheus_client import Counter, Histogram
from speakdine_gateway.domain.models import SettlementBreakdown

# Settlement metrics
settlement_counter = Counter(
    "speakdine_settlement_total",
    "Total settlements computed",
    ["path"],  # quote | checkout | saved_card
)

debt_recovered_counter = Counter(
    "speakdine_debt_recovered_paisa_total",
    "Merchant debt recovered from settlements, in subunits",
)

platform_take_histogram = Histogram(
    "speakdine_platform_take_paisa",
    "Application fee retained per settlement, in subunits",
    buckets=[0, 1_000, 2_500, 5_000, 10_000, 25_000, 50_000, 100_000, 250_000],
)

# Processor metrics
processor_failures_counter = Counter(
    "processor_failures_total",
    "Failed payment processor calls",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_settlement(path: str, breakdown: SettlementBreakdown) -> None:
    """Record settlement metrics for monitoring fee and debt recovery volume"""
    settlement_counter.labels(path=path).inc()
    platform_take_histogram.observe(breakdown.total_platform_take_paisa)

    if breakdown.debt_recovered_paisa > 0:
        debt_recovered_counter.inc(breakdown.debt_recovered_paisa)
