"""Prometheus metrics for monitoring payments, debt creation and store health"""

from prometheus_client import Counter, Histogram

from comissio_ledger.domain.models import InstallmentStatus

# Ledger metrics
payment_toggle_counter = Counter(
    "comissio_payment_toggle_total",
    "Installment payment toggles",
    ["direction"],  # confirmed | reversed
)

debt_created_counter = Counter(
    "comissio_debt_created_total",
    "Debts created with an installment schedule",
)

# Store / identity failures
store_failure_counter = Counter(
    "comissio_store_failures_total",
    "Failed record store operations",
    ["category"],  # network | constraint | conflict | store
)

identity_failure_counter = Counter(
    "comissio_identity_failures_total",
    "Failed identity provider calls",
    ["category"],  # auth | network
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_toggle(new_status: InstallmentStatus) -> None:
    """Count a payment confirmation (pending -> paid) or reversal (paid -> pending)"""
    direction = "confirmed" if new_status is InstallmentStatus.PAID else "reversed"
    payment_toggle_counter.labels(direction=direction).inc()
