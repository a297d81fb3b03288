"""Prometheus metrics for settlements, allocations, recurrences and ledger delivery"""

from decimal import Decimal
from prometheus_client import Counter, Histogram

# Settlement metrics
settlement_counter = Counter(
    "zenith_settlement_total",
    "Payments applied to payables/receivables",
    ["transaction_type", "status"],  # payable|receivable x parcial|pago
)

settlement_amount_histogram = Histogram(
    "zenith_settlement_amount",
    "Settled payment amounts (R$)",
    ["transaction_type"],
    buckets=[10, 50, 100, 500, 1_000, 5_000, 10_000, 50_000, 100_000],
)

settlement_rejected_counter = Counter(
    "zenith_settlement_rejected_total",
    "Settlements rejected by business rules",
    ["reason"],  # validation | invalid_state | overpayment
)

# Allocation metrics
allocation_validation_failures_counter = Counter(
    "zenith_allocation_validation_failures_total",
    "Cost-center allocation sets rejected by validation",
)

rounding_violation_counter = Counter(
    "zenith_allocation_rounding_violations_total",
    "Allocation residual assignment failed to balance (bug indicator)",
)

# Recurrence metrics
installments_generated_counter = Counter(
    "zenith_installments_generated_total",
    "Installments persisted from recurring series",
    ["recurrence_type"],
)

recurrence_materialized_counter = Counter(
    "zenith_recurrence_materialized_total",
    "Next installments materialized by the recurrence job",
    ["transaction_type"],
)

# Ledger delivery metrics
ledger_delivery_histogram = Histogram(
    "zenith_ledger_delivery_seconds",
    "Ledger webhook response time per attempt",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ledger_failure_counter = Counter(
    "zenith_ledger_delivery_failures_total",
    "Failed ledger delivery attempts",
    ["reason"],  # rejected | server_error | network
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_settlement(transaction_type: str, status: str, amount: Decimal) -> None:
    """Record settlement outcome and amount distribution"""
    settlement_counter.labels(transaction_type=transaction_type, status=status).inc()
    settlement_amount_histogram.labels(transaction_type=transaction_type).observe(float(amount))
