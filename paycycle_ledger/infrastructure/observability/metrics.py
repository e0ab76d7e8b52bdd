"""Prometheus metrics for allocations and recurring executions"""

from decimal import Decimal

from prometheus_client import Counter

allocation_counter = Counter(
    "paycycle_allocation_total",
    "Expenses allocated against stored-value cards",
    ["instrument_kind", "branch"],  # covered | split | refund | exact
)

cash_refund_counter = Counter(
    "paycycle_gift_card_refund_amount_total",
    "Cash refunded from gift card surpluses",
)

recurring_execution_counter = Counter(
    "paycycle_recurring_execution_total",
    "Recurring rules fired by the scheduler",
    ["pattern", "mode"],  # mode: auto | reminder
)


def record_allocation(instrument_kind: str, cash_portion: Decimal, refund: Decimal) -> None:
    """Record which allocation branch an expense took"""
    if refund > 0:
        branch = "refund"
    elif cash_portion > 0:
        branch = "split"
    elif instrument_kind == "gift_card":
        branch = "exact"
    else:
        branch = "covered"

    allocation_counter.labels(instrument_kind=instrument_kind, branch=branch).inc()
    if refund > 0:
        cash_refund_counter.inc(float(refund))


def record_recurring_execution(pattern: str, mode: str) -> None:
    recurring_execution_counter.labels(pattern=pattern, mode=mode).inc()
