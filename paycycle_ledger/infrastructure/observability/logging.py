"""Structured JSON logging"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from paycycle_ledger.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_allocation(
    instrument_kind: str,
    instrument_id: str,
    expense_amount: Decimal,
    instrument_portion: Decimal,
    cash_portion: Decimal,
    refund: Decimal,
    exhausted: bool,
) -> None:
    """Log how an expense was split between a card and cash"""
    logging.getLogger("paycycle_ledger.allocation").info(
        "Allocation completed",
        extra={
            "step": "allocation_complete",
            "instrument_kind": instrument_kind,
            "instrument_id": instrument_id,
            "expense_amount": str(expense_amount),
            "instrument_portion": str(instrument_portion),
            "cash_portion": str(cash_portion),
            "refund": str(refund),
            "exhausted": exhausted,
        },
    )


def log_recurring_execution(rule_id: str, day: str, mode: str) -> None:
    """Log a recurring rule firing"""
    logging.getLogger("paycycle_ledger.recurring").info(
        "Recurring transaction fired",
        extra={"step": "recurring_fired", "rule_id": rule_id, "day": day, "mode": mode},
    )
