"""Recurring scheduler - fires due recurring rules at most once per day"""

import logging
from dataclasses import replace
from datetime import date
from typing import List

from paycycle_ledger.config import settings
from paycycle_ledger.domain.exceptions import DomainException
from paycycle_ledger.domain.models import PaymentMethod, RecurringTransaction, Transaction, TransactionType
from paycycle_ledger.domain.recurring import is_due_on, is_executed_on, mark_executed, to_transaction
from paycycle_ledger.domain.repositories import LedgerRepository
from paycycle_ledger.infrastructure.observability.logging import log_recurring_execution
from paycycle_ledger.infrastructure.observability.metrics import record_recurring_execution
from paycycle_ledger.services.ledger import LedgerService

logger = logging.getLogger(__name__)


class RecurringScheduler:
    """
    Runs the recurring rules for a day.

    Check-and-mark happens under a per-rule lock on a fresh read of the rule,
    so overlapping triggers (app launch plus a background timer) on the same
    day fire each rule once. The stamp is written before the generated
    transaction so both land in the same commit.
    """

    def __init__(
        self,
        repository: LedgerRepository,
        ledger: LedgerService | None = None,
        auto_execute: bool | None = None,
    ):
        self.repository = repository
        self.ledger = ledger or LedgerService(repository)
        self.auto_execute = settings.recurring_auto_execute if auto_execute is None else auto_execute

    def run(self, today: date) -> List[RecurringTransaction]:
        """
        Fire every active rule due on `today` that has not fired yet.

        Returns the fired rules (already stamped) so the caller can notify the
        user: "recorded" in auto-execute mode, "record this?" otherwise.
        """
        fired = []
        for rule in self.repository.list_active_recurring_transactions():
            with self.ledger.locks.hold(f"recurring:{rule.id}"):
                current = self.repository.get_recurring_transaction(rule.id)
                if current is None or not is_due_on(current, today) or is_executed_on(current, today):
                    continue

                stamped = mark_executed(current, today)
                self.repository.save_recurring_transaction(stamped)
                if self.auto_execute:
                    self._execute(current, today)
                else:
                    self.repository.commit()

            mode = "auto" if self.auto_execute else "reminder"
            record_recurring_execution(current.pattern.value, mode)
            log_recurring_execution(current.id, today.isoformat(), mode)
            fired.append(stamped)

        return fired

    def _execute(self, rule: RecurringTransaction, today: date) -> None:
        transaction = to_transaction(rule, today)

        try:
            self.ledger.record_transaction(transaction)
        except DomainException as e:
            if transaction.type != TransactionType.EXPENSE or transaction.instrument_kind is None:
                raise
            logger.warning(
                f"Recurring rule {rule.id} could not use its card, recording as cash: {e}",
                extra={"rule_id": rule.id, "instrument_id": rule.instrument_id},
            )
            self.ledger.record_transaction(_as_cash(transaction))


def _as_cash(transaction: Transaction) -> Transaction:
    return replace(transaction, payment_method=PaymentMethod.CASH, instrument_id=None, instrument_name=None)
