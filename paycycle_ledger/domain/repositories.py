"""
Persistence collaborator interface.

The domain functions never touch storage: services read snapshots through
this interface, call the pure functions, then write the results back.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from paycycle_ledger.domain.models import BalanceCard, GiftCard, RecurringTransaction, Transaction


class LedgerRepository(ABC):
    """Storage operations the ledger services rely on"""

    @abstractmethod
    def get_balance_card(self, card_id: str) -> Optional[BalanceCard]:
        pass

    @abstractmethod
    def save_balance_card(self, card: BalanceCard) -> None:
        """Insert or update a balance card"""
        pass

    @abstractmethod
    def list_active_balance_cards(self) -> List[BalanceCard]:
        pass

    @abstractmethod
    def get_gift_card(self, card_id: str) -> Optional[GiftCard]:
        pass

    @abstractmethod
    def save_gift_card(self, card: GiftCard) -> None:
        """Insert or update a gift card"""
        pass

    @abstractmethod
    def list_active_gift_cards(self) -> List[GiftCard]:
        pass

    @abstractmethod
    def append_transaction(self, transaction: Transaction) -> None:
        pass

    @abstractmethod
    def list_transactions_in_range(self, start: date, end: date) -> List[Transaction]:
        """Transactions dated within [start, end], oldest first"""
        pass

    @abstractmethod
    def get_recurring_transaction(self, rule_id: str) -> Optional[RecurringTransaction]:
        pass

    @abstractmethod
    def save_recurring_transaction(self, rule: RecurringTransaction) -> None:
        """Insert or update a recurring rule"""
        pass

    @abstractmethod
    def list_active_recurring_transactions(self) -> List[RecurringTransaction]:
        pass

    def commit(self) -> None:
        """Make the writes so far durable; no-op for stores without transactions"""
        pass
