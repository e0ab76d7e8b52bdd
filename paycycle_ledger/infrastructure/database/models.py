"""SQLAlchemy ORM models for ledger persistence"""

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

# Enough for large won amounts while keeping cents for other currencies
Money = Numeric(18, 2)


class TransactionRecord(Base):
    """Ledger transaction row"""

    __tablename__ = "ledger_transaction"

    id = Column(String(64), primary_key=True)
    amount = Column(Money, nullable=False)
    type = Column(String(16), nullable=False)
    category = Column(Text, nullable=False)
    merchant = Column(Text, nullable=True)
    memo = Column(Text, nullable=False, default="")
    date = Column(Date, nullable=False, index=True)
    income_type = Column(String(16), nullable=True)
    payment_method = Column(String(16), nullable=True)
    instrument_id = Column(String(64), nullable=True, index=True)
    instrument_name = Column(Text, nullable=True)
    actual_amount = Column(Money, nullable=True)
    settlement_amount = Column(Money, nullable=True)
    is_settlement = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class BalanceCardRecord(Base):
    """Balance card state"""

    __tablename__ = "balance_card"

    id = Column(String(64), primary_key=True)
    name = Column(Text, nullable=False)
    initial_amount = Column(Money, nullable=False)
    current_balance = Column(Money, nullable=False)
    created_date = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)


class GiftCardRecord(Base):
    """Gift card state"""

    __tablename__ = "gift_card"

    id = Column(String(64), primary_key=True)
    name = Column(Text, nullable=False)
    total_amount = Column(Money, nullable=False)
    used_amount = Column(Money, nullable=False)
    created_date = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    minimum_usage_rate = Column(Numeric(4, 3), nullable=False)


class RecurringTransactionRecord(Base):
    """Recurring transaction rule"""

    __tablename__ = "recurring_transaction"

    id = Column(String(64), primary_key=True)
    type = Column(String(16), nullable=False)
    category = Column(Text, nullable=False)
    amount = Column(Money, nullable=False)
    merchant = Column(Text, nullable=False)
    memo = Column(Text, nullable=False, default="")
    pattern = Column(String(16), nullable=False)
    day_of_month = Column(Integer, nullable=True)
    day_of_week = Column(Integer, nullable=True)
    weekend_handling = Column(String(24), nullable=False)
    payment_method = Column(String(16), nullable=True)
    income_type = Column(String(16), nullable=True)
    instrument_id = Column(String(64), nullable=True)
    instrument_name = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    last_executed_date = Column(Date, nullable=True)
