"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidAmountError(DomainException):
    """Amount is zero or negative"""

    pass


class InvalidTransactionError(DomainException):
    """Transaction fields are inconsistent with its type"""

    pass


class InvalidPaydayError(DomainException):
    """Payday anchor is outside 1..31"""

    pass


class InvalidRecurringRuleError(DomainException):
    """Recurring rule has a missing or out-of-range day field"""

    pass


class InstrumentNotFoundError(DomainException):
    """Balance card or gift card does not exist"""

    pass


class InstrumentUnavailableError(DomainException):
    """Instrument is retired or has nothing left to spend"""

    pass
