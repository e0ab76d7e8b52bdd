"""Entry point for the daily recurring-transaction trigger"""

import logging
from datetime import date
from typing import List

from sqlalchemy.orm import sessionmaker

from paycycle_ledger.config import settings
from paycycle_ledger.domain.models import RecurringTransaction
from paycycle_ledger.infrastructure.database.repositories import SqlLedgerRepository
from paycycle_ledger.infrastructure.database.session import create_session_factory, session_scope
from paycycle_ledger.infrastructure.observability.logging import setup_logging
from paycycle_ledger.services.scheduler import RecurringScheduler

logger = logging.getLogger(__name__)


def run_recurring_job(
    today: date | None = None,
    session_factory: sessionmaker | None = None,
    auto_execute: bool | None = None,
) -> List[RecurringTransaction]:
    """
    Fire today's recurring rules against the configured database.

    Safe to call from several triggers on the same day; rules already
    stamped for `today` are skipped. Notification delivery stays with the
    caller, which gets the fired rules back.
    """
    setup_logging(settings.log_level)
    today = today or date.today()
    session_factory = session_factory or create_session_factory()

    with session_scope(session_factory) as db:
        scheduler = RecurringScheduler(SqlLedgerRepository(db), auto_execute=auto_execute)
        fired = scheduler.run(today)

    logger.info(f"Recurring job finished: {len(fired)} rule(s) fired", extra={"day": today.isoformat()})
    return fired
