from datetime import datetime
import logging

from sqlalchemy.orm import sessionmaker

from ..crud import crud_invoice, crud_quote
from ..database import session_scope

logger = logging.getLogger(__name__)


def run_sweep(session_factory: sessionmaker, now: datetime) -> dict:
    """Expire stale quotes and flag overdue invoices.

    Returns the number of records changed per kind.
    """
    with session_scope(session_factory) as db:
        expired = crud_quote.expire_stale_quotes(db, now)
        overdue = crud_invoice.mark_overdue_invoices(db, now)
    if expired or overdue:
        logger.info("Maintenance sweep: expired %d quotes, %d invoices overdue", len(expired), len(overdue))
    return {"expiredQuotes": len(expired), "overdueInvoices": len(overdue)}
