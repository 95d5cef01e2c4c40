"""Ledger halt handling for consistency failures.

A consistency failure means a bug or corrupted data. Posting for the tenant
stops until an operator investigates and calls :func:`resume_ledger`.
"""

import logging

from ledgerkit.database.base import Database
from ledgerkit.domain import errors

logger = logging.getLogger(__name__)


def ensure_posting_allowed(db: Database) -> None:
    """Raise ConsistencyError if posting is halted for the tenant."""
    halt = db.get_ledger_halt()
    if halt is not None:
        raise errors.ConsistencyError(errors.ledger_halted(halt.reason))


def report_inconsistency(db: Database, message: str) -> errors.ConsistencyError:
    """Log a consistency failure, halt posting and return the error to raise."""
    logger.critical("Ledger consistency failure for tenant %s: %s", db.tenant_id, message)
    db.halt_ledger(message)
    return errors.ConsistencyError(message)


def resume_ledger(db: Database) -> None:
    """Clear a halt after the underlying problem has been fixed."""
    halt = db.get_ledger_halt()
    if halt is None:
        return
    db.clear_ledger_halt()
    logger.warning("Posting resumed for tenant %s (was halted: %s)", db.tenant_id, halt.reason)
