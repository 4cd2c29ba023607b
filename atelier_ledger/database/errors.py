# atelier_ledger/database/errors.py
"""
Error kinds raised by the data layer.

DomainError subclasses are raised before anything is written, so callers can
surface them directly (alert/toast) and retry with corrected input.
PersistenceError wraps a sqlite3 failure that happened after validation passed.
"""

from contextlib import contextmanager
import logging
import sqlite3

_log = logging.getLogger(__name__)


class LedgerError(Exception):
    pass


class DomainError(LedgerError):
    """Caller-facing business rule violation."""
    pass


class ValidationError(DomainError):
    pass


class NotFoundError(DomainError):
    pass


class TerminalStateViolation(DomainError):
    """Status change requested on a sale that is already delivered."""
    pass


class PersistenceError(LedgerError):
    pass


@contextmanager
def storage_errors(action: str):
    """
    Re-raise any sqlite3.Error from the block as PersistenceError.

        with storage_errors("save the purchase"), self.conn:
            cur = self.conn.execute(...)

    Put it before the connection so the transaction is rolled back first.
    """
    try:
        yield
    except sqlite3.Error as e:
        _log.error("Could not %s: %s", action, e)
        raise PersistenceError(f"Could not {action}: {e}") from e


__all__ = [
    "LedgerError",
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "TerminalStateViolation",
    "PersistenceError",
    "storage_errors",
]
