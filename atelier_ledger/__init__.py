"""
Embedded ledger for a small personalized-goods shop.

Entry point for callers:

    from atelier_ledger.database import get_connection
    from atelier_ledger.database.repositories import SaleLifecycle, ReportingRepo
"""

__version__ = "1.2.0"
