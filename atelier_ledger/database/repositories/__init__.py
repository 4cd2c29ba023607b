# database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from atelier_ledger.database.repositories import (
        # Clients
        ClientsRepo, Client,
        # Purchases
        PurchasesRepo, Purchase, PurchaseCategory,
        # Goals
        GoalsRepo, Goal,
        # Store profile
        StoreProfileRepo, StoreProfile,
        # Sales
        SalesRepo, Sale, SaleItem, SaleStatus, SaleType,
        SaleLifecycle, NewSaleItem,
        # Quotes
        QuoteBuilder, Quote, QuoteItem, QuoteHeader,
        # Reporting
        ReportingRepo, SalesSummary, PurchasesSummary, GoalProgress, MonthOverview,
        # Errors
        DomainError, ValidationError, NotFoundError,
        TerminalStateViolation, PersistenceError,
    )
"""

# ----------------- Errors ------------------
from ..errors import (
    LedgerError,
    DomainError,
    ValidationError,
    NotFoundError,
    TerminalStateViolation,
    PersistenceError,
)

# ---------------- Clients ------------------
from .clients_repo import ClientsRepo, Client

# --------------- Purchases -----------------
from .purchases_repo import PurchasesRepo, Purchase, PurchaseCategory

# ---------------- Goals --------------------
from .goals_repo import GoalsRepo, Goal

# ------------- Store profile ---------------
from .store_profile_repo import StoreProfileRepo, StoreProfile

# ------------------ Sales ------------------
from .sales_repo import SalesRepo, Sale, SaleItem, SaleStatus, SaleType
from .sale_lifecycle import SaleLifecycle, NewSaleItem

# ------------------ Quotes -----------------
from .quote_builder import QuoteBuilder, Quote, QuoteItem, QuoteHeader

# ---------------- Reporting ----------------
from .reporting_repo import (
    ReportingRepo,
    SalesSummary,
    PurchasesSummary,
    GoalProgress,
    MonthOverview,
)

__all__ = [
    # errors
    "LedgerError",
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "TerminalStateViolation",
    "PersistenceError",
    # clients_repo
    "ClientsRepo",
    "Client",
    # purchases_repo
    "PurchasesRepo",
    "Purchase",
    "PurchaseCategory",
    # goals_repo
    "GoalsRepo",
    "Goal",
    # store_profile_repo
    "StoreProfileRepo",
    "StoreProfile",
    # sales
    "SalesRepo",
    "Sale",
    "SaleItem",
    "SaleStatus",
    "SaleType",
    "SaleLifecycle",
    "NewSaleItem",
    # quote_builder
    "QuoteBuilder",
    "Quote",
    "QuoteItem",
    "QuoteHeader",
    # reporting_repo
    "ReportingRepo",
    "SalesSummary",
    "PurchasesSummary",
    "GoalProgress",
    "MonthOverview",
]
