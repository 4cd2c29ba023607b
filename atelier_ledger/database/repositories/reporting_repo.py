# atelier_ledger/database/repositories/reporting_repo.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
import logging
import math
import sqlite3
from typing import Optional

from ..errors import ValidationError
from ...utils.dates import month_bounds, parse_any
from .goals_repo import GoalsRepo
from .purchases_repo import Purchase, PurchaseCategory, PurchasesRepo
from .sales_repo import Sale, SalesRepo, SaleStatus

_log = logging.getLogger(__name__)

# Statuses whose money is already in hand.
RECEIVED_STATUSES = frozenset({SaleStatus.PAID, SaleStatus.DELIVERED})


@dataclass
class SalesSummary:
    count: int = 0
    total_revenue: float = 0.0
    total_cost: float = 0.0
    total_profit: float = 0.0
    received: float = 0.0
    outstanding: float = 0.0
    items: list[Sale] = field(default_factory=list)


@dataclass
class PurchasesSummary:
    count: int = 0
    total: float = 0.0
    by_category: dict[PurchaseCategory, float] = field(default_factory=dict)
    items: list[Purchase] = field(default_factory=list)


@dataclass
class GoalProgress:
    year: int
    month: int
    target: float
    achieved: float
    percent: float
    profit_target: float = 0.0
    profit_achieved: float = 0.0
    profit_percent: float = 0.0


@dataclass
class MonthOverview:
    year: int
    month: int
    sales_total: float
    purchases_total: float
    balance: float


def _percent(achieved: float, target: float) -> float:
    # Uncapped; clamping for progress bars is up to the caller.
    return achieved * 100.0 / target if target > 0 else 0.0


class ReportingRepo:
    """
    Read-only period summaries for the Reports and Goals screens.

    Notes on date handling:
      • Stored sale/purchase dates may be ISO ('YYYY-MM-DD') or local
        ('DD/MM/YYYY') depending on which app version wrote them, so rows are
        parsed one by one instead of compared as text in SQL.
      • Rows whose date does not parse are left out of every range-filtered
        result (logged at DEBUG).
      • Ranges are inclusive. date_to < date_from gives an empty result; the
        bounds are never swapped here.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.conn.row_factory = sqlite3.Row
        self.sales = SalesRepo(conn)
        self.purchases = PurchasesRepo(conn)
        self.goals = GoalsRepo(conn)

    # ----------------------------------------------------------------------
    # ------------------------------ HELPERS -------------------------------
    # ----------------------------------------------------------------------

    @staticmethod
    def _range(date_from, date_to) -> tuple[date, date]:
        start, end = parse_any(date_from), parse_any(date_to)
        if start is None or end is None:
            raise ValidationError(f"Invalid date range: {date_from!r} .. {date_to!r}")
        return start, end

    def _sales_in_range(self, start: date, end: date) -> list[Sale]:
        kept: list[Sale] = []
        for s in self.sales.list_sales():
            d = s.sale_date
            if d is None:
                _log.debug("Sale %s skipped: unparseable date %r", s.sale_id, s.date)
                continue
            if start <= d <= end:
                kept.append(s)
        return kept

    # ----------------------------------------------------------------------
    # -------------------------------- SALES -------------------------------
    # ----------------------------------------------------------------------

    def summarize_sales(self, date_from, date_to, client: Optional[str] = None) -> SalesSummary:
        """
        Totals for sales dated within [date_from, date_to], optionally for one
        client (exact name). Items come newest first: date DESC, then id DESC.
        """
        start, end = self._range(date_from, date_to)
        sales = self._sales_in_range(start, end)

        name = (client or "").strip()
        if name:
            sales = [s for s in sales if (s.client or "").strip() == name]

        sales.sort(key=lambda s: (s.sale_date, s.sale_id), reverse=True)

        received = math.fsum(s.gross_value for s in sales if s.status in RECEIVED_STATUSES)
        revenue = math.fsum(s.gross_value for s in sales)
        return SalesSummary(
            count=len(sales),
            total_revenue=revenue,
            total_cost=math.fsum(s.cost for s in sales),
            total_profit=math.fsum(s.profit for s in sales),
            received=received,
            outstanding=revenue - received,
            items=sales,
        )

    def status_counts(self) -> dict[SaleStatus, int]:
        """Number of sales per status (every status present, zero if none)."""
        counts = {s: 0 for s in SaleStatus}
        for sale in self.sales.list_sales():
            counts[sale.status] += 1
        return counts

    # ----------------------------------------------------------------------
    # ------------------------------ PURCHASES -----------------------------
    # ----------------------------------------------------------------------

    def summarize_purchases(
        self,
        date_from,
        date_to,
        category: PurchaseCategory | str | None = None,
    ) -> PurchasesSummary:
        start, end = self._range(date_from, date_to)
        rows = self.purchases.list_purchases(date_from=start, date_to=end, category=category)
        rows.sort(key=lambda p: (p.purchase_date, p.purchase_id), reverse=True)

        by_category: dict[PurchaseCategory, float] = {}
        for p in rows:
            by_category[p.category] = by_category.get(p.category, 0.0) + p.value
        return PurchasesSummary(
            count=len(rows),
            total=math.fsum(p.value for p in rows),
            by_category=by_category,
            items=rows,
        )

    # ----------------------------------------------------------------------
    # ------------------------------- GOALS --------------------------------
    # ----------------------------------------------------------------------

    def compute_goal_progress(self, year: int, month: int) -> GoalProgress:
        """
        achieved = gross value of the month's sales; percent = achieved/target*100
        (0 when there is no goal for that month).
        """
        goal = self.goals.get_for_period(year, month)
        first, last = month_bounds(year, month)
        sales = self._sales_in_range(first, last)

        target = goal.revenue_target if goal else 0.0
        profit_target = goal.profit_target if goal else 0.0
        achieved = math.fsum(s.gross_value for s in sales)
        profit = math.fsum(s.profit for s in sales)
        return GoalProgress(
            year=int(year),
            month=int(month),
            target=target,
            achieved=achieved,
            percent=_percent(achieved, target),
            profit_target=profit_target,
            profit_achieved=profit,
            profit_percent=_percent(profit, profit_target),
        )

    # ----------------------------------------------------------------------
    # ------------------------------- CASH ---------------------------------
    # ----------------------------------------------------------------------

    def net_cash_flow(self, date_from, date_to) -> float:
        """Profit on sales minus purchases for the period. Negative means a loss."""
        sales = self.summarize_sales(date_from, date_to)
        purchases = self.summarize_purchases(date_from, date_to)
        return sales.total_profit - purchases.total

    def month_overview(self, year: int, month: int) -> MonthOverview:
        """Gross sales vs purchases for one calendar month."""
        first, last = month_bounds(year, month)
        sales_total = self.summarize_sales(first, last).total_revenue
        purchases_total = self.summarize_purchases(first, last).total
        return MonthOverview(
            year=int(year),
            month=int(month),
            sales_total=sales_total,
            purchases_total=purchases_total,
            balance=sales_total - purchases_total,
        )
