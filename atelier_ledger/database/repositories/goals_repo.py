from __future__ import annotations
from dataclasses import dataclass
import sqlite3
from typing import Optional

from ..errors import NotFoundError, ValidationError, storage_errors
from ...utils.validators import is_valid_month, try_parse_amount


@dataclass
class Goal:
    goal_id: int | None
    year: int
    month: int
    revenue_target: float
    profit_target: float


class GoalsRepo:
    """Monthly revenue/profit targets, one row per (year, month)."""

    _SELECT = (
        "SELECT goal_id, year, month, "
        "CAST(revenue_target AS REAL) AS revenue_target, "
        "CAST(profit_target AS REAL) AS profit_target "
        "FROM goals"
    )

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    @staticmethod
    def _period(year, month) -> tuple[int, int]:
        if not is_valid_month(month):
            raise ValidationError("Month must be between 1 and 12.")
        try:
            return int(year), int(month)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid year: {year!r}") from e

    @staticmethod
    def _targets(revenue_target, profit_target) -> tuple[float, float]:
        ok_r, rev = try_parse_amount(revenue_target)
        ok_p, prof = try_parse_amount(profit_target)
        if not ok_r or not ok_p or rev is None or prof is None or rev <= 0 or prof <= 0:
            raise ValidationError("Revenue and profit targets must be greater than zero.")
        return rev, prof

    # ---- Queries ----------------------------------------------------------

    def list_goals(self, year: Optional[int] = None) -> list[Goal]:
        """Goals, most recent period first."""
        if year is not None:
            rows = self.conn.execute(
                self._SELECT + " WHERE year = ? ORDER BY year DESC, month DESC",
                (int(year),),
            ).fetchall()
        else:
            rows = self.conn.execute(
                self._SELECT + " ORDER BY year DESC, month DESC"
            ).fetchall()
        return [Goal(**dict(r)) for r in rows]

    def get(self, goal_id: int) -> Goal | None:
        r = self.conn.execute(self._SELECT + " WHERE goal_id = ?", (goal_id,)).fetchone()
        return Goal(**dict(r)) if r else None

    def get_for_period(self, year: int, month: int) -> Goal | None:
        y, m = self._period(year, month)
        r = self.conn.execute(
            self._SELECT + " WHERE year = ? AND month = ? ORDER BY goal_id DESC LIMIT 1",
            (y, m),
        ).fetchone()
        return Goal(**dict(r)) if r else None

    # ---- Mutations --------------------------------------------------------

    def create(self, year: int, month: int, revenue_target, profit_target) -> int:
        y, m = self._period(year, month)
        rev, prof = self._targets(revenue_target, profit_target)
        if self.get_for_period(y, m) is not None:
            raise ValidationError(f"A goal for {m:02d}/{y} already exists.")
        with storage_errors("save the goal"), self.conn:
            cur = self.conn.execute(
                "INSERT INTO goals(year, month, revenue_target, profit_target) VALUES (?,?,?,?)",
                (y, m, rev, prof),
            )
        return int(cur.lastrowid)

    def update(self, goal_id: int, revenue_target, profit_target) -> None:
        rev, prof = self._targets(revenue_target, profit_target)
        with storage_errors("update the goal"), self.conn:
            cur = self.conn.execute(
                "UPDATE goals SET revenue_target = ?, profit_target = ? WHERE goal_id = ?",
                (rev, prof, goal_id),
            )
        if cur.rowcount == 0:
            raise NotFoundError(f"Goal {goal_id} not found.")

    def upsert(self, year: int, month: int, revenue_target, profit_target) -> int:
        """Set the targets for a month, inserting the row if it does not exist yet."""
        y, m = self._period(year, month)
        rev, prof = self._targets(revenue_target, profit_target)
        existing = self.get_for_period(y, m)
        with storage_errors("save the goal"), self.conn:
            if existing is not None:
                self.conn.execute(
                    "UPDATE goals SET revenue_target = ?, profit_target = ? WHERE goal_id = ?",
                    (rev, prof, existing.goal_id),
                )
                return int(existing.goal_id)
            cur = self.conn.execute(
                "INSERT INTO goals(year, month, revenue_target, profit_target) VALUES (?,?,?,?)",
                (y, m, rev, prof),
            )
        return int(cur.lastrowid)

    def delete(self, goal_id: int) -> None:
        with storage_errors("delete the goal"), self.conn:
            cur = self.conn.execute("DELETE FROM goals WHERE goal_id = ?", (goal_id,))
        if cur.rowcount == 0:
            raise NotFoundError(f"Goal {goal_id} not found.")
