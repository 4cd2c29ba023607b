from __future__ import annotations

"""
Repository for purchases (supplies, freight, fixed costs and other expenses).

Schema reference (see `database/schema.py`):

CREATE TABLE purchases (
    purchase_id INTEGER PRIMARY KEY AUTOINCREMENT,
    date        TEXT NOT NULL,
    description TEXT NOT NULL,
    category    TEXT NOT NULL,
    supplier    TEXT,
    value       REAL NOT NULL CHECK (value > 0),
    notes       TEXT
);

New rows store ISO dates. Rows written by older app versions may carry
'DD/MM/YYYY', so date-range filtering is done after parsing each row rather
than with SQL comparisons.
"""

from dataclasses import dataclass
from datetime import date as _date
from enum import Enum
import logging
import sqlite3
from typing import List, Optional

from ..errors import NotFoundError, ValidationError, storage_errors
from ...utils.dates import in_range, parse_any, to_iso
from ...utils.helpers import clean_text, today_str
from ...utils.validators import non_empty, try_parse_amount

_log = logging.getLogger(__name__)


class PurchaseCategory(str, Enum):
    SUPPLIES = "SUPPLIES"
    FREIGHT = "FREIGHT"
    FIXED = "FIXED"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value, default: Optional["PurchaseCategory"] = None) -> "PurchaseCategory":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().upper()
        found = _CATEGORY_ALIASES.get(key)
        if found is not None:
            return found
        if default is not None:
            return default
        raise ValidationError(f"Unknown purchase category: {value!r}")


_CATEGORY_ALIASES = {c.value: c for c in PurchaseCategory}
_CATEGORY_ALIASES.update({
    "INSUMO": PurchaseCategory.SUPPLIES,
    "FRETE": PurchaseCategory.FREIGHT,
    "FIXO": PurchaseCategory.FIXED,
    "OUTRO": PurchaseCategory.OTHER,
})


@dataclass
class Purchase:
    purchase_id: int | None
    date: str
    description: str
    category: PurchaseCategory
    supplier: str | None
    value: float
    notes: str | None

    @property
    def purchase_date(self) -> _date | None:
        return parse_any(self.date)


class PurchasesRepo:
    """
    CRUD for purchases. Writes commit immediately; SQLite failures surface
    as PersistenceError.
    """

    _SELECT = """
        SELECT purchase_id, date, description, category, supplier,
               CAST(value AS REAL) AS value, notes
        FROM purchases
    """

    def __init__(self, conn: sqlite3.Connection):
        # ensure rows behave like dicts/tuples
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validated(date, description, value, category) -> tuple:
        if not non_empty(description):
            raise ValidationError("Description cannot be empty.")
        ok, amount = try_parse_amount(value)
        if not ok or amount is None or amount <= 0:
            raise ValidationError("Value must be greater than zero.")
        try:
            iso_date = to_iso(date if date is not None else today_str())
        except ValueError as e:
            raise ValidationError(f"Invalid purchase date: {date!r}") from e
        cat = PurchaseCategory.parse(category)
        return iso_date, description.strip(), amount, cat

    @staticmethod
    def _to_purchase(r: sqlite3.Row) -> Purchase:
        return Purchase(
            purchase_id=int(r["purchase_id"]),
            date=r["date"] or "",
            description=r["description"],
            category=PurchaseCategory.parse(r["category"], default=PurchaseCategory.OTHER),
            supplier=r["supplier"],
            value=float(r["value"] or 0.0),
            notes=r["notes"],
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_purchases(
        self,
        date_from: Optional[_date] = None,
        date_to: Optional[_date] = None,
        category: PurchaseCategory | str | None = None,
    ) -> List[Purchase]:
        """
        Purchases newest first (by id).

        date_from/date_to are inclusive calendar days; either encoding is
        accepted. Rows whose stored date cannot be parsed are left out of
        date-filtered listings.
        """
        rows = self.conn.execute(self._SELECT + " ORDER BY purchase_id DESC").fetchall()
        purchases = [self._to_purchase(r) for r in rows]

        if date_from is not None or date_to is not None:
            start = parse_any(date_from) if date_from is not None else _date.min
            end = parse_any(date_to) if date_to is not None else _date.max
            if start is None or end is None:
                raise ValidationError("Invalid date range.")
            kept = []
            for p in purchases:
                if parse_any(p.date) is None:
                    _log.debug("Purchase %s skipped: unparseable date %r", p.purchase_id, p.date)
                    continue
                if in_range(p.date, start, end):
                    kept.append(p)
            purchases = kept

        if category is not None:
            cat = PurchaseCategory.parse(category)
            purchases = [p for p in purchases if p.category is cat]
        return purchases

    def get(self, purchase_id: int) -> Purchase | None:
        r = self.conn.execute(
            self._SELECT + " WHERE purchase_id = ?", (purchase_id,)
        ).fetchone()
        return self._to_purchase(r) if r else None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(
        self,
        date,
        description: str,
        value,
        category: PurchaseCategory | str = PurchaseCategory.OTHER,
        supplier: str | None = None,
        notes: str | None = None,
    ) -> int:
        """
        Insert a purchase. `date=None` means today.
        Returns the new purchase_id.
        """
        iso_date, desc_n, amount, cat = self._validated(date, description, value, category)
        with storage_errors("save the purchase"), self.conn:
            cur = self.conn.execute(
                """
                INSERT INTO purchases(date, description, category, supplier, value, notes)
                VALUES (?,?,?,?,?,?)
                """,
                (iso_date, desc_n, cat.value, clean_text(supplier), amount, clean_text(notes)),
            )
        return int(cur.lastrowid)

    def update(
        self,
        purchase_id: int,
        date,
        description: str,
        value,
        category: PurchaseCategory | str = PurchaseCategory.OTHER,
        supplier: str | None = None,
        notes: str | None = None,
    ) -> None:
        """Same validation rules as `create`."""
        iso_date, desc_n, amount, cat = self._validated(date, description, value, category)
        with storage_errors("update the purchase"), self.conn:
            cur = self.conn.execute(
                """
                UPDATE purchases
                SET date = ?, description = ?, category = ?, supplier = ?, value = ?, notes = ?
                WHERE purchase_id = ?
                """,
                (iso_date, desc_n, cat.value, clean_text(supplier), amount, clean_text(notes), purchase_id),
            )
        if cur.rowcount == 0:
            raise NotFoundError(f"Purchase {purchase_id} not found.")

    def delete(self, purchase_id: int) -> None:
        with storage_errors("delete the purchase"), self.conn:
            cur = self.conn.execute(
                "DELETE FROM purchases WHERE purchase_id = ?", (purchase_id,)
            )
        if cur.rowcount == 0:
            raise NotFoundError(f"Purchase {purchase_id} not found.")
