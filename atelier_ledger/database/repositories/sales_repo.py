from __future__ import annotations
from dataclasses import dataclass
from datetime import date as _date
from enum import Enum
import sqlite3
from typing import Optional

from ..errors import NotFoundError, ValidationError, storage_errors
from ..schema import table_columns
from ...constants import TABLE_SALES
from ...utils.dates import parse_any


class SaleStatus(str, Enum):
    """Lifecycle of a sale. Declaration order is the only legal direction."""

    CREATED = "CREATED"
    READY = "READY"
    PAID = "PAID"
    DELIVERED = "DELIVERED"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)

    @property
    def is_terminal(self) -> bool:
        return self is SaleStatus.DELIVERED

    @classmethod
    def parse(cls, value, default: Optional["SaleStatus"] = None) -> "SaleStatus":
        """
        Map stored or typed text onto a status.

        Older app versions wrote 'feita'/'FEITA'/'pronta'/'paga'/'entregue'.
        Blank or unknown text returns `default`, or raises ValidationError
        when no default is given.
        """
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().upper()
        found = _STATUS_ALIASES.get(key)
        if found is not None:
            return found
        if default is not None:
            return default
        raise ValidationError(f"Unknown sale status: {value!r}")


_STATUS_ORDER = list(SaleStatus)

_STATUS_LABELS = {
    SaleStatus.CREATED: "feita",
    SaleStatus.READY: "pronta",
    SaleStatus.PAID: "paga",
    SaleStatus.DELIVERED: "entregue",
}

_STATUS_ALIASES = {s.value: s for s in SaleStatus}
_STATUS_ALIASES.update({label.upper(): s for s, label in _STATUS_LABELS.items()})


class SaleType(str, Enum):
    LASER = "LASER"
    THREE_D = "THREE_D"
    OTHER = "OTHER"
    MIXED = "MIXED"

    @classmethod
    def parse(cls, value, default: Optional["SaleType"] = None) -> "SaleType":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().upper()
        found = _TYPE_ALIASES.get(key)
        if found is not None:
            return found
        if default is not None:
            return default
        raise ValidationError(f"Unknown sale type: {value!r}")


_TYPE_ALIASES = {t.value: t for t in SaleType}
_TYPE_ALIASES.update({"3D": SaleType.THREE_D, "OUTRO": SaleType.OTHER, "MISTO": SaleType.MIXED})


@dataclass
class Sale:
    sale_id: int | None
    date: str
    description: str
    sale_type: SaleType
    gross_value: float
    cost: float
    profit: float
    status: SaleStatus = SaleStatus.CREATED
    client: str | None = None

    @property
    def sale_date(self) -> _date | None:
        """Stored date text parsed from either encoding; None for broken rows."""
        return parse_any(self.date)


@dataclass
class SaleItem:
    item_id: int | None
    sale_id: int | None
    description: str
    item_type: SaleType
    value: float
    cost: float


class SalesRepo:
    """
    Sales + line items.

    Key behavior:
      - Reads tolerate databases where the migrated columns (status, client)
        could not be added: missing status reads as CREATED, missing client as None.
      - Writes here are raw and do not commit. Sale creation and status changes
        go through SaleLifecycle, which owns validation and the transaction.
    """

    def __init__(self, conn: sqlite3.Connection):
        # ensure rows behave like dicts/tuples
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ---------------------------------------------------------------------
    # SCHEMA CHECKS
    # ---------------------------------------------------------------------
    def _columns(self) -> set[str]:
        return table_columns(self.conn, TABLE_SALES)

    def has_status_column(self) -> bool:
        return "status" in self._columns()

    def _select_sql(self) -> str:
        cols = self._columns()
        status = "s.status" if "status" in cols else "NULL"
        client = "s.client" if "client" in cols else "NULL"
        return f"""
        SELECT s.sale_id, s.date, s.description, s.sale_type,
               CAST(s.gross_value AS REAL) AS gross_value,
               CAST(s.cost AS REAL)        AS cost,
               CAST(s.profit AS REAL)      AS profit,
               {status} AS status,
               {client} AS client
        FROM sales s
        """

    @staticmethod
    def _to_sale(r: sqlite3.Row) -> Sale:
        return Sale(
            sale_id=int(r["sale_id"]),
            date=r["date"] or "",
            description=r["description"] or "",
            sale_type=SaleType.parse(r["sale_type"], default=SaleType.OTHER),
            gross_value=float(r["gross_value"] or 0.0),
            cost=float(r["cost"] or 0.0),
            profit=float(r["profit"] or 0.0),
            status=SaleStatus.parse(r["status"], default=SaleStatus.CREATED),
            client=(r["client"].strip() or None) if r["client"] else None,
        )

    # ---------------------------------------------------------------------
    # READ
    # ---------------------------------------------------------------------
    def list_sales(
        self,
        status: SaleStatus | str | None = None,
        client: str | None = None,
    ) -> list[Sale]:
        """
        All sales, newest first (by id).

        `status` filters on the normalized status, so legacy spellings match.
        `client` is an exact match on the trimmed name.
        """
        rows = self.conn.execute(self._select_sql() + " ORDER BY s.sale_id DESC").fetchall()
        sales = [self._to_sale(r) for r in rows]
        if status is not None:
            wanted = SaleStatus.parse(status)
            sales = [s for s in sales if s.status is wanted]
        if client is not None:
            name = client.strip()
            sales = [s for s in sales if (s.client or "") == name]
        return sales

    def get(self, sale_id: int) -> Sale | None:
        r = self.conn.execute(
            self._select_sql() + " WHERE s.sale_id = ?", (sale_id,)
        ).fetchone()
        return self._to_sale(r) if r else None

    def list_items(self, sale_id: int) -> list[SaleItem]:
        rows = self.conn.execute(
            """
            SELECT item_id, sale_id, description, item_type,
                   CAST(value AS REAL) AS value, CAST(cost AS REAL) AS cost
            FROM sale_items
            WHERE sale_id = ?
            ORDER BY item_id
            """,
            (sale_id,),
        ).fetchall()
        return [
            SaleItem(
                item_id=int(r["item_id"]),
                sale_id=int(r["sale_id"]),
                description=r["description"],
                item_type=SaleType.parse(r["item_type"], default=SaleType.OTHER),
                value=float(r["value"]),
                cost=float(r["cost"]),
            )
            for r in rows
        ]

    def count_items(self, sale_id: int) -> int:
        row = self.conn.execute(
            "SELECT COUNT(*) FROM sale_items WHERE sale_id = ?", (sale_id,)
        ).fetchone()
        return int(row[0])

    # ---------------------------------------------------------------------
    # INTERNAL WRITES (no commit; caller owns the transaction)
    # ---------------------------------------------------------------------
    def _insert_header(self, h: Sale) -> int:
        cols = self._columns()
        names = ["date", "description", "sale_type", "gross_value", "cost", "profit"]
        values: list = [h.date, h.description, h.sale_type.value, h.gross_value, h.cost, h.profit]
        if "status" in cols:
            names.append("status")
            values.append(h.status.value)
        if "client" in cols:
            names.append("client")
            values.append(h.client)
        placeholders = ",".join("?" for _ in names)
        cur = self.conn.execute(
            f"INSERT INTO sales ({', '.join(names)}) VALUES ({placeholders})",
            values,
        )
        return int(cur.lastrowid)

    def _insert_item(self, it: SaleItem) -> int:
        cur = self.conn.execute(
            """
            INSERT INTO sale_items (sale_id, description, item_type, value, cost)
            VALUES (?,?,?,?,?)
            """,
            (it.sale_id, it.description, it.item_type.value, it.value, it.cost),
        )
        return int(cur.lastrowid)

    def _set_status(self, sale_id: int, status: SaleStatus) -> int:
        cur = self.conn.execute(
            "UPDATE sales SET status = ? WHERE sale_id = ?", (status.value, sale_id)
        )
        return cur.rowcount

    # ---------------------------------------------------------------------
    # DELETE
    # ---------------------------------------------------------------------
    def delete(self, sale_id: int) -> None:
        """Remove a sale; its items go with it (ON DELETE CASCADE)."""
        with storage_errors("delete the sale"), self.conn:
            cur = self.conn.execute("DELETE FROM sales WHERE sale_id = ?", (sale_id,))
        if cur.rowcount == 0:
            raise NotFoundError(f"Sale {sale_id} not found.")
