from __future__ import annotations

"""
Sale lifecycle: creation of a sale with its items, and status changes.

This is the only place that writes sales. Status moves forward along

    CREATED -> READY -> PAID -> DELIVERED

and may jump ahead several steps at once. Asking for the current status or an
earlier one is a successful no-op. DELIVERED is terminal: any request against
a delivered sale raises TerminalStateViolation and nothing is written.

Creation writes the sale row and every item row in one transaction; a failure
part way leaves no sale behind. Both writes own their transaction: the
connection must not have uncommitted changes when they start, otherwise
PersistenceError is raised and the pending changes are left alone.
"""

from dataclasses import dataclass
from datetime import date as _date
import logging
import sqlite3
from typing import Iterable, Mapping, Optional, Union

from ..errors import (
    NotFoundError,
    PersistenceError,
    TerminalStateViolation,
    ValidationError,
    storage_errors,
)
from ...utils.dates import to_iso
from ...utils.helpers import clean_text
from ...utils.validators import non_empty, try_parse_amount
from .sales_repo import Sale, SaleItem, SalesRepo, SaleStatus, SaleType

_log = logging.getLogger(__name__)


@dataclass
class NewSaleItem:
    """One priced line as entered on the sale form."""
    description: str
    item_type: SaleType | str
    value: float | str
    cost: float | str = 0.0


ItemInput = Union[NewSaleItem, Mapping[str, object]]


def summarize_description(descriptions: list[str]) -> str:
    if len(descriptions) == 1:
        return descriptions[0]
    return f"{len(descriptions)} items (e.g., {descriptions[0]})"


class SaleLifecycle:
    def __init__(self, conn: sqlite3.Connection, sales: Optional[SalesRepo] = None):
        self.conn = conn
        self.sales = sales or SalesRepo(conn)

    # ---- Validation -------------------------------------------------------

    @staticmethod
    def _amount(raw, label: str, n: int) -> float:
        ok, val = try_parse_amount(raw)
        if not ok or val is None:
            raise ValidationError(f"Item {n}: {label} is not a valid amount.")
        if val < 0:
            raise ValidationError(f"Item {n}: {label} cannot be negative.")
        return val

    def _coerce_item(self, raw: ItemInput, n: int) -> SaleItem:
        if isinstance(raw, NewSaleItem):
            desc, kind, value, cost = raw.description, raw.item_type, raw.value, raw.cost
        else:
            desc = raw.get("description")
            kind = raw.get("item_type", raw.get("type"))
            value = raw.get("value")
            cost = raw.get("cost", 0.0)

        if not non_empty(desc):
            raise ValidationError(f"Item {n}: description cannot be empty.")
        return SaleItem(
            item_id=None,
            sale_id=None,
            description=str(desc).strip(),
            item_type=SaleType.parse(kind),
            value=self._amount(value, "value", n),
            cost=self._amount(cost, "cost", n),
        )

    def _validate_items(self, items: Iterable[ItemInput]) -> list[SaleItem]:
        lines = [self._coerce_item(raw, n) for n, raw in enumerate(items or [], start=1)]
        if not lines:
            raise ValidationError("A sale needs at least one item.")
        if not any(it.value > 0 for it in lines):
            raise ValidationError("A sale needs at least one item with value greater than zero.")
        return lines

    def _require_idle_connection(self) -> None:
        # `with self.conn` would commit (or roll back) someone else's writes
        if self.conn.in_transaction:
            raise PersistenceError(
                "The connection has uncommitted changes; commit or roll them back first."
            )

    # ---- Creation ---------------------------------------------------------

    def build_sale(
        self,
        date: _date | str,
        items: Iterable[ItemInput],
        client_name: str | None = None,
    ) -> tuple[Sale, list[SaleItem]]:
        """Validate input and compute the sale header without writing anything."""
        try:
            iso_date = to_iso(date)
        except ValueError as e:
            raise ValidationError(f"Invalid sale date: {date!r}") from e

        lines = self._validate_items(items)
        gross = sum(it.value for it in lines)
        cost = sum(it.cost for it in lines)
        if len(lines) == 1:
            sale_type = lines[0].item_type
        else:
            sale_type = SaleType.MIXED

        header = Sale(
            sale_id=None,
            date=iso_date,
            description=summarize_description([it.description for it in lines]),
            sale_type=sale_type,
            gross_value=gross,
            cost=cost,
            profit=gross - cost,
            status=SaleStatus.CREATED,
            client=clean_text(client_name),
        )
        return header, lines

    def create_sale(
        self,
        date: _date | str,
        items: Iterable[ItemInput],
        client_name: str | None = None,
    ) -> int:
        """
        Record a sale and its items atomically. Returns the new sale_id.

        Raises ValidationError for bad input (nothing written) and
        PersistenceError when SQLite fails (everything rolled back).
        """
        header, lines = self.build_sale(date, items, client_name)
        self._require_idle_connection()

        with storage_errors("save the sale"), self.conn:
            sale_id = self.sales._insert_header(header)
            for it in lines:
                it.sale_id = sale_id
                it.item_id = self.sales._insert_item(it)

        _log.info(
            "Sale %s created: %d item(s), gross %.2f, profit %.2f",
            sale_id, len(lines), header.gross_value, header.profit,
        )
        return sale_id

    # ---- Status -----------------------------------------------------------

    def status_of(self, sale_id: int) -> SaleStatus:
        sale = self.sales.get(sale_id)
        if sale is None:
            raise NotFoundError(f"Sale {sale_id} not found.")
        return sale.status

    def available_transitions(self, sale_id: int) -> list[SaleStatus]:
        """Statuses a caller may offer for this sale (later ones only)."""
        current = self.status_of(sale_id)
        return [s for s in SaleStatus if s.rank > current.rank]

    def change_status(self, sale_id: int, target: SaleStatus | str) -> SaleStatus:
        """
        Move a sale forward to `target` and return the resulting status.

        Same or earlier targets leave the row untouched and return the current
        status. Delivered sales raise TerminalStateViolation.
        """
        wanted = SaleStatus.parse(target)
        current = self.status_of(sale_id)

        if current.is_terminal:
            raise TerminalStateViolation(
                f"Sale {sale_id} is already {current.label} and cannot be changed."
            )
        if wanted.rank <= current.rank:
            _log.debug("Sale %s: %s -> %s ignored", sale_id, current.value, wanted.value)
            return current

        if not self.sales.has_status_column():
            raise PersistenceError("Status tracking is unavailable: sales.status column missing.")

        self._require_idle_connection()
        with storage_errors(f"update the status of sale {sale_id}"), self.conn:
            self.sales._set_status(sale_id, wanted)

        _log.info("Sale %s: %s -> %s", sale_id, current.value, wanted.value)
        return wanted
