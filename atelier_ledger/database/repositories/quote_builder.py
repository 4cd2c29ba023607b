from __future__ import annotations

"""
Quotes (orçamentos) handed to a client before a sale exists.

A quote is computed, never stored: line items with quantity and unit value,
the client it is addressed to, an issue date and a validity date, and the
store header taken from the current store profile. Rendering it (PDF, share
sheet) belongs to the caller.
"""

from dataclasses import dataclass, field
from datetime import date as _date, timedelta
import logging
import math
import sqlite3
from typing import Iterable, Mapping, Optional, Union

from ..errors import ValidationError
from ...constants import (
    DEFAULT_QUOTE_VALIDITY_DAYS,
    DEFAULT_STORE_CONTACT,
    DEFAULT_STORE_NAME,
)
from ...utils.helpers import clean_text
from ...utils.validators import non_empty, try_parse_amount
from .store_profile_repo import StoreProfileRepo

_log = logging.getLogger(__name__)


@dataclass
class QuoteItem:
    description: str
    quantity: float
    unit_value: float

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_value


@dataclass
class QuoteHeader:
    store_name: str
    store_contact: str
    store_notes: str = ""
    logo_uri: str | None = None


@dataclass
class Quote:
    client_name: str
    client_contact: str | None
    issued_on: _date
    valid_until: _date
    validity_days: int
    header: QuoteHeader
    items: list[QuoteItem] = field(default_factory=list)

    @property
    def total(self) -> float:
        return math.fsum(it.line_total for it in self.items)


QuoteItemInput = Union[QuoteItem, Mapping[str, object]]


def validity_days_from(raw) -> int:
    """Days a quote stays valid; blank, unparseable or non-positive input gives the default."""
    try:
        days = int(str(raw).strip())
    except (TypeError, ValueError):
        return DEFAULT_QUOTE_VALIDITY_DAYS
    return days if days > 0 else DEFAULT_QUOTE_VALIDITY_DAYS


class QuoteBuilder:
    def __init__(self, conn: sqlite3.Connection, profiles: Optional[StoreProfileRepo] = None):
        self.conn = conn
        self.profiles = profiles or StoreProfileRepo(conn)

    @staticmethod
    def make_item(description, quantity, unit_value) -> QuoteItem:
        """
        One quote line. Description is required; quantity and unit value must
        both be greater than zero ("1,5" style input is accepted).
        """
        ok_q, qty = try_parse_amount(quantity)
        ok_v, value = try_parse_amount(unit_value)
        if not non_empty(description) or not ok_q or not ok_v or qty <= 0 or value <= 0:
            raise ValidationError(
                "Fill in description, quantity and a value greater than zero."
            )
        return QuoteItem(str(description).strip(), qty, value)

    def _coerce(self, raw: QuoteItemInput) -> QuoteItem:
        if isinstance(raw, QuoteItem):
            return self.make_item(raw.description, raw.quantity, raw.unit_value)
        return self.make_item(
            raw.get("description"),
            raw.get("quantity", 1),
            raw.get("unit_value", raw.get("value")),
        )

    def store_header(self) -> QuoteHeader:
        """Header from the current store profile, or the placeholder store when none is saved."""
        profile = self.profiles.get_current()
        if profile is None:
            return QuoteHeader(DEFAULT_STORE_NAME, DEFAULT_STORE_CONTACT)
        return QuoteHeader(profile.name, profile.contact, profile.notes or "", profile.logo_uri)

    def build(
        self,
        client_name: str,
        items: Iterable[QuoteItemInput],
        client_contact: str | None = None,
        validity_days=DEFAULT_QUOTE_VALIDITY_DAYS,
        today: _date | None = None,
    ) -> Quote:
        name = clean_text(client_name)
        if name is None:
            raise ValidationError("Client name is required.")
        lines = [self._coerce(raw) for raw in (items or [])]
        if not lines:
            raise ValidationError("A quote needs at least one item.")

        days = validity_days_from(validity_days)
        issued = today or _date.today()
        quote = Quote(
            client_name=name,
            client_contact=clean_text(client_contact),
            issued_on=issued,
            valid_until=issued + timedelta(days=days),
            validity_days=days,
            header=self.store_header(),
            items=lines,
        )
        _log.debug("Quote for %s: %d item(s), total %.2f", name, len(lines), quote.total)
        return quote
