from datetime import date

import pytest

from atelier_ledger.database.errors import ValidationError
from atelier_ledger.database.repositories import QuoteItem

TODAY = date(2025, 3, 28)


def test_total_is_quantity_times_unit_value(quotes):
    q = quotes.build(
        " Ana ",
        [
            {"description": "Chaveiro MDF", "quantity": 10, "unit_value": "3,50"},
            QuoteItem("Caixa 3D", 2, 45.0),
            {"description": "Gravação", "quantity": "1,5", "value": 20},
        ],
        client_contact="  ",
        today=TODAY,
    )
    assert q.client_name == "Ana"
    assert q.client_contact is None
    assert [it.line_total for it in q.items] == [35.0, 90.0, 30.0]
    assert q.total == pytest.approx(155.0)


def test_validity_defaults_to_seven_days(quotes):
    q = quotes.build("Ana", [QuoteItem("x", 1, 10)], today=TODAY)
    assert q.issued_on == TODAY
    assert q.validity_days == 7
    assert q.valid_until == date(2025, 4, 4)


@pytest.mark.parametrize("raw, days", [("15", 15), (3, 3), ("", 7), ("abc", 7), ("0", 7), (-2, 7), (None, 7)])
def test_validity_days_input(quotes, raw, days):
    q = quotes.build("Ana", [QuoteItem("x", 1, 10)], validity_days=raw, today=date(2025, 12, 30))
    assert q.validity_days == days
    assert (q.valid_until - q.issued_on).days == days


@pytest.mark.parametrize("description, quantity, unit_value", [
    ("", 1, 10),
    ("x", 0, 10),
    ("x", -1, 10),
    ("x", 1, 0),
    ("x", 1, "abc"),
    ("x", 1, float("nan")),
])
def test_invalid_lines_are_rejected(quotes, description, quantity, unit_value):
    with pytest.raises(ValidationError, match="greater than zero"):
        quotes.make_item(description, quantity, unit_value)


def test_client_and_items_are_required(quotes):
    with pytest.raises(ValidationError, match="Client name"):
        quotes.build("  ", [QuoteItem("x", 1, 10)])
    with pytest.raises(ValidationError, match="at least one item"):
        quotes.build("Ana", [])


def test_header_comes_from_current_store_profile(quotes, store):
    placeholder = quotes.build("Ana", [QuoteItem("x", 1, 10)], today=TODAY).header
    assert placeholder.store_name == "Minha Loja de Personalizados"
    assert placeholder.logo_uri is None

    store.create("Ateliê Antigo", "old@example.com")
    store.create("Ateliê Luz", "WhatsApp: (11) 90000-0000", notes="Pix", logo_uri="file:///logo.png")
    header = quotes.build("Ana", [QuoteItem("x", 1, 10)], today=TODAY).header
    assert (header.store_name, header.store_contact) == ("Ateliê Luz", "WhatsApp: (11) 90000-0000")
    assert header.store_notes == "Pix"
    assert header.logo_uri == "file:///logo.png"


def test_building_a_quote_writes_nothing(conn, quotes):
    quotes.build("Ana", [QuoteItem("x", 2, 10)], today=TODAY)
    assert conn.execute("SELECT COUNT(*) FROM sales").fetchone()[0] == 0
    assert not conn.in_transaction
