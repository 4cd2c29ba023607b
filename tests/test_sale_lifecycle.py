import sqlite3
from datetime import date

import pytest

from atelier_ledger.database.errors import (
    NotFoundError,
    PersistenceError,
    TerminalStateViolation,
    ValidationError,
)
from atelier_ledger.database.repositories import NewSaleItem, SaleStatus, SaleType


def _item(desc="Chaveiro", kind="LASER", value=30.0, cost=10.0):
    return {"description": desc, "type": kind, "value": value, "cost": cost}


@pytest.fixture()
def failing_items_trigger(conn):
    """Make any sale_items insert described 'BOOM' fail inside SQLite."""
    conn.execute(
        """
        CREATE TRIGGER trg_test_fail_item BEFORE INSERT ON sale_items
        WHEN NEW.description = 'BOOM'
        BEGIN
            SELECT RAISE(ABORT, 'simulated item failure');
        END;
        """
    )
    conn.commit()


# ---------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------

def test_single_item_sale_mirrors_the_item(lifecycle, sales):
    sid = lifecycle.create_sale(date(2025, 3, 10), [_item(value=300, cost=100)], client_name=" Ana ")
    s = sales.get(sid)
    assert s.date == "2025-03-10"
    assert s.description == "Chaveiro"
    assert s.sale_type is SaleType.LASER
    assert (s.gross_value, s.cost, s.profit) == (300.0, 100.0, 200.0)
    assert s.status is SaleStatus.CREATED
    assert s.client == "Ana"
    assert sales.count_items(sid) == 1


def test_multi_item_sale_is_mixed_with_summary_description(lifecycle, sales):
    items = [
        _item("Porta-retrato", "LASER", 80, 20),
        NewSaleItem("Miniatura", SaleType.THREE_D, "45,50", "12,25"),
        _item("Embalagem", "OUTRO", 0, 3),
    ]
    sid = lifecycle.create_sale("10/03/2025", items)
    s = sales.get(sid)
    assert s.description == "3 items (e.g., Porta-retrato)"
    assert s.sale_type is SaleType.MIXED
    assert s.gross_value == pytest.approx(125.5)
    assert s.cost == pytest.approx(35.25)
    assert s.profit == s.gross_value - s.cost
    assert s.client is None

    stored = sales.list_items(sid)
    assert [i.description for i in stored] == ["Porta-retrato", "Miniatura", "Embalagem"]
    assert [i.item_type for i in stored] == [SaleType.LASER, SaleType.THREE_D, SaleType.OTHER]


@pytest.mark.parametrize("values", [
    [(10, 2)],
    [(0.1, 0.2), (0.2, 0.1), (19.99, 7.77)],
    [(1234.56, 0), (0, 99.99)],
])
def test_profit_equals_gross_minus_cost(lifecycle, sales, values):
    items = [_item(f"i{n}", "LASER", v, c) for n, (v, c) in enumerate(values)]
    sid = lifecycle.create_sale("2025-01-01", items)
    s = sales.get(sid)
    assert s.profit == s.gross_value - s.cost
    assert sales.count_items(sid) == len(values)


@pytest.mark.parametrize("items, message", [
    ([], "at least one item"),
    ([_item(value=0, cost=0)], "greater than zero"),
    ([_item(value=-1)], "negative"),
    ([_item(cost=-1)], "negative"),
    ([_item(desc="  ")], "description"),
    ([_item(kind="WOOD")], "Unknown sale type"),
    ([_item(value="abc")], "valid amount"),
    ([_item(value=float("nan"))], "valid amount"),
    ([_item(cost=float("nan"))], "valid amount"),
    ([_item(value=float("inf"))], "valid amount"),
])
def test_invalid_items_write_nothing(conn, lifecycle, items, message):
    with pytest.raises(ValidationError, match=message):
        lifecycle.create_sale("2025-03-10", items)
    assert conn.execute("SELECT COUNT(*) FROM sales").fetchone()[0] == 0


def test_invalid_date_is_rejected(conn, lifecycle):
    with pytest.raises(ValidationError):
        lifecycle.create_sale("31/02/2025", [_item()])
    assert conn.execute("SELECT COUNT(*) FROM sales").fetchone()[0] == 0


def test_failed_item_insert_rolls_back_the_whole_sale(conn, lifecycle, sales, failing_items_trigger):
    keep = lifecycle.create_sale("2025-03-01", [_item()])
    with pytest.raises(PersistenceError):
        lifecycle.create_sale("2025-03-02", [_item("ok"), _item("BOOM")])

    assert [s.sale_id for s in sales.list_sales()] == [keep]
    assert conn.execute("SELECT COUNT(*) FROM sale_items").fetchone()[0] == 1

    # retrying after the failure is safe
    sid = lifecycle.create_sale("2025-03-02", [_item("ok"), _item("fine")])
    assert sales.count_items(sid) == 2


def test_rollback_is_visible_from_another_connection(db_path, conn, lifecycle, failing_items_trigger):
    with pytest.raises(PersistenceError):
        lifecycle.create_sale("2025-03-02", [_item("BOOM")])
    other = sqlite3.connect(db_path)
    try:
        assert other.execute("SELECT COUNT(*) FROM sales").fetchone()[0] == 0
    finally:
        other.close()


# ---------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------

def test_forward_steps_and_jumps(lifecycle, sales):
    a = lifecycle.create_sale("2025-03-01", [_item()])
    assert lifecycle.change_status(a, SaleStatus.READY) is SaleStatus.READY
    assert lifecycle.change_status(a, "paga") is SaleStatus.PAID
    assert sales.get(a).status is SaleStatus.PAID

    b = lifecycle.create_sale("2025-03-01", [_item()])
    assert lifecycle.change_status(b, "DELIVERED") is SaleStatus.DELIVERED
    assert sales.get(b).status is SaleStatus.DELIVERED


def test_same_or_earlier_status_is_a_noop(lifecycle, sales):
    sid = lifecycle.create_sale("2025-03-01", [_item()])
    lifecycle.change_status(sid, SaleStatus.PAID)
    assert lifecycle.change_status(sid, SaleStatus.PAID) is SaleStatus.PAID
    assert lifecycle.change_status(sid, SaleStatus.PAID) is SaleStatus.PAID
    assert lifecycle.change_status(sid, SaleStatus.READY) is SaleStatus.PAID
    assert lifecycle.change_status(sid, SaleStatus.CREATED) is SaleStatus.PAID
    assert sales.get(sid).status is SaleStatus.PAID


@pytest.mark.parametrize("target", list(SaleStatus))
def test_delivered_is_terminal(lifecycle, sales, target):
    sid = lifecycle.create_sale("2025-03-01", [_item()])
    lifecycle.change_status(sid, SaleStatus.DELIVERED)
    with pytest.raises(TerminalStateViolation):
        lifecycle.change_status(sid, target)
    assert sales.get(sid).status is SaleStatus.DELIVERED
    assert lifecycle.available_transitions(sid) == []


def test_legacy_status_spellings_are_understood(conn, lifecycle, insert_legacy_sale):
    feita = insert_legacy_sale("10/03/2025", 50, status="feita")
    entregue = insert_legacy_sale("10/03/2025", 50, status="entregue")
    assert lifecycle.status_of(feita) is SaleStatus.CREATED
    assert lifecycle.available_transitions(feita) == [SaleStatus.READY, SaleStatus.PAID, SaleStatus.DELIVERED]
    with pytest.raises(TerminalStateViolation):
        lifecycle.change_status(entregue, SaleStatus.PAID)
    stored = conn.execute("SELECT status FROM sales WHERE sale_id=?", (entregue,)).fetchone()[0]
    assert stored == "entregue"


def test_unknown_sale_and_unknown_status(lifecycle):
    with pytest.raises(NotFoundError):
        lifecycle.change_status(999, SaleStatus.READY)
    sid = lifecycle.create_sale("2025-03-01", [_item()])
    with pytest.raises(ValidationError):
        lifecycle.change_status(sid, "SHIPPED")


def test_list_sales_filters_and_delete_cascades(conn, lifecycle, sales):
    a = lifecycle.create_sale("2025-03-01", [_item()], "Ana")
    b = lifecycle.create_sale("2025-03-02", [_item(), _item("x")], "Bia")
    lifecycle.change_status(b, SaleStatus.READY)
    assert [s.sale_id for s in sales.list_sales()] == [b, a]
    assert [s.sale_id for s in sales.list_sales(status="pronta")] == [b]
    assert [s.sale_id for s in sales.list_sales(client=" Ana ")] == [a]

    sales.delete(b)
    assert sales.get(b) is None
    assert conn.execute("SELECT COUNT(*) FROM sale_items WHERE sale_id=?", (b,)).fetchone()[0] == 0
    with pytest.raises(NotFoundError):
        sales.delete(b)
