# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - Every test gets its own SQLite file under tmp_path (schema applied
#   through get_connection, like the app does at start-up)
# - conn.row_factory = sqlite3.Row, PRAGMA foreign_keys=ON
# - Repositories are handed out as fixtures bound to that connection
# ---------------------------------------------------------------------

from __future__ import annotations

import sqlite3

import pytest

from atelier_ledger.database import get_connection
from atelier_ledger.database.repositories import (
    ClientsRepo,
    GoalsRepo,
    PurchasesRepo,
    QuoteBuilder,
    ReportingRepo,
    SaleLifecycle,
    SalesRepo,
    StoreProfileRepo,
)


@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "ledger.db"


@pytest.fixture()
def conn(db_path):
    con = get_connection(db_path)
    try:
        yield con
    finally:
        con.close()


@pytest.fixture()
def clients(conn: sqlite3.Connection) -> ClientsRepo:
    return ClientsRepo(conn)


@pytest.fixture()
def purchases(conn: sqlite3.Connection) -> PurchasesRepo:
    return PurchasesRepo(conn)


@pytest.fixture()
def goals(conn: sqlite3.Connection) -> GoalsRepo:
    return GoalsRepo(conn)


@pytest.fixture()
def store(conn: sqlite3.Connection) -> StoreProfileRepo:
    return StoreProfileRepo(conn)


@pytest.fixture()
def sales(conn: sqlite3.Connection) -> SalesRepo:
    return SalesRepo(conn)


@pytest.fixture()
def lifecycle(conn: sqlite3.Connection, sales: SalesRepo) -> SaleLifecycle:
    return SaleLifecycle(conn, sales)


@pytest.fixture()
def reports(conn: sqlite3.Connection) -> ReportingRepo:
    return ReportingRepo(conn)


@pytest.fixture()
def insert_legacy_sale(conn: sqlite3.Connection):
    """Write a sale row directly, the way older app versions stored them."""
    def _insert(date: str, value: float, cost: float = 0.0, status: str | None = "feita",
                client: str | None = None, description: str = "legacy") -> int:
        cur = conn.execute(
            "INSERT INTO sales(date, description, sale_type, gross_value, cost, profit, status, client) "
            "VALUES (?,?,?,?,?,?,COALESCE(?, 'CREATED'),?)",
            (date, description, "LASER", value, cost, value - cost, status, client),
        )
        conn.commit()
        return int(cur.lastrowid)
    return _insert


@pytest.fixture()
def quotes(conn: sqlite3.Connection, store: StoreProfileRepo) -> QuoteBuilder:
    return QuoteBuilder(conn, store)
