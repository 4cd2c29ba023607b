from __future__ import annotations

import logging
from pathlib import Path
import sqlite3
import sys

from ..constants import (
    SCHEMA_VERSION,
    TABLE_SCHEMA_VERSION,
)
from .errors import PersistenceError

_log = logging.getLogger(__name__)

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== CORE TABLES ======================== */

/* -------- sales -------- */
/* status/client are also added by migration for DBs created before they existed */
CREATE TABLE IF NOT EXISTS sales (
    sale_id     INTEGER PRIMARY KEY AUTOINCREMENT,
    date        TEXT    NOT NULL,
    description TEXT    NOT NULL,
    sale_type   TEXT    NOT NULL,
    gross_value REAL    NOT NULL CHECK (gross_value >= 0),
    cost        REAL    NOT NULL CHECK (cost >= 0),
    profit      REAL    NOT NULL,
    status      TEXT    NOT NULL DEFAULT 'CREATED',
    client      TEXT
);

CREATE TABLE IF NOT EXISTS sale_items (
    item_id     INTEGER PRIMARY KEY AUTOINCREMENT,
    sale_id     INTEGER NOT NULL,
    description TEXT    NOT NULL,
    item_type   TEXT    NOT NULL,
    value       REAL    NOT NULL CHECK (value >= 0),
    cost        REAL    NOT NULL CHECK (cost >= 0),
    FOREIGN KEY (sale_id) REFERENCES sales(sale_id) ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS idx_sale_items_sale ON sale_items(sale_id);

/* -------- parties -------- */
/* sales point at clients by name only; no FK on purpose */
CREATE TABLE IF NOT EXISTS clients (
    client_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name      TEXT NOT NULL,
    phone     TEXT,
    notes     TEXT
);
CREATE INDEX IF NOT EXISTS idx_clients_name ON clients(name);

/* -------- purchases / expenses -------- */
CREATE TABLE IF NOT EXISTS purchases (
    purchase_id INTEGER PRIMARY KEY AUTOINCREMENT,
    date        TEXT NOT NULL,
    description TEXT NOT NULL,
    category    TEXT NOT NULL,
    supplier    TEXT,
    value       REAL NOT NULL CHECK (value > 0),
    notes       TEXT
);

/* -------- monthly goals -------- */
CREATE TABLE IF NOT EXISTS goals (
    goal_id        INTEGER PRIMARY KEY AUTOINCREMENT,
    year           INTEGER NOT NULL,
    month          INTEGER NOT NULL CHECK (month BETWEEN 1 AND 12),
    revenue_target REAL    NOT NULL CHECK (revenue_target > 0),
    profit_target  REAL    NOT NULL CHECK (profit_target > 0),
    UNIQUE (year, month)
);

/* -------- store profile (latest row is current) -------- */
CREATE TABLE IF NOT EXISTS store_profile (
    profile_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name       TEXT NOT NULL,
    contact    TEXT NOT NULL,
    notes      TEXT NOT NULL DEFAULT '',
    logo_uri   TEXT
);

CREATE TABLE IF NOT EXISTS schema_version (
    id      INTEGER PRIMARY KEY CHECK (id = 1),
    version TEXT NOT NULL
);
"""

# (table, column, column definition). Forward-only: columns are only ever added.
ADDITIVE_MIGRATIONS: tuple[tuple[str, str, str], ...] = (
    ("sales", "status", "TEXT NOT NULL DEFAULT 'CREATED'"),
    ("sales", "client", "TEXT"),
)


def table_columns(conn: sqlite3.Connection, table: str) -> set[str]:
    cur = conn.execute(f"PRAGMA table_info({table});")
    return {row[1] for row in cur.fetchall()}  # row[1] = name


def _is_duplicate_column(err: sqlite3.Error) -> bool:
    return "duplicate column" in str(err).lower()


def apply_additive_migrations(
    conn: sqlite3.Connection,
    migrations: tuple[tuple[str, str, str], ...] = ADDITIVE_MIGRATIONS,
) -> list[str]:
    """
    Add columns introduced after a table was first created.

    Each ALTER runs on its own. A "duplicate column" error means the column is
    already there and is ignored; any other error is logged and the remaining
    migrations still run, leaving that feature degraded.

    Returns the "table.column" names actually added.
    """
    added: list[str] = []
    for table, column, definition in migrations:
        try:
            conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {definition};")
        except sqlite3.OperationalError as e:
            if _is_duplicate_column(e):
                _log.debug("Column %s.%s already present", table, column)
            else:
                _log.warning("Could not add column %s.%s: %s", table, column, e)
            continue
        _log.info("Added column %s.%s", table, column)
        added.append(f"{table}.{column}")
    conn.commit()
    return added


def get_current_version(conn: sqlite3.Connection) -> str | None:
    row = conn.execute(
        f"SELECT version FROM {TABLE_SCHEMA_VERSION} WHERE id=1;"
    ).fetchone()
    return row[0] if row else None


def _set_current_version(conn: sqlite3.Connection, version: str) -> None:
    conn.execute(
        f"INSERT INTO {TABLE_SCHEMA_VERSION}(id, version) VALUES (1, ?) "
        "ON CONFLICT(id) DO UPDATE SET version = excluded.version;",
        (version,),
    )


def ensure_schema(conn: sqlite3.Connection) -> None:
    """
    Create missing tables and apply additive migrations. Safe to run on every start.

    Raises PersistenceError if the tables themselves cannot be created.
    """
    try:
        conn.executescript(SQL)
    except sqlite3.Error as e:
        _log.error("Schema creation failed: %s", e)
        raise PersistenceError(f"Could not create ledger tables: {e}") from e

    apply_additive_migrations(conn)

    previous = get_current_version(conn)
    if previous != SCHEMA_VERSION:
        _set_current_version(conn, SCHEMA_VERSION)
        _log.info("Schema version %s -> %s", previous, SCHEMA_VERSION)
    conn.commit()


def init_schema(db_path: Path | str = "ledger.db") -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        conn.execute("PRAGMA journal_mode=WAL;")
        ensure_schema(conn)
    finally:
        conn.close()
    _log.info("DB applied to %s", db_path)


if __name__ == "__main__":
    from ..config import resolve_db_path
    from ..utils.loggers import get_logger

    get_logger()
    target = sys.argv[1] if len(sys.argv) > 1 else resolve_db_path()
    init_schema(target)
