# database/__init__.py
from __future__ import annotations

from pathlib import Path
import sqlite3

from ..config import MEMORY_DB, resolve_db_path
from ..utils.loggers import get_logger
from .schema import ensure_schema


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """
    Returns a sqlite3.Connection with:
      - WAL mode (file databases)
      - foreign_keys ON
      - row_factory = sqlite3.Row (so rows behave like dicts and tuples)
    Ensures the schema and additive migrations are applied idempotently.
    """
    get_logger()
    path = resolve_db_path(db_path)
    if path != MEMORY_DB:
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    if path != MEMORY_DB:
        conn.execute("PRAGMA journal_mode = WAL;")

    try:
        ensure_schema(conn)
    except Exception:
        conn.close()
        raise
    return conn


__all__ = [
    "get_connection",
    "ensure_schema",
]
