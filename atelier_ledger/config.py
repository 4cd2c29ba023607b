from __future__ import annotations

import logging
import os
from pathlib import Path

from .constants import DATA_DIR, DB_FILE_NAME, ENV_DB_PATH, ENV_LOG_LEVEL

BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = BASE_DIR.parent / DATA_DIR
DB_PATH = DATA_PATH / DB_FILE_NAME

MEMORY_DB = ":memory:"


def resolve_db_path(path: str | Path | None = None) -> str | Path:
    """
    Resolve the database location.

    Resolution order:
      1) explicit `path` argument
      2) environment variable ATELIER_LEDGER_DB
      3) <project>/data/ledger.db
    ":memory:" is passed through untouched.
    """
    if path is None:
        path = os.environ.get(ENV_DB_PATH) or DB_PATH
    if str(path) == MEMORY_DB:
        return MEMORY_DB
    return Path(path).expanduser()


def log_level() -> int:
    name = os.environ.get(ENV_LOG_LEVEL, "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO
