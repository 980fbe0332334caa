from __future__ import annotations

# datalayer/db.py
import sqlite3
from contextlib import contextmanager
from typing import Iterator
import os

from .config import load_settings

# DB path resolution order:
# 1) env DATALAYER_DB_PATH (highest priority)
# 2) config.yaml test_db_path (when a test environment is detected)
# 3) config.yaml db_path (production default)
# 4) fallback: <project root>/datalayer.db
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "datalayer.db")


def get_db_path(_: str | None = None) -> str:
    env_path = os.environ.get("DATALAYER_DB_PATH")
    settings = load_settings()
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif is_test and settings.test_db_path:
        path = settings.test_db_path
    elif settings.db_path:
        path = settings.db_path
    else:
        path = _ROOT_DB

    if path != ":memory:":
        dirn = os.path.dirname(path) or "."
        os.makedirs(dirn, exist_ok=True)
    return path


def connect(db_path: str | None = None, foreign_keys: bool = True) -> sqlite3.Connection:
    """
    Open a raw SQLite connection with Row factory; foreign keys on unless disabled.
    Autocommit mode (isolation_level=None): every statement stands alone.
    """
    path = db_path or get_db_path()
    conn = sqlite3.connect(
        path,
        check_same_thread=False,
        isolation_level=None,
    )
    conn.row_factory = sqlite3.Row
    if foreign_keys:
        conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@contextmanager
def get_conn(db_path: str | None = None) -> Iterator[sqlite3.Connection]:
    """
    Short-lived connection for scripts and tests; always closed on exit.
    """
    conn = connect(db_path)
    try:
        yield conn
    finally:
        conn.close()
