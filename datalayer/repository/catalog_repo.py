"""Catalog queries (SQLite).

SQLite has no INFORMATION_SCHEMA: tables come from sqlite_master, columns and
foreign keys from the table_info / foreign_key_list pragmas. Swapping engines
means rewriting these three functions only.
"""
from __future__ import annotations

from typing import List

from ..database import QueryResult, SqliteDatabase
from ..domain.sql_generator import quote_ident


def list_tables(db: SqliteDatabase) -> List[str]:
    """Table names in catalog order (no re-sorting)."""
    result = db.execute_query("SELECT name FROM sqlite_master WHERE type = 'table'")
    return [str(r["name"]) for r in result]


def list_columns(db: SqliteDatabase, table: str) -> QueryResult:
    """Rows: cid, name, type, notnull, dflt_value, pk."""
    return db.execute_query(f"PRAGMA table_info({quote_ident(table)})")


def list_foreign_keys(db: SqliteDatabase, table: str) -> QueryResult:
    """Rows: id, seq, table (referenced), from (local column), to, on_update, on_delete, match."""
    return db.execute_query(f"PRAGMA foreign_key_list({quote_ident(table)})")
