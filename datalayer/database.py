"""
SQLite executor: one connection, one statement at a time.

    db = SqliteDatabase("app.db")
    db.open()
    db.execute_non_query("INSERT INTO t(a) VALUES (@a)", {"@a": 1})
    result = db.execute_query("SELECT * FROM t")
    db.close()

Parameter keys may carry the @, : or $ prefix or none at all. Every driver
error, and any call on a closed connection, surfaces as QueryFailed.
"""
from __future__ import annotations

import csv
import io
import logging
import sqlite3
from datetime import date, datetime
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

import pandas as pd

from .config import load_settings
from .db import connect, get_db_path
from .errors import QueryFailed

logger = logging.getLogger(__name__)

_PREFIXES = ("@", ":", "$")


class QueryResult:
    """Ordered columns and ordered rows; each row is addressable by column name."""

    def __init__(self, columns: Sequence[str], rows: Sequence[sqlite3.Row]):
        self.columns: List[str] = list(columns)
        self.rows: List[sqlite3.Row] = list(rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[sqlite3.Row]:
        return iter(self.rows)

    def __getitem__(self, i: int) -> sqlite3.Row:
        return self.rows[i]

    def is_empty(self) -> bool:
        return len(self.rows) == 0

    def column(self, name: str) -> List[Any]:
        return [r[name] for r in self.rows]

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [dict(r) for r in self.rows]

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([tuple(r) for r in self.rows], columns=self.columns)

    def to_csv(self, include_headers: bool = True) -> str:
        buf = io.StringIO()
        w = csv.writer(buf, lineterminator="\n")
        if include_headers:
            w.writerow(self.columns)
        for r in self.rows:
            w.writerow(["" if v is None else v for v in tuple(r)])
        return buf.getvalue()

    def dump(self, label: Optional[str] = None) -> str:
        """Boxed text rendering for consoles and debug output."""
        lines: List[str] = []
        if label:
            lines.append(label)
            lines.append("=" * len(label))
        if self.is_empty():
            lines.append("No data found.")
            return "\n".join(lines) + "\n"

        cells = [["" if v is None else str(v) for v in tuple(r)] for r in self.rows]
        widths = [len(c) for c in self.columns]
        for row in cells:
            for i, v in enumerate(row):
                widths[i] = max(widths[i], len(v))
        sep = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

        def fmt(values):
            return "".join(f"| {v.ljust(widths[i])} " for i, v in enumerate(values)) + "|"

        lines.append(sep)
        lines.append(fmt(self.columns))
        lines.append(sep)
        lines.extend(fmt(row) for row in cells)
        lines.append(sep)
        return "\n".join(lines) + "\n"


def _bind(parameters: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    if not parameters:
        return {}
    out: Dict[str, Any] = {}
    for k, v in parameters.items():
        name = k[1:] if k[:1] in _PREFIXES else k
        # sqlite3's default datetime adapters are deprecated; store ISO text
        if isinstance(v, (datetime, date)):
            v = v.isoformat(sep=" ") if isinstance(v, datetime) else v.isoformat()
        out[name] = v
    return out


class SqliteDatabase:
    def __init__(self, db_path: Optional[str] = None):
        self._db_path: Optional[str] = db_path
        self._conn: Optional[sqlite3.Connection] = None

    def setup(self, db_path: str):
        if self.is_open:
            raise QueryFailed("setup", "cannot change the database path while the connection is open")
        self._db_path = db_path

    @property
    def db_path(self) -> Optional[str]:
        return self._db_path

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self, enable_foreign_keys: Optional[bool] = None):
        if self._conn is not None:
            return
        if enable_foreign_keys is None:
            enable_foreign_keys = load_settings().foreign_keys
        path = self._db_path or get_db_path()
        try:
            self._conn = connect(path, foreign_keys=enable_foreign_keys)
        except sqlite3.Error as e:
            raise QueryFailed("open", str(e)) from e
        self._db_path = path
        logger.debug("opened %s (foreign_keys=%s)", path, enable_foreign_keys)

    def close(self):
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        conn.close()
        logger.debug("closed %s", self._db_path)

    def __enter__(self) -> "SqliteDatabase":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def execute_non_query(self, sql: str, parameters: Optional[Mapping[str, Any]] = None) -> int:
        cur = self._execute("execute_non_query", sql, parameters)
        try:
            return cur.rowcount
        finally:
            cur.close()

    def execute_scalar(self, sql: str, parameters: Optional[Mapping[str, Any]] = None) -> Any:
        cur = self._execute("execute_scalar", sql, parameters)
        try:
            row = cur.fetchone()
        except sqlite3.Error as e:
            raise QueryFailed("execute_scalar", str(e), sql=sql) from e
        finally:
            cur.close()
        return None if row is None else row[0]

    def execute_query(self, sql: str, parameters: Optional[Mapping[str, Any]] = None) -> QueryResult:
        cur = self._execute("execute_query", sql, parameters)
        try:
            rows = cur.fetchall()
            columns = [d[0] for d in cur.description] if cur.description else []
        except sqlite3.Error as e:
            raise QueryFailed("execute_query", str(e), sql=sql) from e
        finally:
            cur.close()
        return QueryResult(columns, rows)

    def last_insert_rowid(self) -> int:
        return int(self.execute_scalar("SELECT last_insert_rowid()"))

    def set_foreign_keys_enabled(self, enable: bool = True):
        self.execute_non_query(f"PRAGMA foreign_keys = {'ON' if enable else 'OFF'};")

    def are_foreign_keys_enabled(self) -> bool:
        return self.execute_scalar("PRAGMA foreign_keys;") == 1

    def _execute(self, operation: str, sql: str, parameters: Optional[Mapping[str, Any]]) -> sqlite3.Cursor:
        if self._conn is None:
            raise QueryFailed(operation, "the database connection is not open", sql=sql)
        try:
            return self._conn.execute(sql, _bind(parameters))
        except sqlite3.Error as e:
            raise QueryFailed(operation, str(e), sql=sql) from e
