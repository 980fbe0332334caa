import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


SCHEMA = """
CREATE TABLE users (
  Id INTEGER PRIMARY KEY,
  Name TEXT NOT NULL,
  Address TEXT
);
CREATE TABLE orders (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  user_id INTEGER NOT NULL REFERENCES users(Id),
  total REAL,
  paid INTEGER NOT NULL DEFAULT 0,
  placed_at TEXT
);
CREATE TABLE order_lines (
  order_id INTEGER NOT NULL,
  line_no INTEGER NOT NULL,
  sku TEXT NOT NULL,
  PRIMARY KEY (order_id, line_no),
  FOREIGN KEY (order_id) REFERENCES orders(id)
);
CREATE TABLE shipments (
  id INTEGER PRIMARY KEY,
  order_id INTEGER,
  line_no INTEGER,
  FOREIGN KEY (order_id, line_no) REFERENCES order_lines(order_id, line_no)
);
"""

TABLES = ["shipments", "order_lines", "orders", "users"]


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "datalayer_test.db"
    # Point datalayer to this temp DB; never read a developer's config.yaml
    os.environ["DATALAYER_DB_PATH"] = str(path)
    os.environ["DATALAYER_CONFIG"] = str(path.parent / "no-config.yaml")
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(SCHEMA)
        conn.commit()
    finally:
        conn.close()
    return str(path)


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("DATALAYER_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    conn = sqlite3.connect(tmp_db_path)
    try:
        for t in TABLES:
            conn.execute(f"DELETE FROM {t}")
        conn.commit()
    finally:
        conn.close()
    yield


@pytest.fixture()
def db(tmp_db_path):
    from datalayer.database import SqliteDatabase
    database = SqliteDatabase(tmp_db_path)
    database.open()
    yield database
    database.close()


@pytest.fixture()
def client(tmp_db_path):
    from datalayer.api import app
    from fastapi.testclient import TestClient
    return TestClient(app)
