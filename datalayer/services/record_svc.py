from __future__ import annotations

# datalayer/services/record_svc.py
from typing import Any, Dict, List, Mapping, Optional

from ..database import SqliteDatabase
from ..domain.sql_generator import SqlGenerator, param_name
from ..domain.values import check_value
from ..errors import MissingPrimaryKey


class RecordStore:
    """Single-table CRUD: generator output fed straight into the executor."""

    def __init__(self, db: SqliteDatabase, shape: Any, table_name: str):
        self.db = db
        self.gen = SqlGenerator(shape, table_name)

    def all(self) -> List[Dict[str, Any]]:
        return self.db.execute_query(self.gen.generate_select()).to_dicts()

    def get(self, key: Any) -> Optional[Dict[str, Any]]:
        sql = self.gen.generate_select(filter_by_key=True)
        rows = self.db.execute_query(sql, self._key_params(key)).to_dicts()
        return rows[0] if rows else None

    def insert(self, row: Mapping[str, Any]) -> int:
        """Insert one row; returns the rowid SQLite assigned (the key for INTEGER PRIMARY KEY tables)."""
        self.db.execute_non_query(self.gen.generate_insert(), self.gen.map_parameters(row))
        return self.db.last_insert_rowid()

    def update(self, row: Mapping[str, Any]) -> int:
        return self.db.execute_non_query(self.gen.generate_update(), self.gen.map_parameters(row))

    def delete(self, key: Any) -> int:
        return self.db.execute_non_query(self.gen.generate_delete(), self._key_params(key))

    def _key_params(self, key: Any) -> Dict[str, Any]:
        pk = self.gen.primary_key
        if pk is None:
            raise MissingPrimaryKey(f"{self.gen.table_name}: shape has no primary key")
        return {param_name(pk.name): check_value(pk, key)}
