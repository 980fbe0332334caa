"""
Single-table statement generation from a record shape.

Every statement names its columns explicitly and binds each one through a
parameter called exactly like the column (@Name), so the output of
map_parameters() binds against any generated statement without translation.
Identifiers are quoted by quote_ident(); values never enter the SQL text.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, List, Mapping, Optional

from ..errors import EmptyShape, MissingColumn, MissingPrimaryKey, NotConfigured
from .shapes import FieldDescriptor, describe, primary_key_of
from .values import check_value

logger = logging.getLogger(__name__)

PARAM_PREFIX = "@"


def quote_ident(name: str) -> str:
    """Quote a table/column identifier for SQLite; embedded double quotes are doubled."""
    if not name or not str(name).strip():
        raise NotConfigured("identifier must not be empty")
    return '"' + str(name).replace('"', '""') + '"'


def param_name(name: str) -> str:
    return f"{PARAM_PREFIX}{name}"


class SqlGenerator:
    """
    Build SELECT/INSERT/UPDATE/DELETE text for one table and map rows to parameters.

    Both set_shape() and set_table_name() must be called before any generate_*()
    or map_parameters() call.
    """

    def __init__(self, shape: Any = None, table_name: Optional[str] = None):
        self._fields: Optional[List[FieldDescriptor]] = None
        self._key: Optional[FieldDescriptor] = None
        self._table: Optional[str] = None
        if shape is not None:
            self.set_shape(shape)
        if table_name is not None:
            self.set_table_name(table_name)

    def set_shape(self, shape: Any):
        fields = describe(shape)
        if not fields:
            raise EmptyShape(f"record shape {shape!r} has no fields")
        self._fields = fields
        self._key = primary_key_of(fields)

    def set_table_name(self, name: str):
        if not isinstance(name, str) or not name.strip():
            raise NotConfigured("table name cannot be empty")
        self._table = name

    @property
    def fields(self) -> List[FieldDescriptor]:
        self._ensure_ready()
        return list(self._fields)

    @property
    def primary_key(self) -> Optional[FieldDescriptor]:
        self._ensure_ready()
        return self._key

    @property
    def table_name(self) -> Optional[str]:
        return self._table

    def generate_select(self, filter_by_key: bool = False) -> str:
        self._ensure_ready()
        columns = ", ".join(quote_ident(f.name) for f in self._fields)
        sql = f"SELECT {columns} FROM {quote_ident(self._table)}"
        if filter_by_key:
            sql += self._where_key("SELECT")
        logger.debug("generated select: %s", sql)
        return sql

    def generate_insert(self) -> str:
        self._ensure_ready()
        columns = ", ".join(quote_ident(f.name) for f in self._fields)
        params = ", ".join(param_name(f.name) for f in self._fields)
        sql = f"INSERT INTO {quote_ident(self._table)} ({columns}) VALUES ({params})"
        logger.debug("generated insert: %s", sql)
        return sql

    def generate_update(self) -> str:
        self._ensure_ready()
        where = self._where_key("UPDATE")
        settable = [f for f in self._fields if not f.is_primary_key]
        if not settable:
            raise EmptyShape(f"{self._table}: no non-key columns to update")
        set_clause = ", ".join(f"{quote_ident(f.name)} = {param_name(f.name)}" for f in settable)
        sql = f"UPDATE {quote_ident(self._table)} SET {set_clause}{where}"
        logger.debug("generated update: %s", sql)
        return sql

    def generate_delete(self) -> str:
        self._ensure_ready()
        sql = f"DELETE FROM {quote_ident(self._table)}{self._where_key('DELETE')}"
        logger.debug("generated delete: %s", sql)
        return sql

    def map_parameters(self, row: Mapping[str, Any]) -> "OrderedDict[str, Any]":
        """
        Read every field of the shape out of `row` (keyed by column name) and
        return {"@name": value} in field order. Values are type-checked, not
        converted.
        """
        self._ensure_ready()
        keys = _row_keys(row)
        out: "OrderedDict[str, Any]" = OrderedDict()
        for f in self._fields:
            if f.name not in keys:
                raise MissingColumn(f"{self._table}: row has no column {f.name!r}")
            out[param_name(f.name)] = check_value(f, row[f.name])
        return out

    def _where_key(self, statement: str) -> str:
        if self._key is None:
            raise MissingPrimaryKey(f"{statement} on {self._table} needs a primary key field")
        return f" WHERE {quote_ident(self._key.name)} = {param_name(self._key.name)}"

    def _ensure_ready(self):
        if self._fields is None or self._table is None:
            raise NotConfigured("both shape and table name must be set before generating SQL")


def _row_keys(row: Mapping[str, Any]) -> set:
    # sqlite3.Row supports keys() but not `in` on column names
    return set(row.keys())
