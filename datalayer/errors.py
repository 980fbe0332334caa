from __future__ import annotations

# datalayer/errors.py
from typing import Optional


class DataLayerError(Exception):
    """Base class for every error raised by datalayer."""


class NotConfigured(DataLayerError):
    """Generator used before its shape and table name were set."""


class EmptyShape(NotConfigured):
    """A record shape with no usable columns was handed to the generator."""


class MissingPrimaryKey(DataLayerError):
    """A key-filtered statement was requested on a shape without a primary key."""


class InvalidShape(DataLayerError, ValueError):
    """The record shape itself is malformed (duplicate names, bad identifiers, ...)."""


class ParameterTypeError(DataLayerError, TypeError):
    """A row value does not match the declared type of its field."""


class MissingColumn(DataLayerError, KeyError):
    """A row handed to map_parameters lacks a column the shape declares."""

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0]) if self.args else ""


class QueryFailed(DataLayerError):
    """
    Any executor or catalog failure: bad SQL, closed connection, driver error.
    Carries the operation name and, when known, the table and SQL involved.
    """

    def __init__(self, operation: str, message: str, table: Optional[str] = None, sql: Optional[str] = None):
        self.operation = operation
        self.table = table
        self.sql = sql
        ctx = operation if not table else f"{operation}[{table}]"
        super().__init__(f"{ctx}: {message}")
