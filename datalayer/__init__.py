"""Embedded SQLite data-access layer.

Shape-driven statement generation (SqlGenerator) and catalog introspection
(SchemaIntrospector) on top of a thin executor (SqliteDatabase).
"""
from __future__ import annotations

__version__ = "0.1.0"

from .database import QueryResult, SqliteDatabase
from .domain.shapes import FieldDescriptor, FieldType, RecordShape, describe
from .domain.sql_generator import SqlGenerator, quote_ident
from .domain.values import SqlValue, ValueKind
from .errors import (
    DataLayerError,
    EmptyShape,
    InvalidShape,
    MissingColumn,
    MissingPrimaryKey,
    NotConfigured,
    ParameterTypeError,
    QueryFailed,
)
from .models import ColumnAttributes, Entity, Relationship
from .services.introspection_svc import SchemaIntrospector
from .services.record_svc import RecordStore

__all__ = [
    "ColumnAttributes",
    "DataLayerError",
    "EmptyShape",
    "Entity",
    "FieldDescriptor",
    "FieldType",
    "InvalidShape",
    "MissingColumn",
    "MissingPrimaryKey",
    "NotConfigured",
    "ParameterTypeError",
    "QueryFailed",
    "QueryResult",
    "RecordShape",
    "RecordStore",
    "Relationship",
    "SchemaIntrospector",
    "SqlGenerator",
    "SqlValue",
    "SqliteDatabase",
    "ValueKind",
    "describe",
    "quote_ident",
]
