from __future__ import annotations

# datalayer/domain/values.py
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from ..errors import ParameterTypeError
from .shapes import FieldDescriptor, FieldType


class ValueKind(str, Enum):
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    DATETIME = "datetime"
    BLOB = "blob"
    NULL = "null"


@dataclass(frozen=True)
class SqlValue:
    """A bound parameter value together with its kind."""
    kind: ValueKind
    value: Any

    @classmethod
    def of(cls, value: Any) -> "SqlValue":
        if value is None:
            return cls(ValueKind.NULL, None)
        # bool before int
        if isinstance(value, bool):
            return cls(ValueKind.BOOL, value)
        if isinstance(value, int):
            return cls(ValueKind.INT, value)
        if isinstance(value, float):
            return cls(ValueKind.FLOAT, value)
        if isinstance(value, str):
            return cls(ValueKind.STRING, value)
        if isinstance(value, (datetime, date)):
            return cls(ValueKind.DATETIME, value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(ValueKind.BLOB, value)
        raise ParameterTypeError(f"unsupported parameter value {value!r} ({type(value).__name__})")


# value kinds each declared field type accepts besides NULL;
# SQLite hands back booleans as 0/1 and datetimes as ISO text
_ACCEPTS = {
    FieldType.STRING: {ValueKind.STRING},
    FieldType.INT: {ValueKind.INT},
    FieldType.FLOAT: {ValueKind.FLOAT, ValueKind.INT},
    FieldType.BOOL: {ValueKind.BOOL, ValueKind.INT},
    FieldType.DATETIME: {ValueKind.DATETIME, ValueKind.STRING},
    FieldType.BLOB: {ValueKind.BLOB},
}


def check_value(field: FieldDescriptor, value: Any) -> Any:
    """Type-check `value` against the field's declared type; returns it unchanged."""
    sv = SqlValue.of(value)
    if sv.kind is ValueKind.NULL:
        return value
    if sv.kind not in _ACCEPTS[field.declared_type]:
        raise ParameterTypeError(
            f"{field.name}: {sv.kind.value} value {value!r} does not match declared type {field.declared_type.value}"
        )
    if field.declared_type is FieldType.BOOL and sv.kind is ValueKind.INT and value not in (0, 1):
        raise ParameterTypeError(f"{field.name}: {value!r} is not a boolean")
    if field.declared_type is FieldType.DATETIME and sv.kind is ValueKind.STRING:
        _check_iso(field, value)
    return value


def _check_iso(field: FieldDescriptor, text: str):
    try:
        datetime.fromisoformat(text)
    except ValueError as e:
        raise ParameterTypeError(f"{field.name}: {text!r} is not an ISO-8601 date/time") from e
