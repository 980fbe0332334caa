"""
Record shapes: the ordered, typed field list that drives statement generation.

A shape is declared once, up front, in one of three ways:

    RecordShape("User").field("Id", FieldType.INT, primary_key=True).field("Name", FieldType.STRING)

    @dataclass
    class User:
        Id: int = field(metadata={"primary_key": True})
        Name: str = ""

    class User(BaseModel):
        Id: int = Field(json_schema_extra={"primary_key": True})
        Name: str

describe() turns any of them into a list of FieldDescriptor in declaration order.
"""
from __future__ import annotations

import dataclasses
import re
import types
import typing
from datetime import date, datetime
from enum import Enum
from functools import lru_cache
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel

from ..errors import InvalidShape

PRIMARY_KEY = "primary_key"

# field names double as bound parameter names (@Name), so keep them plain
_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class FieldType(str, Enum):
    STRING = "string"
    INT = "int"
    BOOL = "bool"
    FLOAT = "float"
    DATETIME = "datetime"
    BLOB = "blob"


# bool before int: bool is an int subclass
_PY_TYPES: Tuple[Tuple[type, FieldType], ...] = (
    (bool, FieldType.BOOL),
    (int, FieldType.INT),
    (float, FieldType.FLOAT),
    (str, FieldType.STRING),
    (datetime, FieldType.DATETIME),
    (date, FieldType.DATETIME),
    (bytes, FieldType.BLOB),
    (bytearray, FieldType.BLOB),
)


@dataclasses.dataclass(frozen=True)
class FieldDescriptor:
    name: str
    declared_type: FieldType
    is_primary_key: bool = False


class RecordShape:
    """Explicit field list, built field by field."""

    def __init__(self, name: str = "", fields: Optional[List[FieldDescriptor]] = None):
        self.name = name
        self._fields: List[FieldDescriptor] = []
        for f in fields or []:
            self._add(f)

    def field(self, name: str, declared_type: FieldType | str, primary_key: bool = False) -> "RecordShape":
        self._add(FieldDescriptor(name, FieldType(declared_type), bool(primary_key)))
        return self

    def _add(self, f: FieldDescriptor):
        candidate = self._fields + [f]
        _validate(candidate, self.name or "RecordShape")
        self._fields = candidate

    @property
    def fields(self) -> List[FieldDescriptor]:
        return list(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"RecordShape({self.name!r}, {[f.name for f in self._fields]})"


def describe(shape: Any) -> List[FieldDescriptor]:
    """Ordered field descriptors of a RecordShape, dataclass type or pydantic model type."""
    if isinstance(shape, RecordShape):
        return shape.fields
    if isinstance(shape, type):
        return list(_describe_class(shape))
    raise InvalidShape(f"cannot describe {shape!r}: expected RecordShape, dataclass or pydantic model")


def primary_key_of(fields: List[FieldDescriptor]) -> Optional[FieldDescriptor]:
    for f in fields:
        if f.is_primary_key:
            return f
    return None


@lru_cache(maxsize=None)
def _describe_class(cls: type) -> Tuple[FieldDescriptor, ...]:
    if dataclasses.is_dataclass(cls):
        hints = typing.get_type_hints(cls)
        out = [
            FieldDescriptor(f.name, _field_type(cls, f.name, hints.get(f.name, f.type)),
                            bool(f.metadata.get(PRIMARY_KEY, False)))
            for f in dataclasses.fields(cls)
        ]
    elif issubclass(cls, BaseModel):
        out = []
        for name, info in cls.model_fields.items():
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            out.append(FieldDescriptor(name, _field_type(cls, name, info.annotation),
                                       bool(extra.get(PRIMARY_KEY, False))))
    else:
        raise InvalidShape(f"{cls.__name__}: not a dataclass or pydantic model")
    _validate(out, cls.__name__)
    return tuple(out)


def _field_type(owner: type, name: str, annotation: Any) -> FieldType:
    ann = _unwrap_optional(annotation)
    if isinstance(ann, type):
        for py_type, ft in _PY_TYPES:
            if issubclass(ann, py_type):
                return ft
    raise InvalidShape(f"{owner.__name__}.{name}: unsupported field type {annotation!r}")


def _unwrap_optional(annotation: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _validate(fields: List[FieldDescriptor], owner: str):
    seen = set()
    keys = 0
    for f in fields:
        if not _IDENT_RE.match(f.name or ""):
            raise InvalidShape(f"{owner}: field name {f.name!r} is not a plain identifier")
        if f.name.lower() in seen:
            raise InvalidShape(f"{owner}: duplicate field {f.name!r}")
        seen.add(f.name.lower())
        if f.is_primary_key:
            keys += 1
    if keys > 1:
        raise InvalidShape(f"{owner}: more than one primary key field")
