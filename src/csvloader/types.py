"""Shared types for the csvloader package."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

Params = tuple | list | dict


@dataclass(frozen=True)
class ColumnSpec:
    """A table column as reported by the database schema."""

    name: str
    sql_type: str
    ordinal: int


class ValueKind(str, Enum):
    """Tag carried by a coerced field."""

    NULL = "null"
    INTEGER = "integer"
    LONG = "long"
    DECIMAL = "decimal"
    FLOAT = "float"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    DATE = "date"
    TIMESTAMP = "timestamp"
    TEXT = "text"


@dataclass(frozen=True)
class TypedValue:
    """A field value ready to be bound to one statement parameter."""

    kind: ValueKind
    value: Any = None

    @classmethod
    def null(cls) -> "TypedValue":
        return cls(ValueKind.NULL, None)
