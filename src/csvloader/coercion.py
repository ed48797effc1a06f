"""Conversion of raw CSV fields to typed statement parameters."""

import re
from decimal import Decimal, InvalidOperation
from typing import Callable, Sequence

from csvloader.datetimes import DateTimeCoercer
from csvloader.errors import CoercionError, FieldCountError, ParseError
from csvloader.types import ColumnSpec, TypedValue, ValueKind

INT32_RANGE = (-(2**31), 2**31 - 1)
INT64_RANGE = (-(2**63), 2**63 - 1)

_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")


def _contains(*needles: str) -> Callable[[str], bool]:
    def predicate(sql_type: str) -> bool:
        return any(needle in sql_type for needle in needles)

    return predicate


# Order matters: first match wins. "bigint" must be tested before the generic
# "int" substring, and "timestamp" before "date".
TYPE_RULES: list[tuple[Callable[[str], bool], ValueKind]] = [
    (_contains("bigint", "bigserial"), ValueKind.LONG),
    (_contains("int", "serial"), ValueKind.INTEGER),
    (_contains("decimal", "numeric"), ValueKind.DECIMAL),
    (_contains("double"), ValueKind.DOUBLE),
    (_contains("real", "float"), ValueKind.FLOAT),
    (_contains("boolean"), ValueKind.BOOLEAN),
    (_contains("timestamp"), ValueKind.TIMESTAMP),
    (_contains("date"), ValueKind.DATE),
]


def category_for(sql_type: str) -> ValueKind:
    """Map a SQL type name to the kind its fields coerce to."""
    lowered = sql_type.lower()
    for predicate, kind in TYPE_RULES:
        if predicate(lowered):
            return kind
    return ValueKind.TEXT


def is_null(text: str | None) -> bool:
    return text is None or text == "" or text.lower() == "null"


class RowCoercer:
    """Turns a raw row into TypedValues following each column's SQL type."""

    def __init__(self, datetimes: DateTimeCoercer):
        self._datetimes = datetimes
        self._converters: dict[ValueKind, Callable[[str, str], TypedValue]] = {
            ValueKind.LONG: self._to_long,
            ValueKind.INTEGER: self._to_integer,
            ValueKind.DECIMAL: self._to_decimal,
            ValueKind.DOUBLE: self._to_double,
            ValueKind.FLOAT: self._to_float,
            ValueKind.BOOLEAN: self._to_boolean,
            ValueKind.TIMESTAMP: self._to_timestamp,
            ValueKind.DATE: self._to_date,
            ValueKind.TEXT: self._to_text,
        }

    def coerce_row(self, row: Sequence[str], columns: Sequence[ColumnSpec]) -> list[TypedValue]:
        if len(row) != len(columns):
            raise FieldCountError(expected=len(columns), actual=len(row))
        return [self.coerce_value(text, column.sql_type) for text, column in zip(row, columns)]

    def coerce_value(self, text: str | None, sql_type: str) -> TypedValue:
        if text is not None:
            text = text.strip()
        if is_null(text):
            return TypedValue.null()
        kind = category_for(sql_type)
        return self._converters[kind](text, sql_type.lower())

    def _parse_int(self, text: str, sql_type: str, bounds: tuple[int, int]) -> int:
        if not _INTEGER_TEXT.fullmatch(text):
            raise CoercionError(f"Invalid number format for column type {sql_type}: {text}")
        value = int(text)
        low, high = bounds
        if not low <= value <= high:
            raise CoercionError(f"Value out of range for column type {sql_type}: {text}")
        return value

    def _to_long(self, text: str, sql_type: str) -> TypedValue:
        return TypedValue(ValueKind.LONG, self._parse_int(text, sql_type, INT64_RANGE))

    def _to_integer(self, text: str, sql_type: str) -> TypedValue:
        return TypedValue(ValueKind.INTEGER, self._parse_int(text, sql_type, INT32_RANGE))

    def _to_decimal(self, text: str, sql_type: str) -> TypedValue:
        try:
            if "_" in text:
                raise InvalidOperation(text)
            value = Decimal(text)
        except InvalidOperation as e:
            raise CoercionError(
                f"Invalid number format for column type {sql_type}: {text}"
            ) from e
        if not value.is_finite():
            raise CoercionError(f"Invalid number format for column type {sql_type}: {text}")
        return TypedValue(ValueKind.DECIMAL, value)

    def _parse_float(self, text: str, sql_type: str) -> float:
        try:
            if "_" in text:
                raise ValueError(text)
            return float(text)
        except ValueError as e:
            raise CoercionError(
                f"Invalid number format for column type {sql_type}: {text}"
            ) from e

    def _to_double(self, text: str, sql_type: str) -> TypedValue:
        return TypedValue(ValueKind.DOUBLE, self._parse_float(text, sql_type))

    def _to_float(self, text: str, sql_type: str) -> TypedValue:
        return TypedValue(ValueKind.FLOAT, self._parse_float(text, sql_type))

    def _to_boolean(self, text: str, sql_type: str) -> TypedValue:
        lowered = text.lower()
        if lowered not in ("true", "false"):
            raise CoercionError(f"Invalid boolean for column type {sql_type}: {text}")
        return TypedValue(ValueKind.BOOLEAN, lowered == "true")

    def _to_timestamp(self, text: str, sql_type: str) -> TypedValue:
        try:
            parsed = self._datetimes.parse_flexible(text)
        except ParseError as e:
            raise ParseError(
                f"Invalid timestamp format: {text}. Expected format: {self._datetimes.accepted_formats}"
            ) from e
        return TypedValue(ValueKind.TIMESTAMP, self._datetimes.to_instant(parsed))

    def _to_date(self, text: str, sql_type: str) -> TypedValue:
        try:
            parsed = self._datetimes.parse_flexible(text)
        except ParseError as e:
            raise ParseError(
                f"Invalid date format: {text}. Expected format: {self._datetimes.accepted_formats}"
            ) from e
        return TypedValue(ValueKind.DATE, self._datetimes.to_date_only(parsed))

    def _to_text(self, text: str, sql_type: str) -> TypedValue:
        return TypedValue(ValueKind.TEXT, text)
