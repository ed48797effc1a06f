"""Date and timestamp parsing with a configurable pattern.

Values are timezone-aware ``datetime`` objects. Text without an offset is
placed in the default zone (UTC). Date-only text falls back to midnight UTC.
"""

import logging
import re
from datetime import date, datetime, timezone, tzinfo

from csvloader.errors import ParseError

logger = logging.getLogger(__name__)

DEFAULT_DATETIME_PATTERN = "%Y-%m-%dT%H:%M:%S.%f%z"
DATE_ONLY_PATTERN = "%Y-%m-%d"

# strptime accepts one-digit months, days and clock fields; these widths are exact.
_FIELD_SHAPES = {
    "Y": r"\d{4}",
    "m": r"\d{2}",
    "d": r"\d{2}",
    "H": r"\d{2}",
    "I": r"\d{2}",
    "M": r"\d{2}",
    "S": r"\d{2}",
    "y": r"\d{2}",
    "j": r"\d{3}",
    "f": r"(?:\d{3}|\d{6})",
    "z": r"(?:Z|[+-]\d{2}:?\d{2}(?::?\d{2})?)",
    "%": "%",
}


def shape_of(pattern: str) -> re.Pattern:
    """Regex that text must fully match before strptime sees it.

    Numeric fields get fixed widths. Other directives are left to strptime.
    """
    parts = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "%" and i + 1 < len(pattern):
            directive = pattern[i + 1]
            parts.append(_FIELD_SHAPES.get(directive, ".+?"))
            i += 2
        else:
            parts.append(re.escape(char))
            i += 1
    return re.compile("".join(parts))


_DATE_ONLY_SHAPE = shape_of(DATE_ONLY_PATTERN)


def _strict_parse(value: str, pattern: str, shape: re.Pattern) -> datetime:
    if not shape.fullmatch(value):
        raise ParseError(f"Text '{value}' does not match pattern {pattern}")
    try:
        return datetime.strptime(value, pattern)
    except ValueError as e:
        raise ParseError(f"Text '{value}' does not match pattern {pattern}: {e}") from e


class DateTimeCoercer:
    """Parses and formats date/time text against one configured pattern."""

    def __init__(self, pattern: str = DEFAULT_DATETIME_PATTERN, default_zone: tzinfo = timezone.utc):
        self._pattern = pattern
        self._default_zone = default_zone
        self._shape = shape_of(pattern)

    @property
    def pattern(self) -> str:
        return self._pattern

    @property
    def default_zone(self) -> tzinfo:
        return self._default_zone

    @property
    def accepted_formats(self) -> str:
        """Human-readable description of what parse_flexible accepts."""
        return f"{self._pattern} or {DATE_ONLY_PATTERN} (date-only, defaults to 00:00:00 UTC)"

    def parse_datetime(self, text: str | None) -> datetime | None:
        """Strict parse against the configured pattern.

        Returns None for blank input. Raises ParseError on any mismatch,
        including short fields such as a one-digit hour and out-of-range
        fields such as day 32.
        """
        if text is None or not text.strip():
            return None
        value = text.strip()
        parsed = _strict_parse(value, self._pattern, self._shape)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=self._default_zone)
        return parsed

    def parse_date_only(self, text: str | None) -> datetime | None:
        """Parse yyyy-mm-dd text to midnight UTC."""
        if text is None or not text.strip():
            return None
        value = text.strip()
        parsed = _strict_parse(value, DATE_ONLY_PATTERN, _DATE_ONLY_SHAPE)
        return parsed.replace(tzinfo=timezone.utc)

    def parse_flexible(self, text: str | None) -> datetime | None:
        """Try the configured pattern, then fall back to date-only."""
        if text is None or not text.strip():
            return None
        try:
            return self.parse_datetime(text)
        except ParseError:
            logger.debug("'%s' does not match %s, trying date-only", text, self._pattern)
        try:
            return self.parse_date_only(text)
        except ParseError as e:
            raise ParseError(
                f"Failed to parse '{text.strip()}' as {self._pattern} "
                f"or as {DATE_ONLY_PATTERN}"
            ) from e

    @staticmethod
    def to_date_only(value: datetime | None) -> date | None:
        """Calendar date of the value in its own zone."""
        if value is None:
            return None
        return value.date()

    @staticmethod
    def to_instant(value: datetime | None) -> datetime | None:
        """The value as an absolute instant, expressed in UTC."""
        if value is None:
            return None
        return value.astimezone(timezone.utc)

    def format(self, value: datetime | None) -> str | None:
        if value is None:
            return None
        return value.strftime(self._pattern)
