"""Error taxonomy for the CSV loader."""


class LoaderError(Exception):
    """Base class for every error raised by csvloader."""


class ConfigError(LoaderError):
    """Configuration is missing, unreadable or invalid."""


class DatabaseConnectionError(LoaderError):
    """The database cannot be reached or the URL is not supported."""


class DatabaseError(LoaderError):
    """A statement failed inside the database driver."""


class SchemaError(LoaderError):
    """A table or column does not exist."""


class ParseError(LoaderError, ValueError):
    """Date/time text does not match the expected pattern."""


class CoercionError(LoaderError, ValueError):
    """A field cannot be converted to its column's type."""


class SourceError(LoaderError, OSError):
    """A source file or output location cannot be used."""


class FieldCountError(CoercionError, SourceError):
    """A data row has a different number of fields than the header."""

    def __init__(self, expected: int, actual: int, line_number: int | None = None):
        self.expected = expected
        self.actual = actual
        self.line_number = line_number
        where = f"Line {line_number}: row" if line_number is not None else "Row"
        super().__init__(f"{where} has {actual} columns, expected {expected}")
