"""Row-by-row CSV import into an existing table.

Column types come from the table's own metadata, so one importer handles any
table whose columns match the CSV header. Each row is committed as it is
inserted: a failure aborts the rest of the file but keeps the rows already
written.
"""

import logging
from pathlib import Path
from typing import Iterable, Iterator

from csvloader.coercion import RowCoercer
from csvloader.config import LoaderConfig
from csvloader.datetimes import DateTimeCoercer
from csvloader.errors import FieldCountError, SourceError
from csvloader.schema import SchemaTypeResolver
from csvloader.service import DatabaseService

logger = logging.getLogger(__name__)


def table_name_for(path: str | Path) -> str:
    """employee.csv -> employee"""
    return Path(path).stem.lower()


def split_line(line: str, delimiter: str) -> list[str]:
    """Split on the literal delimiter, keeping trailing empty fields."""
    return [part.strip() for part in line.rstrip("\r\n").split(delimiter)]


class ImportEngine:
    """Imports delimited text into a table whose columns match the header."""

    def __init__(self, service: DatabaseService, config: LoaderConfig | None = None):
        config = config or LoaderConfig()
        self._service = service
        self._delimiter = config.delimiter
        self._datetimes = DateTimeCoercer(config.date_format)
        self._resolver = SchemaTypeResolver(service)
        self._coercer = RowCoercer(self._datetimes)
        logger.debug(
            "ImportEngine configured: delimiter=%r, date format=%s",
            self._delimiter,
            self._datetimes.pattern,
        )

    @property
    def date_pattern(self) -> str:
        return self._datetimes.pattern

    def import_file(self, path: str | Path) -> int:
        """Import a file into the table named after it.

        Returns the number of rows inserted.
        """
        path = Path(path)
        table = table_name_for(path)
        if not path.is_file():
            raise SourceError(f"CSV file not found: {path}")

        try:
            with open(path, newline="", encoding="utf-8-sig") as f:
                total = self.import_stream(f, table)
        except UnicodeDecodeError as e:
            raise SourceError(f"CSV file {path} is not valid UTF-8: {e}") from e
        logger.info("Imported %d rows from %s into %s", total, path.name, table)
        return total

    def import_stream(self, lines: Iterable[str], table: str) -> int:
        """Import an already opened line source into ``table``.

        The first line is the header. Returns the number of rows inserted.
        """
        numbered = enumerate(lines, start=1)
        header = next(numbered, None)
        if header is None:
            raise SourceError(f"CSV source for table {table} is empty")
        column_names = split_line(header[1], self._delimiter)

        with self._service.session():
            columns = self._resolver.resolve(table, column_names)
            names = [c.name for c in columns]
            total = 0
            for line_number, values in self._data_rows(numbered, len(column_names)):
                typed = self._coercer.coerce_row(values, columns)
                self._service.insert_row(table, names, [t.value for t in typed])
                total += 1
                logger.debug("Line %d inserted into %s", line_number, table)

        return total

    def _data_rows(
        self, numbered: Iterator[tuple[int, str]], expected: int
    ) -> Iterator[tuple[int, list[str]]]:
        for line_number, line in numbered:
            if not line.strip():
                continue
            values = split_line(line, self._delimiter)
            if len(values) != expected:
                raise FieldCountError(expected=expected, actual=len(values), line_number=line_number)
            yield line_number, values
