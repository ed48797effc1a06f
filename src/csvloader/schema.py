"""Column type lookup against live table metadata."""

import logging
from typing import Sequence

from csvloader.errors import SchemaError
from csvloader.service import DatabaseService
from csvloader.types import ColumnSpec

logger = logging.getLogger(__name__)


class SchemaTypeResolver:
    """Resolves CSV header names to table columns.

    Metadata is read from the database on every call and never cached.
    Callers must be inside a ``service.session()`` or
    ``service.transaction()`` block.
    """

    def __init__(self, service: DatabaseService):
        self._service = service

    def list_columns(self, table: str) -> list[ColumnSpec]:
        """All columns of a table by ordinal position; [] when it does not exist."""
        columns = sorted(self._service.table_columns(table), key=lambda c: c.ordinal)
        logger.debug("Retrieved %d columns for table '%s'", len(columns), table)
        return columns

    def column_names(self, table: str) -> list[str]:
        return [c.name for c in self.list_columns(table)]

    def resolve(self, table: str, column_names: Sequence[str]) -> list[ColumnSpec]:
        """Return the spec of each requested column, in request order.

        Matching is case-insensitive. Raises SchemaError for an unknown
        table or for the first column the table does not have.
        """
        available = self.list_columns(table)
        if not available:
            raise SchemaError(f"Table not found: {table}")

        by_name = {c.name.lower(): c for c in available}
        resolved = []
        for name in column_names:
            spec = by_name.get(name.strip().lower())
            if spec is None:
                raise SchemaError(f"Column not found: {name} (table {table})")
            resolved.append(spec)

        logger.debug(
            "Resolved types for %s: %s",
            table,
            ", ".join(f"{c.name}={c.sql_type}" for c in resolved),
        )
        return resolved
