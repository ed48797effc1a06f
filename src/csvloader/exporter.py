"""Header-only CSV export of table schemas."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from csvloader.errors import DatabaseError, SourceError
from csvloader.schema import SchemaTypeResolver
from csvloader.service import DatabaseService

logger = logging.getLogger(__name__)

EXPORTED = "exported"
NOT_FOUND = "not_found"
FAILED = "failed"


@dataclass
class ExportOutcome:
    """Result of exporting one table."""

    table: str
    status: str
    path: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == EXPORTED


class ExportEngine:
    """Writes one ``<table>.csv`` per table containing only its column names.

    A missing table or a failed write only affects that table; the rest of
    the list is still exported.
    """

    def __init__(self, service: DatabaseService, delimiter: str = ","):
        self._service = service
        self._delimiter = delimiter
        self._resolver = SchemaTypeResolver(service)

    def export_headers(self, table_names: Iterable[str] | None, output_dir: str | Path) -> int:
        """Export the given tables and return how many files were written."""
        outcomes = self.export_tables(table_names, output_dir)
        return sum(1 for outcome in outcomes if outcome.ok)

    def export_tables(
        self, table_names: Iterable[str] | None, output_dir: str | Path
    ) -> list[ExportOutcome]:
        tables = [name.strip() for name in (table_names or []) if name and name.strip()]
        if not tables:
            logger.warning("No tables specified for export")
            return []

        output_dir = Path(output_dir)
        if not output_dir.is_dir():
            try:
                output_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise SourceError(f"Failed to create output directory: {output_dir}") from e
            logger.info("Created output directory: %s", output_dir)

        outcomes = []
        with self._service.session():
            for table in tables:
                outcome = self._export_one(table, output_dir)
                outcomes.append(outcome)

        exported = sum(1 for outcome in outcomes if outcome.ok)
        logger.info("Exported headers for %d of %d tables", exported, len(outcomes))
        return outcomes

    def _export_one(self, table: str, output_dir: Path) -> ExportOutcome:
        try:
            columns = self._resolver.column_names(table)
        except DatabaseError as e:
            logger.error("Failed to export headers for table '%s': %s", table, e)
            return ExportOutcome(table, FAILED, error=str(e))

        if not columns:
            logger.warning("No columns found for table '%s'. Table may not exist.", table)
            return ExportOutcome(table, NOT_FOUND, error=f"Table '{table}' not found or has no columns")

        path = output_dir / f"{table.lower()}.csv"
        header = self._delimiter.join(columns)
        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(header + "\n")
        except OSError as e:
            logger.error("Failed to export headers for table '%s': %s", table, e)
            return ExportOutcome(table, FAILED, path=path, error=str(e))

        logger.info("Exported headers for table: %s", table)
        logger.debug("Wrote %d columns to %s: %s", len(columns), path.name, header)
        return ExportOutcome(table, EXPORTED, path=path)
