"""CLI entry point for CSV import and header export.

Usage:
    python -m scripts.run_loader --config loader.properties [--db-url sqlite:///data.db] \
        [--files employee.csv department.csv] [--continue-on-error]

Exit status: 0 on success, 1 on a configuration error, 2 on a file problem,
3 on a database problem, 4 on any other failure. With --continue-on-error the
first failure decides the status.
"""

import argparse
import logging
import sys

from csvloader import (
    DatabaseConnectionError,
    DatabaseError,
    ExportEngine,
    ImportEngine,
    LoaderConfig,
    LoaderError,
    SchemaError,
    SourceError,
    create_service,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

EXIT_CONFIG = 1
EXIT_IO = 2
EXIT_DATABASE = 3
EXIT_OTHER = 4


def exit_code_for(error: LoaderError) -> int:
    if isinstance(error, SourceError):
        return EXIT_IO
    if isinstance(error, (DatabaseConnectionError, DatabaseError, SchemaError)):
        return EXIT_DATABASE
    return EXIT_OTHER


def main() -> None:
    parser = argparse.ArgumentParser(description="Import CSV files into existing tables")
    parser.add_argument("--config", required=True, help="Path to the properties file")
    parser.add_argument("--db-url", help="Database URL (overrides db.url)")
    parser.add_argument("--files", nargs="+", help="CSV files to import (overrides csv.files)")
    parser.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Keep importing the remaining files after a failure",
    )
    args = parser.parse_args()

    try:
        config = LoaderConfig.from_properties(args.config)
    except LoaderError as e:
        logger.error("%s", e)
        sys.exit(EXIT_CONFIG)

    db_url = args.db_url or config.db_url
    if not db_url:
        logger.error("No database URL. Set db.url or pass --db-url.")
        sys.exit(EXIT_CONFIG)

    files = args.files or config.csv_files
    status = 0

    try:
        service = create_service(db_url)
        service.connect()
    except LoaderError as e:
        logger.error("%s", e)
        sys.exit(exit_code_for(e))

    try:
        importer = ImportEngine(service, config)
        logger.info("Date format configured as: %s", importer.date_pattern)
        for name in files:
            try:
                total = importer.import_file(config.csv_dir / name)
                logger.info("Successfully imported %d rows from %s", total, name)
            except LoaderError as e:
                status = status or exit_code_for(e)
                logger.error("Import of %s failed: %s", name, e)
                if not args.continue_on_error:
                    break

        if config.export_enabled:
            exporter = ExportEngine(service, config.delimiter)
            try:
                exporter.export_headers(config.export_tables, config.export_output_dir)
            except LoaderError as e:
                status = status or exit_code_for(e)
                logger.error("Export failed: %s", e)
    finally:
        service.close()

    if status:
        sys.exit(status)
    logger.info("Done.")


if __name__ == "__main__":
    main()
