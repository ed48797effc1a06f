"""Abstract DatabaseService interface."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, Sequence

from csvloader.types import ColumnSpec, Params


class DatabaseService(ABC):
    """Database-agnostic interface for the loader's DB operations.

    Design principles:
    - Stateless: no mutable state beyond the connection pool
    - Scoped: each transaction() or session() acquires its own connection
      and returns it on every exit path
    - DB-agnostic: engines program against this ABC, never a concrete backend
    """

    placeholder = "?"

    @abstractmethod
    def connect(self) -> None:
        """Initialize the connection pool."""

    @abstractmethod
    def close(self) -> None:
        """Close all connections and release resources."""

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Context manager: acquires a connection, commits on success, rolls back on error."""

    @abstractmethod
    @contextmanager
    def session(self) -> Iterator[None]:
        """Context manager: acquires a connection in autocommit mode.

        Every statement commits as it executes, so work done before a
        failure is kept.
        """

    @abstractmethod
    def execute(self, sql: str, params: Params | None = None) -> list[dict[str, Any]]:
        """Execute a single SQL statement and return rows as dicts."""

    @abstractmethod
    def execute_ddl(self, sql: str) -> None:
        """Execute DDL statements (CREATE TABLE, DROP TABLE, etc.)."""

    @abstractmethod
    def insert_row(self, table: str, columns: Sequence[str], values: Sequence[Any]) -> None:
        """Insert one row, binding values positionally."""

    @abstractmethod
    def table_columns(self, table: str) -> list[ColumnSpec]:
        """Columns of a table ordered by ordinal position.

        Table names compare case-insensitively. An unknown table gives an
        empty list.
        """

    def insert_sql(self, table: str, columns: Sequence[str]) -> str:
        cols = ", ".join(columns)
        placeholders = ", ".join(self.placeholder for _ in columns)
        return f"INSERT INTO {table} ({cols}) VALUES ({placeholders})"
