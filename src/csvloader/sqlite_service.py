"""SQLite implementation of DatabaseService."""

import sqlite3
import threading
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from queue import Empty, Queue
from typing import Any, Iterator, Sequence

from csvloader.errors import DatabaseConnectionError, DatabaseError
from csvloader.service import DatabaseService
from csvloader.types import ColumnSpec, Params


def _adapt(value: Any) -> Any:
    """Convert a bound value to a type sqlite3 stores without global adapters."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return value


class SQLiteDatabaseService(DatabaseService):
    """SQLite backend using stdlib sqlite3.

    Connections are pooled in a Queue. Each transaction() or session() call
    acquires a dedicated connection and returns it on exit.
    """

    def __init__(self, db_path: str, pool_size: int = 4):
        self._db_path = db_path
        self._pool_size = pool_size
        self._pool: Queue[sqlite3.Connection] = Queue(maxsize=pool_size)
        self._local = threading.local()

    def connect(self) -> None:
        for _ in range(self._pool_size):
            try:
                conn = sqlite3.connect(self._db_path, check_same_thread=False)
            except sqlite3.Error as e:
                raise DatabaseConnectionError(
                    f"Cannot open SQLite database {self._db_path}: {e}"
                ) from e
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA foreign_keys=ON")
            self._pool.put(conn)

    def close(self) -> None:
        while not self._pool.empty():
            try:
                conn = self._pool.get_nowait()
                conn.close()
            except Empty:
                break

    def _acquire(self) -> sqlite3.Connection:
        return self._pool.get(timeout=30)

    def _release(self, conn: sqlite3.Connection) -> None:
        self._pool.put(conn)

    def _get_conn(self) -> sqlite3.Connection:
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            return conn
        raise RuntimeError(
            "No active connection. Wrap calls in a `with service.transaction():` "
            "or `with service.session():` block."
        )

    @contextmanager
    def transaction(self) -> Iterator[None]:
        conn = self._acquire()
        self._local.conn = conn
        try:
            yield
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._local.conn = None
            self._release(conn)

    @contextmanager
    def session(self) -> Iterator[None]:
        conn = self._acquire()
        previous = conn.isolation_level
        conn.isolation_level = None
        self._local.conn = conn
        try:
            yield
        finally:
            self._local.conn = None
            try:
                conn.isolation_level = previous
            finally:
                self._release(conn)

    def execute(self, sql: str, params: Params | None = None) -> list[dict[str, Any]]:
        conn = self._get_conn()
        cursor = conn.execute(sql, params or ())
        if cursor.description is None:
            return []
        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def execute_ddl(self, sql: str) -> None:
        conn = self._acquire()
        try:
            conn.executescript(sql)
            conn.commit()
        finally:
            self._release(conn)

    def insert_row(self, table: str, columns: Sequence[str], values: Sequence[Any]) -> None:
        sql = self.insert_sql(table, columns)
        try:
            self._get_conn().execute(sql, [_adapt(v) for v in values])
        except sqlite3.Error as e:
            raise DatabaseError(f"Insert into {table} failed: {e}") from e

    def table_columns(self, table: str) -> list[ColumnSpec]:
        try:
            rows = self.execute(
                "SELECT cid, name, type FROM pragma_table_info(?) ORDER BY cid",
                (table.lower(),),
            )
        except sqlite3.Error as e:
            raise DatabaseError(f"Cannot read columns of {table}: {e}") from e
        # cid is zero-based; ordinal positions start at 1 as in information_schema
        return [
            ColumnSpec(name=row["name"], sql_type=(row["type"] or "").lower(), ordinal=row["cid"] + 1)
            for row in rows
        ]
