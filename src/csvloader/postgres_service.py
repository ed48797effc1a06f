"""PostgreSQL implementation of DatabaseService."""

import threading
from contextlib import contextmanager
from queue import Empty, Queue
from typing import Any, Iterator, Sequence

import psycopg2
import psycopg2.extras

from csvloader.errors import DatabaseConnectionError, DatabaseError
from csvloader.service import DatabaseService
from csvloader.types import ColumnSpec, Params

COLUMNS_QUERY = """
SELECT column_name, data_type, ordinal_position
FROM information_schema.columns
WHERE lower(table_name) = lower(%s)
  AND table_schema = current_schema()
ORDER BY ordinal_position
"""


class PostgresDatabaseService(DatabaseService):
    """PostgreSQL backend using psycopg2.

    Connections are pooled in a Queue. Each transaction() or session() call
    acquires a dedicated connection and returns it on exit.
    """

    placeholder = "%s"

    def __init__(self, dsn: str, pool_size: int = 4):
        self._dsn = dsn
        self._pool_size = pool_size
        self._pool: Queue = Queue(maxsize=pool_size)
        self._local = threading.local()

    def connect(self) -> None:
        for _ in range(self._pool_size):
            try:
                conn = psycopg2.connect(self._dsn)
            except psycopg2.Error as e:
                raise DatabaseConnectionError(f"Cannot connect to PostgreSQL: {e}") from e
            with conn.cursor() as cur:
                # aware datetimes bind as timestamptz; casts to timestamp use this zone
                cur.execute("SET TIME ZONE 'UTC'")
            conn.commit()
            conn.autocommit = False
            self._pool.put(conn)

    def close(self) -> None:
        while not self._pool.empty():
            try:
                conn = self._pool.get_nowait()
                conn.close()
            except Empty:
                break

    def _acquire(self):
        return self._pool.get(timeout=30)

    def _release(self, conn) -> None:
        self._pool.put(conn)

    def _get_conn(self):
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
        conn.autocommit = True
        self._local.conn = conn
        try:
            yield
        finally:
            self._local.conn = None
            try:
                conn.autocommit = False
            finally:
                self._release(conn)

    def execute(self, sql: str, params: Params | None = None) -> list[dict[str, Any]]:
        conn = self._get_conn()
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            cur.execute(sql, params or ())
            if cur.description is None:
                return []
            return [dict(row) for row in cur.fetchall()]

    def execute_ddl(self, sql: str) -> None:
        conn = self._acquire()
        try:
            with conn.cursor() as cur:
                for statement in sql.split(";"):
                    statement = statement.strip()
                    if statement:
                        cur.execute(statement)
            conn.commit()
        finally:
            self._release(conn)

    def insert_row(self, table: str, columns: Sequence[str], values: Sequence[Any]) -> None:
        sql = self.insert_sql(table, columns)
        try:
            with self._get_conn().cursor() as cur:
                cur.execute(sql, list(values))
        except psycopg2.Error as e:
            raise DatabaseError(f"Insert into {table} failed: {e}") from e

    def table_columns(self, table: str) -> list[ColumnSpec]:
        try:
            rows = self.execute(COLUMNS_QUERY, (table,))
        except psycopg2.Error as e:
            raise DatabaseError(f"Cannot read columns of {table}: {e}") from e
        return [
            ColumnSpec(
                name=row["column_name"],
                sql_type=row["data_type"].lower(),
                ordinal=row["ordinal_position"],
            )
            for row in rows
        ]
