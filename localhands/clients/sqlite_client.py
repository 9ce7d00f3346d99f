import sqlite3
from contextlib import contextmanager
from sqlite3 import Connection
from typing import Iterable, Iterator, List, Sequence

_WRITE_PREFIXES = ("INSERT", "UPDATE", "DELETE", "REPLACE")


class SqliteClient:
    """SQLite database client with connection and transaction management."""

    def __init__(self, connection_string: str):
        self.connection_string = connection_string
        self._connection = sqlite3.connect(self.connection_string, check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self._connection.execute("PRAGMA foreign_keys = ON")
        self._in_transaction = False

    @property
    def connection(self) -> Connection:
        """Get the database connection."""
        return self._connection

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def execute_query(self, query: str, params=None) -> List[sqlite3.Row]:
        """Execute a query and return all results."""
        with self._cursor() as cursor:
            if params:
                cursor.execute(query, params)
            else:
                cursor.execute(query)
            self._commit_if_write(query)
            return cursor.fetchall()

    def execute_update(self, query: str, params=None) -> int:
        """Execute a write statement and return the number of affected rows."""
        with self._cursor() as cursor:
            cursor.execute(query, params or ())
            self._commit_if_write(query)
            return cursor.rowcount

    def execute_insert(self, query: str, params=None) -> int:
        """Execute an INSERT and return the rowid of the new row."""
        with self._cursor() as cursor:
            cursor.execute(query, params or ())
            self._commit_if_write(query)
            return cursor.lastrowid

    def execute_many(self, query: str, rows: Iterable[Sequence]) -> int:
        """Execute a write statement once per parameter row."""
        with self._cursor() as cursor:
            cursor.executemany(query, rows)
            self._commit_if_write(query)
            return cursor.rowcount

    @contextmanager
    def transaction(self) -> Iterator["SqliteClient"]:
        """Group several writes into one commit, rolling back on error.

        Nested calls join the outer transaction.
        """
        if self._in_transaction:
            yield self
            return

        self._in_transaction = True
        try:
            yield self
            self._connection.commit()
        except BaseException:
            self._connection.rollback()
            raise
        finally:
            self._in_transaction = False

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        cursor = self._connection.cursor()
        try:
            yield cursor
        except sqlite3.Error:
            # Outside transaction() a failed statement must not leave its implicit transaction open
            if not self._in_transaction:
                self._connection.rollback()
            raise
        finally:
            cursor.close()

    def _commit_if_write(self, query: str) -> None:
        # Commit for write operations, unless a transaction() block owns the commit
        if self._in_transaction:
            return
        if query.strip().upper().startswith(_WRITE_PREFIXES):
            self._connection.commit()

    def close(self):
        """Close the database connection."""
        self._connection.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit with cleanup."""
        self.close()
        return False
