"""SQLite migration backend."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from .base import MigrationBackend


class SQLiteBackend(MigrationBackend):
    """
    SQLite backend.

    Uses the built-in sqlite3 module. Suitable for:
    - Development and testing
    - Embedded single-file databases

    The connection is opened in autocommit mode (``isolation_level=None``)
    and transactions are issued explicitly, because the sqlite3 module's
    implicit transaction handling does not cover DDL and
    ``executescript()`` commits any open transaction first. Migration
    files are therefore split into complete statements and executed one at
    a time inside the explicit transaction.

    SQLite keeps the declared column type verbatim, so ``VARCHAR``,
    ``TEXT`` and ``CLOB`` all count as string columns.
    """

    name = "sqlite"
    string_type_markers = ("char", "text", "clob")
    placeholder = "?"
    errors = (sqlite3.Error,)

    def __init__(self, path: str | Path = ":memory:", *, timeout: float = 5.0):
        super().__init__(str(path))
        self._conn: Any = sqlite3.connect(str(path), timeout=timeout, isolation_level=None)

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def column_type(self, table: str, column: str) -> str | None:
        rows = self.query(
            "SELECT type FROM pragma_table_info(?) WHERE name = ?",
            (table, column),
        )
        return rows[0][0] if rows else None

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Transaction context manager."""
        cur = self._conn.cursor()
        cur.execute("BEGIN")
        try:
            yield cur
            cur.execute("COMMIT")
        except BaseException:
            if self._conn.in_transaction:
                cur.execute("ROLLBACK")
            raise
        finally:
            cur.close()

    def execute_script(self, cursor: Any, sql: str) -> None:
        for statement in split_statements(sql):
            cursor.execute(statement)

    def query(self, sql: str, params: tuple = ()) -> list[tuple]:
        return self._conn.execute(sql, params).fetchall()

    def close(self) -> None:
        """Close the connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None


def split_statements(sql: str) -> list[str]:
    """Split a script into complete statements using ``sqlite3.complete_statement``.

    A trailing fragment that never completes is returned as-is so that
    executing it raises the driver's syntax error instead of being dropped.
    """
    statements: list[str] = []
    buffer = ""
    pieces = sql.split(";")
    for index, piece in enumerate(pieces):
        buffer += piece
        if index == len(pieces) - 1:
            break
        buffer += ";"
        # a ";" inside a string literal or comment leaves the statement open
        if sqlite3.complete_statement(buffer):
            if not _is_blank(buffer[:-1]):
                statements.append(buffer.strip())
            buffer = ""
    if not _is_blank(buffer):
        statements.append(buffer.strip())
    return statements


def _is_blank(fragment: str) -> bool:
    return all(
        not line.strip() or line.strip().startswith("--")
        for line in fragment.splitlines()
    )


__all__ = [
    "SQLiteBackend",
    "split_statements",
]
