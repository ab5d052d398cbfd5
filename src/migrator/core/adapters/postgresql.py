"""PostgreSQL migration backend."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg2

from migrator.core.connection import ConnectionDescriptor
from migrator.core.errors import DatabaseCreationFailedError
from migrator.core.logging import get_logger

from .base import MigrationBackend

logger = get_logger(__name__)

_COLUMN_TYPE_SQL = (
    "SELECT data_type FROM information_schema.columns "
    "WHERE table_schema = current_schema() AND table_name = %s AND column_name = %s"
)


class PostgreSQLBackend(MigrationBackend):
    """
    PostgreSQL backend on a single psycopg2 connection.

    ``information_schema.columns.data_type`` reports ``character varying``
    for the current table and ``integer`` for the Albion one, so the string
    marker is ``char``.

    psycopg2 opens a transaction implicitly on the first statement; reads
    through ``query()`` end theirs with a commit so the connection never
    idles inside a transaction between steps.
    """

    name = "postgresql"
    string_type_markers = ("char",)
    placeholder = "%s"
    errors = (psycopg2.Error,)

    def __init__(self, conn: Any, identity: str):
        super().__init__(identity)
        self._conn = conn

    @property
    def connection(self) -> Any:
        return self._conn

    @classmethod
    def connect_or_create(
        cls,
        descriptor: ConnectionDescriptor,
        *,
        admin_database: str = "postgres",
    ) -> PostgreSQLBackend:
        """Connect to ``descriptor.database``, creating it first if needed.

        The database name is interpolated into ``CREATE DATABASE`` unquoted;
        callers must validate it before it gets here.

        Raises:
            DatabaseCreationFailedError: the database was unreachable and
                could not be created or reached after creation
        """
        try:
            return cls(_open_and_probe(descriptor), descriptor.identity)
        except psycopg2.Error as exc:
            logger.debug("database.connect_failed", database=descriptor.identity, error=str(exc))

        admin = descriptor.for_database(admin_database)
        try:
            admin_conn = psycopg2.connect(**admin.to_connect_kwargs())
        except psycopg2.Error as exc:
            raise DatabaseCreationFailedError(
                descriptor.identity,
                f"failed to connect to database '{admin.identity}'",
                cause=exc,
            ) from exc

        logger.info("database.creating", database=descriptor.identity)
        try:
            # CREATE DATABASE cannot run inside a transaction block
            admin_conn.autocommit = True
            with admin_conn.cursor() as cur:
                cur.execute(f"CREATE DATABASE {descriptor.database}")
        except psycopg2.Error as exc:
            raise DatabaseCreationFailedError(descriptor.identity, "", cause=exc) from exc
        finally:
            admin_conn.close()

        try:
            conn = _open_and_probe(descriptor)
        except psycopg2.Error as exc:
            raise DatabaseCreationFailedError(
                descriptor.identity,
                "failed to connect to newly created database",
                cause=exc,
            ) from exc
        logger.info("database.created", database=descriptor.identity)
        return cls(conn, descriptor.identity)

    def column_type(self, table: str, column: str) -> str | None:
        rows = self.query(_COLUMN_TYPE_SQL, (table, column))
        return rows[0][0] if rows else None

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """Transaction context manager."""
        cur = self._conn.cursor()
        try:
            yield cur
            self._conn.commit()
        except BaseException:
            self._conn.rollback()
            raise
        finally:
            cur.close()

    def query(self, sql: str, params: tuple = ()) -> list[tuple]:
        cur = self._conn.cursor()
        try:
            cur.execute(sql, params or None)
            rows = cur.fetchall()
            self._conn.commit()
            return rows
        except psycopg2.Error:
            self._conn.rollback()
            raise
        finally:
            cur.close()

    def close(self) -> None:
        """Close the connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None


def _open_and_probe(descriptor: ConnectionDescriptor) -> Any:
    """Open a connection and force it live with ``SELECT 1``."""
    conn = psycopg2.connect(**descriptor.to_connect_kwargs())
    try:
        with conn.cursor() as cur:
            cur.execute("SELECT 1")
        conn.rollback()
    except psycopg2.Error:
        conn.close()
        raise
    logger.debug("database.connected", database=descriptor.identity)
    return conn


__all__ = [
    "PostgreSQLBackend",
]
