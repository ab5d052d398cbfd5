"""Migration backend base class.

Manifesto:
    The reconciliation engine must not care which database it talks to.
    Everything vendor-specific (how to read a column's declared type, what a
    string type is called, how to run a multi-statement batch inside a
    transaction, which exceptions the driver raises) lives behind this
    interface.

Features:
    - ``column_type()`` probe and ``detect_state()`` mapping to ``DatabaseState``
    - ``transaction()`` context manager (commit on success, rollback on error)
    - ``execute_script()`` for whole migration files
    - ``query()`` for plain reads outside an explicit transaction
    - Context-manager protocol that releases the connection

Tags:
    migrator, database, abstract-base, adapter-pattern

Doc-Types:
    api-reference
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, ClassVar

from migrator.core.errors import SchemaInspectionFailedError

from .types import DatabaseState


class MigrationBackend(ABC):
    """
    Abstract base class for migration backends.

    Subclasses set the class attributes and implement the abstract methods.
    A backend owns exactly one connection for the duration of a run.
    """

    #: Backend identifier used in logs.
    name: ClassVar[str] = "abstract"

    #: Substrings of a declared column type that mean "string column".
    string_type_markers: ClassVar[tuple[str, ...]] = ("char",)

    #: Positional parameter placeholder for this driver.
    placeholder: ClassVar[str] = "?"

    #: Exceptions the driver raises for SQL or connection failures.
    errors: ClassVar[tuple[type[BaseException], ...]] = ()

    def __init__(self, identity: str):
        self._identity = identity

    @property
    def identity(self) -> str:
        """Database identity for diagnostics (never contains a password)."""
        return self._identity

    @abstractmethod
    def column_type(self, table: str, column: str) -> str | None:
        """Declared type of ``table.column``, or ``None`` if it does not exist."""
        ...

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """Yield a cursor inside a transaction; commit on exit, roll back on error."""
        ...

    @abstractmethod
    def query(self, sql: str, params: tuple = ()) -> list[tuple]:
        """Run a read-only statement outside an explicit transaction."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the connection."""
        ...

    def execute_script(self, cursor: Any, sql: str) -> None:
        """Execute a whole migration file as one batch on ``cursor``."""
        cursor.execute(sql)

    def detect_state(self, table: str, column: str = "version") -> DatabaseState:
        """Determine the tracking state from the declared column type.

        Raises:
            SchemaInspectionFailedError: the type could not be read
        """
        try:
            type_name = self.column_type(table, column)
        except self.errors as exc:
            raise SchemaInspectionFailedError(self.identity, cause=exc) from exc
        return DatabaseState.from_column_type(type_name, self.string_type_markers)

    def __enter__(self) -> MigrationBackend:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = [
    "MigrationBackend",
]
