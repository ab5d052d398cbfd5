"""
Structured error types for the migrator.

Every failure the migrator can surface is a typed ``MigratorError``
subclass carrying the fields needed to diagnose it (database identity,
filename, expected vs actual version) without re-running at higher
verbosity. Messages are rendered from those typed fields; callers at the
boundary (CLI, HTTP service) print ``str(error)`` and nothing else.

Manifesto:
    - **Typed Error Hierarchy:** One error type per failure kind
    - **No Automatic Recovery:** Every error aborts the run
    - **Rich Context:** Errors carry metadata for logging
    - **Error Chaining:** Preserve driver exceptions as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       MigratorError                              │
        │  (category, context, cause)                                      │
        ├─────────────────────────────────────────────────────────────────┤
        │  ConnectionStringError          DatabaseError                    │
        │  (CONFIG)                       (DATABASE)                       │
        │       │                              │                           │
        │  MalformedConnectionString      DatabaseCreationFailed           │
        │  UnsupportedDriver              SchemaInspectionFailed           │
        │                                 LegacyVersionReadFailed          │
        │                                 AppliedSetReadFailed             │
        │                                                                  │
        │  MigrationError                 MigrationDirectoryError          │
        │  (MIGRATION)                    (STORAGE)                        │
        │       │                                                          │
        │  SwitchoverVersionMismatch      ConfigServiceError               │
        │  SwitchoverFailed               (NETWORK)                        │
        │  MigrationApplyFailed                                            │
        │  NoMigrationFilesFound                                           │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = SwitchoverVersionMismatchError(expected=57, actual=56)
    >>> str(error)
    'Unable to upgrade migration system. Expected database to be at migration 57, but it is at 56'
    >>> error.to_dict()["category"]
    'MIGRATION'

Guardrails:
    ❌ DON'T: Raise bare ``Exception`` from the engine
    ✅ DO: Raise the matching ``MigratorError`` subclass with ``cause=``

    ❌ DON'T: Put passwords into ``ErrorContext``
    ✅ DO: Use ``ConnectionDescriptor.identity`` (host:database)

Tags:
    error-handling, exception-hierarchy, error-context, migrator

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and logging."""

    NETWORK = "NETWORK"           # Config service unreachable, bad status
    DATABASE = "DATABASE"         # Connect, create, inspect, read
    STORAGE = "STORAGE"           # Migration directory missing/unreadable
    CONFIG = "CONFIG"             # Connection descriptor problems
    MIGRATION = "MIGRATION"       # Switchover and apply failures
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Attributes:
        database: Database identity (``host:dbname``), never the password
        filename: Migration file involved in the failure
        metadata: Additional key-value pairs
    """

    database: str | None = None
    filename: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ["database", "filename"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class MigratorError(Exception):
    """
    Base exception for all migrator errors.

    Subclasses set ``default_category``. None of the migrator's errors are
    retryable: the run stops and the error is surfaced to the caller.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> MigratorError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SwitchoverFailedError(cause=exc).with_context(database="db:main")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONNECTION DESCRIPTOR ERRORS
# =============================================================================


class ConnectionStringError(MigratorError):
    """The connection descriptor could not be used."""

    default_category = ErrorCategory.CONFIG


class MalformedConnectionStringError(ConnectionStringError):
    """Connection string does not have exactly 6 colon-separated fields."""

    def __init__(self, field_count: int):
        self.field_count = field_count
        super().__init__(
            "Invalid db connection string. Expected 6 colon-separated parts, "
            f"but got {field_count} parts"
        )


class UnsupportedDriverError(ConnectionStringError):
    """Connection string names a driver other than postgres."""

    def __init__(self, driver: str):
        self.driver = driver
        super().__init__(f"Postgres is the only supported database (not {driver})")


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(MigratorError):
    """Database access failed."""

    default_category = ErrorCategory.DATABASE


class DatabaseCreationFailedError(DatabaseError):
    """The target database was unreachable and could not be created."""

    def __init__(self, database: str, reason: str, *, cause: BaseException | None = None):
        self.database = database
        super().__init__(
            f"Failed to create database {database}: {reason}" if reason else f"Failed to create database {database}",
            context=ErrorContext(database=database),
            cause=cause,
        )


class SchemaInspectionFailedError(DatabaseError):
    """The type of ``schema_migrations.version`` could not be read."""

    def __init__(self, database: str | None = None, *, cause: BaseException | None = None):
        self.database = database
        super().__init__(
            "Unable to read datatype of schema_migrations.version field",
            context=ErrorContext(database=database),
            cause=cause,
        )


class LegacyVersionReadFailedError(DatabaseError):
    """``MAX(version)`` could not be read from the legacy table."""

    def __init__(self, *, cause: BaseException | None = None):
        super().__init__("Unable to read max legacy version", cause=cause)


class AppliedSetReadFailedError(DatabaseError):
    """The applied migration names could not be read."""

    def __init__(self, *, cause: BaseException | None = None):
        super().__init__("Unable to read applied migrations", cause=cause)


# =============================================================================
# MIGRATION ERRORS
# =============================================================================


class MigrationError(MigratorError):
    """Switchover or migration application failed."""

    default_category = ErrorCategory.MIGRATION


class SwitchoverVersionMismatchError(MigrationError):
    """The legacy database is not exactly at the newest legacy migration."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            "Unable to upgrade migration system. Expected database to be at "
            f"migration {expected}, but it is at {actual}",
            context=ErrorContext(metadata={"expected": expected, "actual": actual}),
        )


class SwitchoverFailedError(MigrationError):
    """The switchover transaction was rolled back."""

    def __init__(self, *, cause: BaseException | None = None):
        super().__init__("Albion switchover failed", cause=cause)


class MigrationApplyFailedError(MigrationError):
    """A migration file could not be read, executed or recorded."""

    def __init__(self, filename: str, *, cause: BaseException | None = None):
        self.filename = filename
        super().__init__(
            f"Migration {filename} failed",
            context=ErrorContext(filename=filename),
            cause=cause,
        )


class NoMigrationFilesFoundError(MigrationError):
    """The migration file set is empty."""

    def __init__(self, directory: str | None = None):
        self.directory = directory
        super().__init__(
            f"No SQL files found in {directory}" if directory else "No SQL files found",
            context=ErrorContext(metadata={"directory": directory} if directory else {}),
        )


# =============================================================================
# BOUNDARY ERRORS
# =============================================================================


class MigrationDirectoryError(MigratorError):
    """The migration directory could not be scanned."""

    default_category = ErrorCategory.STORAGE

    def __init__(self, directory: str, *, cause: BaseException | None = None):
        self.directory = directory
        super().__init__(
            f"Error scanning {directory}",
            context=ErrorContext(metadata={"directory": directory}),
            cause=cause,
        )


class ConfigServiceError(MigratorError):
    """The config service did not return a connection string."""

    default_category = ErrorCategory.NETWORK

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ):
        self.status_code = status_code
        super().__init__(message, cause=cause)


__all__ = [
    "AppliedSetReadFailedError",
    "ConfigServiceError",
    "ConnectionStringError",
    "DatabaseCreationFailedError",
    "DatabaseError",
    "ErrorCategory",
    "ErrorContext",
    "LegacyVersionReadFailedError",
    "MalformedConnectionStringError",
    "MigrationApplyFailedError",
    "MigrationDirectoryError",
    "MigrationError",
    "MigratorError",
    "NoMigrationFilesFoundError",
    "SchemaInspectionFailedError",
    "SwitchoverFailedError",
    "SwitchoverVersionMismatchError",
    "UnsupportedDriverError",
]
