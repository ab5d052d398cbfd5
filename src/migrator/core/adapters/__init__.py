"""Migration backends.

Each backend wraps one live connection and supplies everything
vendor-specific the engine needs: the column-type probe behind state
detection, the type-name → state mapping, transactions, and batch
execution of a migration file.

Modules
-------
types         DatabaseState and the type-name mapping
base          MigrationBackend abstract base class
postgresql    PostgreSQLBackend (psycopg2) with connect_or_create()
sqlite        SQLiteBackend (sqlite3) for embedded use and tests
"""

from .base import MigrationBackend
from .postgresql import PostgreSQLBackend
from .sqlite import SQLiteBackend
from .types import DatabaseState

__all__ = [
    "DatabaseState",
    "MigrationBackend",
    "PostgreSQLBackend",
    "SQLiteBackend",
]
