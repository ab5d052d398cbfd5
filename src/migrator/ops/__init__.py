"""
Operations layer — what the CLI and the HTTP service actually call.

Each operation wires the boundary inputs (connection string, migration
directory, config service) to the reconciliation engine and raises typed
``MigratorError`` subclasses on failure.
"""

from migrator.ops.upgrade import run_migrations, upgrade_all, upgrade_database

__all__ = ["run_migrations", "upgrade_all", "upgrade_database"]
