"""
CLI: ``migrator upgrade`` — migrate one database from a directory of .sql files.
"""

from __future__ import annotations

from pathlib import Path

import typer

from migrator.cli.utils import console, fail
from migrator.core.errors import MigratorError
from migrator.core.logging import configure_logging
from migrator.core.migrations import MigrationConfig
from migrator.ops.upgrade import upgrade_database


def upgrade(
    db: str = typer.Argument(..., help="postgres:host:port:dbname:user:password"),
    sql_dir: Path = typer.Argument(..., help="Directory of .sql migration files"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Append logs to this file"),
    log_level: str = typer.Option("INFO", "--log-level"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Force JSON log lines"),
    table: str = typer.Option("schema_migrations", "--table", help="Tracking table name"),
) -> None:
    """Migrate a database up to the latest version available."""
    configure_logging(level=log_level, json_format=True if json_logs else None, log_file=log_file)
    try:
        config = MigrationConfig(table_name=table)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--table") from exc

    try:
        result = upgrade_database(db, sql_dir, config)
    except MigratorError as exc:
        fail(exc)

    if result.switched_over:
        console.print("Switched over from Albion migration system")
    for name in result.applied:
        console.print(f"Ran migration {name}")
    if result.up_to_date:
        console.print("Database is up to date")
