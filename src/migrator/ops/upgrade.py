"""
Upgrade operations.

``run_migrations`` is the engine entry point for one database;
``upgrade_database`` adds the directory scan and boundary error logging;
``upgrade_all`` walks the migrations root, one sub-directory per database,
resolving each connection string through the config service.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

from migrator.core.adapters.base import MigrationBackend
from migrator.core.adapters.postgresql import PostgreSQLBackend
from migrator.core.config_service import ConfigServiceClient
from migrator.core.connection import ConnectionDescriptor, parse_connection_string
from migrator.core.errors import (
    MigrationDirectoryError,
    MigratorError,
    NoMigrationFilesFoundError,
)
from migrator.core.logging import LogContext, get_logger
from migrator.core.migrations import (
    MigrationConfig,
    MigrationFile,
    MigrationResult,
    MigrationRunner,
    scan_migrations,
)
from migrator.core.settings import MigratorSettings

logger = get_logger(__name__)

BackendFactory = Callable[[ConnectionDescriptor, MigrationConfig], MigrationBackend]


def connect_postgres(descriptor: ConnectionDescriptor, config: MigrationConfig) -> MigrationBackend:
    """Default backend factory: PostgreSQL, creating the database if absent."""
    return PostgreSQLBackend.connect_or_create(descriptor, admin_database=config.admin_database)


def run_migrations(
    connection_string: str,
    files: Iterable[str | Path | MigrationFile],
    config: MigrationConfig | None = None,
    *,
    connect: BackendFactory = connect_postgres,
) -> MigrationResult:
    """Parse, connect (or create), reconcile, and always release the connection.

    Raises:
        MigratorError: any parse, connect, bootstrap or apply failure
    """
    config = config or MigrationConfig()
    descriptor = parse_connection_string(connection_string)
    files = list(files)
    if not files:
        raise NoMigrationFilesFoundError().with_context(database=descriptor.identity)

    with LogContext(database=descriptor.identity):
        try:
            with connect(descriptor, config) as backend:
                result = MigrationRunner(backend, files, config).run()
        except MigratorError as exc:
            # diagnostics name host:database whatever the backend calls itself
            raise exc.with_context(database=descriptor.identity)
        logger.info(
            "upgrade.completed",
            state=result.state.value if result.state else None,
            applied=len(result.applied),
            switched_over=result.switched_over,
        )
    return result


def upgrade_database(
    connection_string: str,
    sql_dir: str | Path,
    config: MigrationConfig | None = None,
    *,
    connect: BackendFactory = connect_postgres,
) -> MigrationResult:
    """Scan ``sql_dir`` and migrate the database behind ``connection_string``.

    Failures are logged once as ``<dbname>: <error>`` and re-raised.
    """
    try:
        files = scan_migrations(sql_dir)
        if not files:
            raise NoMigrationFilesFoundError(str(sql_dir))
        return run_migrations(connection_string, files, config, connect=connect)
    except MigratorError as exc:
        logger.error("upgrade.failed", database=_database_name(connection_string), error=str(exc))
        raise


def upgrade_all(
    settings: MigratorSettings,
    client: ConfigServiceClient | None = None,
    *,
    connect: BackendFactory = connect_postgres,
) -> dict[str, MigrationResult]:
    """Upgrade every database that has a directory under ``migrations_root``.

    Directories are processed in name order; the first failure aborts.
    """
    client = client or ConfigServiceClient(
        settings.config_service_url, timeout=settings.config_service_timeout
    )
    root = Path(settings.migrations_root)
    results: dict[str, MigrationResult] = {}
    try:
        databases = sorted(p for p in root.iterdir() if p.is_dir())
    except OSError as exc:
        raise MigrationDirectoryError(str(root), cause=exc) from exc

    for directory in databases:
        connection_string = client.get_connection_string(directory.name)
        results[directory.name] = upgrade_database(
            connection_string,
            directory,
            settings.migration_config(),
            connect=connect,
        )
    logger.info("upgrade_all.completed", databases=len(results))
    return results


def _database_name(connection_string: str) -> str:
    parts = connection_string.split(":")
    return parts[3] if len(parts) > 3 else "?"


__all__ = [
    "connect_postgres",
    "run_migrations",
    "upgrade_all",
    "upgrade_database",
]
