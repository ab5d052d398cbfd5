"""Migration reconciliation engine.

Applies ``.sql`` files in byte-wise basename order, tracking applied
migrations by name in ``schema_migrations``, and takes over databases from
the integer-keyed Albion tracker exactly once.

Modules
-------
files     MigrationFile, naming grammars, ordering, scan_migrations()
runner    MigrationRunner with run() / bootstrap() / switchover() / apply_pending()

Tags:
    migrator, migrations, schema, database, idempotent, DDL

Doc-Types:
    package-overview
"""

from migrator.core.migrations.files import (
    MigrationFile,
    legacy_migrations,
    max_legacy_version,
    order_migrations,
    scan_migrations,
)
from migrator.core.migrations.runner import (
    MigrationConfig,
    MigrationResult,
    MigrationRunner,
)

__all__ = [
    "MigrationConfig",
    "MigrationFile",
    "MigrationResult",
    "MigrationRunner",
    "legacy_migrations",
    "max_legacy_version",
    "order_migrations",
    "scan_migrations",
]
