"""
migrator — apply ordered SQL migrations to PostgreSQL databases.

Tracks applied migrations by name in ``schema_migrations`` and takes over
databases from the legacy integer-keyed (Albion) tracker exactly once.

Usage::

    from migrator.ops.upgrade import run_migrations

    result = run_migrations(
        "postgres:localhost::main:imqs:secret",
        ["sql/0000-0001.sql", "sql/2018-01-15-a.sql"],
    )
"""

__version__ = "1.1.0"
