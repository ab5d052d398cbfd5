"""Settings for the migrator CLI and service.

Deployment paths, the config-service address, the log file and the
tracking table name are explicit, validated settings, read from
``MIGRATOR_*`` environment variables or a ``.env`` file and passed down
into the operations layer. The reconciliation engine itself never reads
settings; it receives a ``MigrationConfig``.

Examples:
    >>> from migrator.core.settings import MigratorSettings
    >>> settings = MigratorSettings(migrations_root="/tmp/migrations")
    >>> settings.migration_config().table_name
    'schema_migrations'

Tags:
    settings, configuration, pydantic, environment, migrator
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from migrator.core.migrations.runner import MigrationConfig, validate_identifier


class MigratorSettings(BaseSettings):
    """Process-wide settings.

    Order of precedence (highest → lowest):
        1. Environment variables (``MIGRATOR_MIGRATIONS_ROOT``, etc.)
        2. ``.env`` file
        3. Defaults below
    """

    model_config = SettingsConfigDict(
        env_prefix="MIGRATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Network ──────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=80, description="Bind port")

    # ── Observability ────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Structlog log level")
    json_logs: bool | None = Field(default=None, description="JSON log lines (None = auto)")
    log_file: Path | None = Field(default=None, description="Append logs to this file")

    # ── Migrations ───────────────────────────────────────────────
    migrations_root: Path = Field(
        default=Path("/dbschema/migrations"),
        description="One sub-directory of .sql files per database",
    )
    schema_root: Path = Field(
        default=Path("/dbschema/schema"),
        description="Directory of <name>.schema files served by /schema",
    )
    table_name: str = Field(default="schema_migrations", description="Tracking table")
    admin_database: str = Field(
        default="postgres",
        description="Database used to issue CREATE DATABASE",
    )
    upgrade_on_startup: bool = Field(
        default=True,
        description="Upgrade every database under migrations_root when the service starts",
    )

    # ── Config service ───────────────────────────────────────────
    config_service_url: str = Field(
        default="http://config/config-service",
        description="Base URL of the config service",
    )
    config_service_timeout: float = Field(default=10.0, description="Seconds")

    @field_validator("table_name", "admin_database")
    @classmethod
    def _identifier(cls, value: str) -> str:
        return validate_identifier(value)

    def migration_config(self) -> MigrationConfig:
        """Engine configuration derived from these settings."""
        return MigrationConfig(table_name=self.table_name, admin_database=self.admin_database)


__all__ = ["MigratorSettings"]
