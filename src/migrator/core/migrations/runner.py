"""Migration state-reconciliation engine.

Brings a database from whatever state it is in to "every migration file
applied":

1. **Bootstrap** — detect the state of ``schema_migrations``:

   - *Fresh* (no table): create the string-keyed table and replay every
     legacy (``0000-NNNN.sql``) file.
   - *Legacy* (integer column, Albion): switch over to the string-keyed
     table, recording legacy files as applied without running them.
   - *Current* (string column): nothing to do.

2. **Apply pending** — every file whose name is not in the table, in global
   order, each in its own transaction. The first failure stops the run;
   earlier migrations stay committed, so re-running after a fix resumes
   where the failure happened.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from migrator.core.adapters.base import MigrationBackend
from migrator.core.adapters.types import DatabaseState
from migrator.core.errors import (
    AppliedSetReadFailedError,
    LegacyVersionReadFailedError,
    MigrationApplyFailedError,
    NoMigrationFilesFoundError,
    SwitchoverFailedError,
    SwitchoverVersionMismatchError,
)
from migrator.core.logging import get_logger

from .files import MigrationFile, legacy_migrations, max_legacy_version, order_migrations

logger = get_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_identifier(value: str) -> str:
    """Reject anything that is not a plain SQL identifier."""
    if not _IDENTIFIER.match(value):
        raise ValueError(f"Invalid SQL identifier: {value!r}")
    return value


@dataclass(frozen=True)
class MigrationConfig:
    """Explicit engine configuration."""

    table_name: str = "schema_migrations"
    admin_database: str = "postgres"

    def __post_init__(self) -> None:
        validate_identifier(self.table_name)
        validate_identifier(self.admin_database)


@dataclass
class MigrationResult:
    """Result of a reconciliation run."""

    state: DatabaseState | None = None
    switched_over: bool = False
    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def up_to_date(self) -> bool:
        """True when the run had nothing to apply."""
        return not self.applied


class MigrationRunner:
    """Reconciles one database against an ordered set of migration files.

    Parameters
    ----------
    backend
        A connected ``MigrationBackend``. The runner does not close it.
    files
        Migration paths (or ``MigrationFile`` objects). They are re-sorted
        into global order, so the caller's order does not matter.
    config
        Table name and related settings.

    Example::

        from migrator.core.adapters.sqlite import SQLiteBackend
        from migrator.core.migrations import MigrationRunner, scan_migrations

        with SQLiteBackend("app.db") as backend:
            result = MigrationRunner(backend, scan_migrations("sql/")).run()
            print(f"Applied {len(result.applied)} migrations")
    """

    def __init__(
        self,
        backend: MigrationBackend,
        files: Iterable[str | MigrationFile],
        config: MigrationConfig | None = None,
    ) -> None:
        self._backend = backend
        self._files = order_migrations(files)
        self._config = config or MigrationConfig()
        self._table = self._config.table_name

    @property
    def files(self) -> list[MigrationFile]:
        return list(self._files)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self) -> MigrationResult:
        """Bootstrap (or switch over), then apply every pending migration.

        Raises:
            NoMigrationFilesFoundError: the file set is empty
            MigratorError: any bootstrap, switchover or apply failure
        """
        if not self._files:
            raise NoMigrationFilesFoundError()

        state = self.detect_state()
        result = MigrationResult(state=state)
        if state is DatabaseState.FRESH:
            result.applied.extend(self.initialize())
        elif state is DatabaseState.LEGACY:
            self.switchover()
            result.switched_over = True

        pending = self.apply_pending()
        result.applied.extend(pending.applied)
        result.skipped.extend(pending.skipped)
        if result.up_to_date:
            logger.info("database.up_to_date")
        return result

    def detect_state(self) -> DatabaseState:
        """Fresh, Legacy or Current, from the tracking column's type."""
        state = self._backend.detect_state(self._table)
        logger.info("database.state", state=state.value)
        return state

    def bootstrap(self) -> DatabaseState:
        """Bring the tracking table to the current schema; return the prior state."""
        state = self.detect_state()
        if state is DatabaseState.FRESH:
            self.initialize()
        elif state is DatabaseState.LEGACY:
            self.switchover()
        return state

    def initialize(self) -> list[str]:
        """Create the tracking table on a fresh database and replay legacy files."""
        logger.info("database.initializing")
        with self._backend.transaction() as cur:
            cur.execute(self._create_table_sql())

        legacy = legacy_migrations(self._files)
        if legacy:
            logger.info("migration.legacy_replay", count=len(legacy))
        for migration in legacy:
            self.apply_migration(migration)
        return [m.name for m in legacy]

    def switchover(self) -> None:
        """Take over a database from the Albion (integer-keyed) tracker.

        The database must be at exactly the newest legacy version present in
        the file set. Intermediate versions are assumed to be contiguous and
        are not checked individually.

        Raises:
            LegacyVersionReadFailedError: ``MAX(version)`` could not be read
            SwitchoverVersionMismatchError: database and files disagree
            SwitchoverFailedError: the switchover transaction rolled back
        """
        try:
            rows = self._backend.query(f"SELECT MAX(version) FROM {self._table}")
        except self._backend.errors as exc:
            raise LegacyVersionReadFailedError(cause=exc).with_context(
                database=self._backend.identity
            ) from exc
        max_applied = int(rows[0][0]) if rows and rows[0][0] is not None else 0
        max_available = max_legacy_version(self._files)

        if max_applied != max_available:
            raise SwitchoverVersionMismatchError(
                expected=max_available, actual=max_applied
            ).with_context(database=self._backend.identity)

        logger.info("switchover.started", legacy_version=max_applied)
        legacy = legacy_migrations(self._files)
        try:
            with self._backend.transaction() as cur:
                cur.execute(f"DROP TABLE {self._table}")
                cur.execute(self._create_table_sql())
                for migration in legacy:
                    cur.execute(self._insert_sql(), (migration.name,))
        except self._backend.errors as exc:
            logger.error("switchover.failed", error=str(exc))
            raise SwitchoverFailedError(cause=exc).with_context(
                database=self._backend.identity
            ) from exc
        logger.info("switchover.completed", recorded=len(legacy))

    def applied_migrations(self) -> set[str]:
        """Names already recorded in the tracking table."""
        try:
            rows = self._backend.query(f"SELECT version FROM {self._table}")
        except self._backend.errors as exc:
            raise AppliedSetReadFailedError(cause=exc).with_context(
                database=self._backend.identity
            ) from exc
        return {str(row[0]) for row in rows}

    def pending(self) -> list[MigrationFile]:
        """Files not yet recorded, in global order (no bootstrap performed)."""
        applied = self.applied_migrations()
        return [f for f in self._files if f.name not in applied]

    def apply_pending(self) -> MigrationResult:
        """Apply every migration missing from the tracking table, in order.

        Stops at the first failure; migrations applied before it stay
        committed.
        """
        result = MigrationResult()
        applied = self.applied_migrations()

        for migration in self._files:
            if migration.name in applied:
                result.skipped.append(migration.name)
                continue
            self.apply_migration(migration)
            result.applied.append(migration.name)
        return result

    def apply_migration(self, migration: MigrationFile) -> None:
        """Run one file and record it, all in one transaction.

        Raises:
            MigrationApplyFailedError: read (missing or not UTF-8), execute or insert failed
        """
        try:
            sql = migration.read_sql()
        except (OSError, UnicodeDecodeError) as exc:
            raise MigrationApplyFailedError(str(migration), cause=exc).with_context(
                database=self._backend.identity
            ) from exc

        logger.info("migration.running", migration=migration.name)
        try:
            with self._backend.transaction() as cur:
                self._backend.execute_script(cur, sql)
                cur.execute(self._insert_sql(), (migration.name,))
        except self._backend.errors as exc:
            logger.error("migration.failed", migration=migration.name, error=str(exc))
            raise MigrationApplyFailedError(str(migration), cause=exc).with_context(
                database=self._backend.identity
            ) from exc
        logger.info("migration.applied", migration=migration.name)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _create_table_sql(self) -> str:
        return f"CREATE TABLE {self._table} (version VARCHAR PRIMARY KEY)"

    def _insert_sql(self) -> str:
        return f"INSERT INTO {self._table} (version) VALUES ({self._backend.placeholder})"


__all__ = [
    "MigrationConfig",
    "MigrationResult",
    "MigrationRunner",
    "validate_identifier",
]
