"""Tests for ``MigrationRunner`` against a real SQLite database."""

from __future__ import annotations

import sqlite3

import pytest
from structlog.testing import capture_logs

from migrator.core.adapters import DatabaseState, SQLiteBackend
from migrator.core.errors import (
    AppliedSetReadFailedError,
    LegacyVersionReadFailedError,
    MigrationApplyFailedError,
    NoMigrationFilesFoundError,
    SchemaInspectionFailedError,
)
from migrator.core.migrations import MigrationConfig, MigrationRunner
from tests._support.db import log_sql, run_log, table_exists, tracked


# ── Fresh databases ──────────────────────────────────────────────────


class TestFreshDatabase:
    def test_replays_legacy_then_applies_the_rest(self, sqlite_backend, sql_dir):
        sql_dir.write("0000-0000.sql", log_sql("0000-0000"))
        sql_dir.write("0000-0001.sql", log_sql("0000-0001"))
        sql_dir.write("2018-01-15-a.sql", log_sql("2018-01-15-a"))

        result = MigrationRunner(sqlite_backend, sql_dir.files()).run()

        assert result.state is DatabaseState.FRESH
        assert result.switched_over is False
        assert result.applied == ["0000-0000", "0000-0001", "2018-01-15-a"]
        assert run_log(sqlite_backend) == ["0000-0000", "0000-0001", "2018-01-15-a"]
        assert tracked(sqlite_backend) == {"0000-0000", "0000-0001", "2018-01-15-a"}

    def test_gaps_in_legacy_numbers_are_fine(self, sqlite_backend, sql_dir):
        sql_dir.write("0000-0037.sql", log_sql("0000-0037"))
        sql_dir.write("2018-01-15-a.sql", log_sql("2018-01-15-a"))
        sql_dir.write("0000-0001.sql", log_sql("0000-0001"))

        MigrationRunner(sqlite_backend, sql_dir.files()).run()

        assert run_log(sqlite_backend) == ["0000-0001", "0000-0037", "2018-01-15-a"]

    def test_caller_order_does_not_matter(self, sqlite_backend, sql_dir):
        sql_dir.write("2018-01-15-a.sql", log_sql("2018-01-15-a"))
        sql_dir.write("2018-02-01-b.sql", log_sql("2018-02-01-b"))

        MigrationRunner(sqlite_backend, list(reversed(sql_dir.files()))).run()

        assert run_log(sqlite_backend) == ["2018-01-15-a", "2018-02-01-b"]

    def test_tracking_table_has_string_column(self, sqlite_backend, sql_dir):
        sql_dir.write("2018-01-15-a.sql", "CREATE TABLE a (x INTEGER);")

        MigrationRunner(sqlite_backend, sql_dir.files()).run()

        assert sqlite_backend.column_type("schema_migrations", "version") == "VARCHAR"
        assert sqlite_backend.detect_state("schema_migrations") is DatabaseState.CURRENT

    def test_names_are_recorded_lowercase(self, sqlite_backend, sql_dir):
        sql_dir.write("2018-01-15-Add-Index.sql", "CREATE TABLE a (x INTEGER);")

        MigrationRunner(sqlite_backend, sql_dir.files()).run()

        assert tracked(sqlite_backend) == {"2018-01-15-add-index"}


# ── Idempotence ──────────────────────────────────────────────────────


class TestRerun:
    def test_second_run_is_a_no_op(self, sqlite_backend, sql_dir):
        sql_dir.write("0000-0001.sql", log_sql("0000-0001"))
        sql_dir.write("2018-01-15-a.sql", log_sql("2018-01-15-a"))
        runner = MigrationRunner(sqlite_backend, sql_dir.files())
        runner.run()

        result = runner.run()

        assert result.state is DatabaseState.CURRENT
        assert result.applied == []
        assert result.skipped == ["0000-0001", "2018-01-15-a"]
        assert result.up_to_date
        assert run_log(sqlite_backend) == ["0000-0001", "2018-01-15-a"]

    def test_new_file_is_applied_on_next_run(self, sqlite_backend, sql_dir):
        sql_dir.write("2018-01-15-a.sql", log_sql("2018-01-15-a"))
        MigrationRunner(sqlite_backend, sql_dir.files()).run()

        sql_dir.write("2018-03-01-c.sql", log_sql("2018-03-01-c"))
        result = MigrationRunner(sqlite_backend, sql_dir.files()).run()

        assert result.applied == ["2018-03-01-c"]
        assert run_log(sqlite_backend) == ["2018-01-15-a", "2018-03-01-c"]

    def test_up_to_date_is_logged(self, sqlite_backend, sql_dir):
        sql_dir.write("2018-01-15-a.sql", log_sql("2018-01-15-a"))
        runner = MigrationRunner(sqlite_backend, sql_dir.files())
        runner.run()

        with capture_logs() as logs:
            runner.run()

        assert "database.up_to_date" in [entry["event"] for entry in logs]

    def test_legacy_replay_is_not_logged_as_up_to_date(self, sqlite_backend, sql_dir):
        sql_dir.write("0000-0001.sql", log_sql("0000-0001"))

        with capture_logs() as logs:
            result = MigrationRunner(sqlite_backend, sql_dir.files()).run()

        assert result.applied == ["0000-0001"]
        assert not result.up_to_date
        assert "database.up_to_date" not in [entry["event"] for entry in logs]


# ── Failures ─────────────────────────────────────────────────────────


class TestFailures:
    def test_failed_file_rolls_back_and_stops_the_run(self, sqlite_backend, sql_dir):
        sql_dir.write("2018-01-15-a.sql", log_sql("2018-01-15-a"))
        sql_dir.write(
            "2018-02-01-b.sql",
            log_sql("2018-02-01-b", "CREATE TABLE half (x INTEGER);\nINSERT INTO missing VALUES (1);\n"),
        )
        sql_dir.write("2018-03-01-c.sql", log_sql("2018-03-01-c"))

        with pytest.raises(MigrationApplyFailedError) as exc_info:
            MigrationRunner(sqlite_backend, sql_dir.files()).run()

        assert exc_info.value.filename.endswith("2018-02-01-b.sql")
        assert exc_info.value.context.database == ":memory:"
        assert isinstance(exc_info.value.__cause__, sqlite3.Error)
        assert tracked(sqlite_backend) == {"2018-01-15-a"}
        assert run_log(sqlite_backend) == ["2018-01-15-a"]
        assert not table_exists(sqlite_backend, "half")

    def test_rerun_after_fix_resumes_at_failed_file(self, sqlite_backend, sql_dir):
        sql_dir.write("2018-01-15-a.sql", log_sql("2018-01-15-a"))
        sql_dir.write("2018-02-01-b.sql", "INSERT INTO missing VALUES (1);")
        sql_dir.write("2018-03-01-c.sql", log_sql("2018-03-01-c"))
        with pytest.raises(MigrationApplyFailedError):
            MigrationRunner(sqlite_backend, sql_dir.files()).run()

        sql_dir.write("2018-02-01-b.sql", log_sql("2018-02-01-b"))
        result = MigrationRunner(sqlite_backend, sql_dir.files()).run()

        assert result.applied == ["2018-02-01-b", "2018-03-01-c"]
        assert run_log(sqlite_backend) == ["2018-01-15-a", "2018-02-01-b", "2018-03-01-c"]

    def test_failed_legacy_replay_resumes_as_current(self, sqlite_backend, sql_dir):
        sql_dir.write("0000-0001.sql", log_sql("0000-0001"))
        sql_dir.write("0000-0002.sql", "NOT VALID SQL;")
        with pytest.raises(MigrationApplyFailedError):
            MigrationRunner(sqlite_backend, sql_dir.files()).run()

        sql_dir.write("0000-0002.sql", log_sql("0000-0002"))
        result = MigrationRunner(sqlite_backend, sql_dir.files()).run()

        assert result.state is DatabaseState.CURRENT
        assert result.applied == ["0000-0002"]

    def test_unreadable_file(self, sqlite_backend, sql_dir):
        path = sql_dir.write("2018-01-15-a.sql", "SELECT 1;")
        runner = MigrationRunner(sqlite_backend, [path])
        path.unlink()

        with pytest.raises(MigrationApplyFailedError) as exc_info:
            runner.run()

        assert isinstance(exc_info.value.__cause__, OSError)

    def test_non_utf8_file(self, sqlite_backend, sql_dir):
        sql_dir.write("2018-01-14-ok.sql", log_sql("2018-01-14-ok"))
        path = sql_dir.path / "2018-01-15-a.sql"
        path.write_bytes("CREATE TABLE café (x INTEGER);".encode("latin-1"))

        with pytest.raises(MigrationApplyFailedError) as exc_info:
            MigrationRunner(sqlite_backend, sql_dir.files()).run()

        assert exc_info.value.filename == str(path)
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)
        assert tracked(sqlite_backend) == {"2018-01-14-ok"}

    def test_failure_is_logged(self, sqlite_backend, sql_dir):
        sql_dir.write("2018-01-15-a.sql", "NOT VALID SQL;")

        with capture_logs() as logs, pytest.raises(MigrationApplyFailedError):
            MigrationRunner(sqlite_backend, sql_dir.files()).run()

        failed = [entry for entry in logs if entry["event"] == "migration.failed"]
        assert failed[0]["migration"] == "2018-01-15-a"
        assert failed[0]["log_level"] == "error"

    def test_empty_file_set(self, sqlite_backend):
        with pytest.raises(NoMigrationFilesFoundError):
            MigrationRunner(sqlite_backend, []).run()
        assert not table_exists(sqlite_backend, "schema_migrations")

    def test_schema_inspection_failure(self, sql_dir):
        class BrokenInspection(SQLiteBackend):
            def column_type(self, table, column):
                raise sqlite3.OperationalError("catalog unavailable")

        sql_dir.write("2018-01-15-a.sql", "SELECT 1;")
        with BrokenInspection() as backend:
            with pytest.raises(SchemaInspectionFailedError) as exc_info:
                MigrationRunner(backend, sql_dir.files()).run()

        assert exc_info.value.database == ":memory:"
        assert "catalog unavailable" in str(exc_info.value)

    def test_applied_set_unreadable(self, sqlite_backend, sql_dir):
        sql_dir.write("2018-01-15-a.sql", "SELECT 1;")

        with pytest.raises(AppliedSetReadFailedError):
            MigrationRunner(sqlite_backend, sql_dir.files()).applied_migrations()

    def test_legacy_version_unreadable(self, sqlite_backend, sql_dir):
        sql_dir.write("0000-0001.sql", "SELECT 1;")

        with pytest.raises(LegacyVersionReadFailedError):
            MigrationRunner(sqlite_backend, sql_dir.files()).switchover()


# ── Configuration and helpers ────────────────────────────────────────


class TestConfigAndHelpers:
    def test_custom_table_name(self, sqlite_backend, sql_dir):
        sql_dir.write("2018-01-15-a.sql", "CREATE TABLE a (x INTEGER);")

        MigrationRunner(sqlite_backend, sql_dir.files(), MigrationConfig(table_name="db_versions")).run()

        assert tracked(sqlite_backend, "db_versions") == {"2018-01-15-a"}
        assert not table_exists(sqlite_backend, "schema_migrations")

    @pytest.mark.parametrize("table", ["bad name", "x; DROP TABLE y", "1abc", ""])
    def test_table_name_must_be_identifier(self, table):
        with pytest.raises(ValueError):
            MigrationConfig(table_name=table)

    def test_pending_lists_unapplied_files_in_order(self, sqlite_backend, sql_dir):
        sql_dir.write("2018-01-15-a.sql", "CREATE TABLE a (x INTEGER);")
        runner = MigrationRunner(sqlite_backend, sql_dir.files())
        runner.run()
        sql_dir.write("2018-03-01-c.sql", "SELECT 1;")
        sql_dir.write("2018-02-01-b.sql", "SELECT 1;")

        pending = MigrationRunner(sqlite_backend, sql_dir.files()).pending()

        assert [f.name for f in pending] == ["2018-02-01-b", "2018-03-01-c"]

    def test_bootstrap_reports_prior_state(self, sqlite_backend, sql_dir):
        sql_dir.write("2018-01-15-a.sql", "SELECT 1;")
        runner = MigrationRunner(sqlite_backend, sql_dir.files())

        assert runner.bootstrap() is DatabaseState.FRESH
        assert runner.bootstrap() is DatabaseState.CURRENT
        assert tracked(sqlite_backend) == set()
