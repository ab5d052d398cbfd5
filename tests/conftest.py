"""
Shared pytest fixtures and configuration for migrator tests.

This module provides:
- Logging reset between tests
- A migration-directory builder
- SQLite backends and a backend factory for the operations layer

Usage:
    Fixtures are auto-discovered by pytest; use them as function arguments.

    def test_something(sql_dir, sqlite_backend):
        sql_dir.write("0000-0001.sql", "CREATE TABLE a (x INTEGER);")
        ...
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog

from migrator.core.adapters.sqlite import SQLiteBackend
from migrator.core.connection import ConnectionDescriptor
from migrator.core.migrations import MigrationConfig
from tests._support.db import SqlDir


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark API/CLI/ops tests as integration, everything else as unit."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if test_path.parts and test_path.parts[0] in {"api", "cli", "ops"}:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Logging isolation
# =============================================================================


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo ``configure_logging`` so no test writes to another test's stream."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


# =============================================================================
# Migration files
# =============================================================================


@pytest.fixture
def sql_dir(tmp_path: Path) -> SqlDir:
    return SqlDir(tmp_path / "migrations")


# =============================================================================
# Backends
# =============================================================================


@pytest.fixture
def sqlite_backend() -> Generator[SQLiteBackend, None, None]:
    """In-memory SQLite backend."""
    backend = SQLiteBackend(":memory:")
    yield backend
    backend.close()


@pytest.fixture
def sqlite_factory(
    tmp_path: Path,
) -> Callable[[ConnectionDescriptor, MigrationConfig], SQLiteBackend]:
    """Backend factory that maps each database name to a SQLite file."""

    def connect(descriptor: ConnectionDescriptor, config: MigrationConfig) -> SQLiteBackend:
        return SQLiteBackend(tmp_path / f"{descriptor.database}.sqlite")

    return connect

