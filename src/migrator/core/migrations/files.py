"""Migration files: naming grammars, global ordering and directory scan.

Two naming grammars share one directory:

================  =====================  ==========================
Kind              Basename               Tracked as
================  =====================  ==========================
legacy            ``0000-NNNN.sql``      ``0000-nnnn`` (Albion: int)
standard          anything else ``.sql`` lowercased basename
================  =====================  ==========================

NNNN is 1-4 decimal digits, zero-padded or not. The single global order is
the byte-wise order of full basenames, so legacy files (``0000-``) always
sort ahead of date-prefixed standard files.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from migrator.core.errors import MigrationDirectoryError

SQL_SUFFIX = ".sql"

_LEGACY_PATTERN = re.compile(r"^0000-(\d{1,4})\.sql$")


@dataclass(frozen=True)
class MigrationFile:
    """A single ``.sql`` migration on disk."""

    path: Path

    @classmethod
    def from_path(cls, path: str | Path) -> MigrationFile:
        path = Path(path)
        if not path.name.endswith(SQL_SUFFIX):
            raise ValueError(f"Not a migration file (expected {SQL_SUFFIX}): {path}")
        return cls(path)

    @property
    def basename(self) -> str:
        return self.path.name

    @property
    def name(self) -> str:
        """Migration name: lowercased basename without ``.sql``."""
        return self.basename[: -len(SQL_SUFFIX)].lower()

    @property
    def legacy_version(self) -> int | None:
        """Albion version for ``0000-NNNN.sql`` files, else ``None``."""
        match = _LEGACY_PATTERN.match(self.basename)
        return int(match.group(1)) if match else None

    @property
    def is_legacy(self) -> bool:
        return self.legacy_version is not None

    @property
    def sort_key(self) -> bytes:
        return self.basename.encode("utf-8")

    def read_sql(self) -> str:
        return self.path.read_text(encoding="utf-8")

    def __str__(self) -> str:
        return str(self.path)


def order_migrations(paths: Iterable[str | Path | MigrationFile]) -> list[MigrationFile]:
    """Return migration files in global (byte-wise basename) order."""
    files = [p if isinstance(p, MigrationFile) else MigrationFile.from_path(p) for p in paths]
    return sorted(files, key=lambda f: f.sort_key)


def legacy_migrations(files: Iterable[MigrationFile]) -> list[MigrationFile]:
    """Legacy files only, in global order."""
    return [f for f in order_migrations(files) if f.is_legacy]


def max_legacy_version(files: Iterable[MigrationFile]) -> int:
    """Highest legacy version in ``files``; 0 when there are none."""
    return max((f.legacy_version for f in files if f.legacy_version is not None), default=0)


def scan_migrations(directory: str | Path) -> list[MigrationFile]:
    """Collect ``*.sql`` files from ``directory`` (one level, not recursive).

    Raises:
        MigrationDirectoryError: the directory is missing or unreadable
    """
    directory = Path(directory)
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        raise MigrationDirectoryError(str(directory), cause=exc) from exc
    return order_migrations(
        entry for entry in entries if entry.suffix == SQL_SUFFIX and entry.is_file()
    )


__all__ = [
    "MigrationFile",
    "legacy_migrations",
    "max_legacy_version",
    "order_migrations",
    "scan_migrations",
]
