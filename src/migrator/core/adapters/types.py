"""Database state and the type-name → state mapping."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum


class DatabaseState(str, Enum):
    """Where a database stands with respect to migration tracking.

    Derived on every run from the declared type of
    ``schema_migrations.version``; never stored.
    """

    FRESH = "fresh"        # tracking table absent
    LEGACY = "legacy"      # integer-keyed Albion table
    CURRENT = "current"    # string-keyed table

    @classmethod
    def from_column_type(
        cls,
        type_name: str | None,
        string_markers: Iterable[str],
    ) -> DatabaseState:
        """Map a driver-reported column type to a state.

        ``None`` means the column (and so the table) does not exist. A type
        name containing any of ``string_markers`` (case-insensitive) is a
        string column; anything else is the legacy integer column.
        """
        if type_name is None:
            return cls.FRESH
        lowered = type_name.lower()
        if any(marker in lowered for marker in string_markers):
            return cls.CURRENT
        return cls.LEGACY


__all__ = ["DatabaseState"]
