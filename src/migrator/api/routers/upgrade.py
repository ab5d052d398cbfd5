"""
Upgrade router — migrate one database on demand.

POST /upgrade/{db_name}

Resolves the connection string through the config service and applies the
migrations in ``<migrations_root>/<db_name>/``.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse

from migrator.api.deps import Client, Connect, Settings
from migrator.api.validation import is_valid_name
from migrator.core.errors import ConfigServiceError, MigratorError
from migrator.core.logging import get_logger
from migrator.ops.upgrade import upgrade_database

logger = get_logger(__name__)

router = APIRouter(prefix="/upgrade")


@router.post("/{db_name}", response_class=PlainTextResponse)
def upgrade(db_name: str, settings: Settings, client: Client, connect: Connect) -> str:
    """Bring ``db_name`` up to date; ``OK`` on success."""
    if not is_valid_name(db_name):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid db name '{db_name}'. Must be ASCII only",
        )

    try:
        connection_string = client.get_connection_string(db_name)
    except ConfigServiceError as exc:
        raise HTTPException(
            status_code=400,
            detail=f"Failed to fetch db connection for {db_name}: {exc}",
        ) from exc

    migrations_dir = settings.migrations_root / db_name
    if not migrations_dir.is_dir():
        raise HTTPException(
            status_code=400,
            detail=f"No migrations found for database '{db_name}'",
        )

    try:
        upgrade_database(
            connection_string,
            migrations_dir,
            settings.migration_config(),
            connect=connect,
        )
    except MigratorError as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Upgrade of {db_name} failed: {exc}",
        ) from exc
    return "OK"
