"""
Schema router — serve ``<schema_root>/<name>.schema`` files.

GET /schema/{name}
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from migrator.api.deps import Settings
from migrator.api.validation import is_valid_name

router = APIRouter(prefix="/schema")


@router.get("/{name}")
def get_schema(name: str, settings: Settings) -> FileResponse:
    """Return a schema file by bare name, e.g. ``main`` or ``mirror``."""
    if not is_valid_name(name):
        raise HTTPException(
            status_code=400,
            detail="Invalid request. Must be just the schema name, eg 'main', or 'mirror'",
        )
    path = settings.schema_root / f"{name}.schema"
    if not path.is_file():
        raise HTTPException(status_code=404, detail=f"Schema '{name}' not found")
    return FileResponse(path, media_type="text/plain")
