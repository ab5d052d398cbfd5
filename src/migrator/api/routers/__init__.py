"""API routers."""

from migrator.api.routers.health import router as health_router
from migrator.api.routers.schema import router as schema_router
from migrator.api.routers.upgrade import router as upgrade_router

__all__ = ["health_router", "schema_router", "upgrade_router"]
