"""
FastAPI application factory.

``create_app()`` wires settings, the config-service client, routers and
the startup upgrade into a single ``FastAPI`` instance.

Manifesto:
    The app factory is the single composition root — the rest of the
    codebase never touches ``FastAPI`` directly, and tests build an app
    with their own settings, client and backend factory.

Tags:
    migrator, api, app-factory, composition-root, FastAPI

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool

from migrator import __version__
from migrator.api.routers import health_router, schema_router, upgrade_router
from migrator.core.config_service import ConfigServiceClient
from migrator.core.logging import configure_logging, get_logger
from migrator.core.settings import MigratorSettings
from migrator.ops.upgrade import BackendFactory, connect_postgres, upgrade_all

logger = get_logger("migrator.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging (unless the CLI already did), then upgrade every database."""
    settings: MigratorSettings = app.state.settings
    if not structlog.is_configured():
        configure_logging(
            level=settings.log_level,
            json_format=settings.json_logs,
            log_file=settings.log_file,
        )
    logger.info("migrator service starting", version=app.version)

    if settings.upgrade_on_startup:
        try:
            await run_in_threadpool(
                upgrade_all, settings, app.state.client, connect=app.state.connect
            )
        except Exception as exc:
            logger.error("startup upgrade failed", error=str(exc))
            raise

    logger.info("listening", host=settings.host, port=settings.port)
    yield
    logger.info("migrator service shutting down")


def create_app(
    *,
    settings: MigratorSettings | None = None,
    client: ConfigServiceClient | None = None,
    connect: BackendFactory = connect_postgres,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : MigratorSettings | None
        Override settings (useful for testing). Loaded from the environment
        when ``None``.
    client : ConfigServiceClient | None
        Override the config-service client.
    connect : BackendFactory
        Backend factory handed to every upgrade.
    """
    settings = settings or MigratorSettings()
    client = client or ConfigServiceClient(
        settings.config_service_url, timeout=settings.config_service_timeout
    )

    app = FastAPI(
        title="migrator",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.client = client
    app.state.connect = connect

    app.include_router(health_router)
    app.include_router(upgrade_router)
    app.include_router(schema_router)
    return app
