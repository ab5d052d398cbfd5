"""
CLI: ``migrator serve`` — run the upgrade service.
"""

from __future__ import annotations

import typer
import uvicorn

from migrator.cli.utils import console
from migrator.core.logging import configure_logging
from migrator.core.settings import MigratorSettings


def serve(
    port: int | None = typer.Argument(None, help="Bind port (default: MIGRATOR_PORT or 80)"),
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address"),
) -> None:
    """Upgrade every database, then serve /ping, /upgrade and /schema."""
    overrides = {k: v for k, v in {"port": port, "host": host}.items() if v is not None}
    settings = MigratorSettings(**overrides)
    configure_logging(
        level=settings.log_level,
        json_format=settings.json_logs,
        log_file=settings.log_file,
    )

    from migrator.api import create_app

    console.print(f"[bold green]Starting migrator[/bold green] on {settings.host}:{settings.port}")
    uvicorn.run(
        create_app(settings=settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
