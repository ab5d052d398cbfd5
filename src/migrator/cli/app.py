"""
Root Typer application for the migrator CLI.

Commands live in their own modules and are registered here.
"""

from __future__ import annotations

import typer
from typer import Typer

from migrator.cli.serve import serve
from migrator.cli.upgrade import upgrade

app = Typer(
    name="migrator",
    help="migrator — apply ordered SQL migrations to PostgreSQL databases.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from migrator import __version__

        typer.echo(f"migrator {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """migrator CLI — upgrade databases or run the upgrade service."""


# ── Command registration ─────────────────────────────────────────────────

app.command("upgrade")(upgrade)
app.command("serve")(serve)
