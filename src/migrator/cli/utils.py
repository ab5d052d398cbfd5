"""
CLI utility helpers — consoles and boundary error rendering.
"""

from __future__ import annotations

from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from migrator.core.errors import MigratorError

console = Console()
err_console = Console(stderr=True)


def fail(error: MigratorError) -> NoReturn:
    """Print the single human-readable message and exit non-zero."""
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {escape(str(error))}", soft_wrap=True)
    raise typer.Exit(code=1)
