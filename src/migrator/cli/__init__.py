"""Command-line interface: ``migrator upgrade`` and ``migrator serve``."""

from migrator.cli.app import app

__all__ = ["app"]
