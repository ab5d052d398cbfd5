"""Allow ``python -m migrator.cli``."""

from migrator.cli.app import app

app()
