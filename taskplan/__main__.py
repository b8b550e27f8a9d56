"""Allow ``python -m taskplan``."""

from taskplan.cli.main import app

app()
