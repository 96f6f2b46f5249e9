"""Allow ``python -m relaynode``."""

from relaynode.cli.main import app

app()
