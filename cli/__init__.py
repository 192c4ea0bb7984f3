"""CLI package for interacting with the sensor telemetry export service."""

# The Typer instance stays in ``cli.app`` and is not re-exported here, so that
# ``cli.app`` keeps resolving to the module that tests patch attributes on.

__all__: list[str] = []
