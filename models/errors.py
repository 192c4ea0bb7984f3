"""Exception types raised by the telemetry core."""

from __future__ import annotations

from typing import Any


class TelemetryError(Exception):
    """Base class for errors surfaced by the telemetry core."""


class InvalidIdentifierError(TelemetryError, ValueError):
    """An empty or non-string identifier was passed to a lookup."""

    def __init__(self, identifier: Any, role: str = "sensor id") -> None:
        super().__init__(f"Invalid {role}: expected a non-empty string, got {identifier!r}.")
        self.identifier = identifier
        self.role = role


class UnsupportedFormatError(TelemetryError, ValueError):
    """The requested export format is not one of the recognized formats."""

    def __init__(self, export_format: Any) -> None:
        super().__init__(f"Unsupported export format: {export_format!r}.")
        self.export_format = export_format


class ExportFailedError(TelemetryError):
    """An export could not be produced; ``__cause__`` carries the underlying error."""


def require_identifier(identifier: Any, role: str = "sensor id") -> str:
    if not isinstance(identifier, str) or not identifier.strip():
        raise InvalidIdentifierError(identifier, role)
    return identifier
