from __future__ import annotations

import re
from typing import Any, Dict, Tuple

import httpx
import typer

from cli.config import CLIConfig

_FILENAME_PATTERN = re.compile(r'filename="?([^";]+)"?')


class ApiClient:
    """Minimal HTTP client for the telemetry export service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def export(self, request: Dict[str, Any]) -> Tuple[str, bytes]:
        """Post an export request and return the server-side filename and body."""
        try:
            response = self._client.post("/exports", json=request)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        disposition = response.headers.get("content-disposition", "")
        match = _FILENAME_PATTERN.search(disposition)
        if match is None:
            raise typer.BadParameter("Export response did not include a filename.")
        return match.group(1), response.content

    def classify(self, value: float, thresholds: Dict[str, float]) -> Dict[str, Any]:
        try:
            response = self._client.post(
                "/sensors/classify",
                json={"value": value, "thresholds": thresholds},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
