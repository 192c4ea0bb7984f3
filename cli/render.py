from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


_STATUS_COLORS = {
    "optimal": typer.colors.GREEN,
    "warning": typer.colors.YELLOW,
    "critical": typer.colors.RED,
}


def render_classification(payload: Dict[str, Any]) -> None:
    echo_heading("Classification")
    status = payload.get("status")
    typer.secho(f"status: {status}", fg=_STATUS_COLORS.get(status))
    echo_key_values(
        [
            ("health_score", payload.get("health_score")),
            ("growth_prediction", payload.get("growth_prediction")),
        ]
    )


def render_export(path: Path, size: int) -> None:
    echo_heading("Export")
    echo_key_values([("file", path), ("bytes", size)])
