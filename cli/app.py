from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_classification, render_export


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the sensor telemetry export service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("export")
def export_command(
    ctx: typer.Context,
    request_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="JSON export request."
    ),
    export_format: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Override the request's format (csv, json or excel).",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        file_okay=False,
        help="Directory to write the export into.",
    ),
) -> None:
    """Request an export and save it under the filename the service chose."""
    state = _get_state(ctx)
    try:
        request = json.loads(request_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"{request_file} is not valid JSON: {exc}") from exc
    if not isinstance(request, dict):
        raise typer.BadParameter(f"{request_file} must contain a JSON object.")
    if export_format is not None:
        request["format"] = export_format

    typer.echo(f"Requesting {request.get('format', 'csv')} export from {state.config.base_url} ...")
    filename, content = state.client.export(request)

    target_dir = output if output is not None else state.config.output_dir
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / Path(filename).name
    target.write_bytes(content)
    render_export(target, len(content))


@app.command("classify")
def classify_command(
    ctx: typer.Context,
    value: float = typer.Argument(..., help="Measured value."),
    minimum: float = typer.Option(..., "--min", help="Absolute minimum."),
    maximum: float = typer.Option(..., "--max", help="Absolute maximum."),
    optimal_min: float = typer.Option(..., "--optimal-min", help="Lower edge of the optimal band."),
    optimal_max: float = typer.Option(..., "--optimal-max", help="Upper edge of the optimal band."),
) -> None:
    """Classify a value against a threshold band."""
    state = _get_state(ctx)
    payload = state.client.classify(
        value,
        {
            "min": minimum,
            "max": maximum,
            "optimal_min": optimal_min,
            "optimal_max": optimal_max,
        },
    )
    render_classification(payload)
