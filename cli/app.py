from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from app.schemas import (
    DatasetSummaryPayload,
    ModelSummaryPayload,
    RowErrorPayload,
    SummaryStatsPayload,
)
from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_models, render_summary, render_upload
from logging_config import configure_logging
from services.aggregator import Aggregator
from services.calculation import ConfigurationError, compute
from services.ingestion import parse_readings
from services.registry import ModelRegistry, load_models_file


@dataclass
class CLIState:
    config: CLIConfig
    _client: Optional[ApiClient] = None

    @property
    def client(self) -> ApiClient:
        if self._client is None:
            self._client = ApiClient(self.config)
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()


app = typer.Typer(
    help="Utilities for the SensorFlow calibration and anomaly service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        _fail("CLI state is uninitialized.")
    return state


def _fail(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


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
        help="HTTP timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    state = CLIState(config=load_config(base_url=base_url, timeout=timeout))
    ctx.obj = state
    ctx.call_on_close(state.close)


@app.command("upload")
def upload_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to CSV file."),
    show_summary: bool = typer.Option(
        True,
        "--summary/--no-summary",
        help="Fetch and display statistics once the upload is accepted.",
    ),
) -> None:
    """Upload a CSV file of channel readings."""
    state = _get_state(ctx)
    typer.echo(f"Uploading {file} to {state.config.base_url} ...")
    payload = state.client.upload_file(file)
    typer.secho(f"Upload accepted. dataset_id={payload['dataset_id']}", fg=typer.colors.GREEN)
    render_upload(payload)

    if not show_summary:
        return
    typer.echo()
    render_summary(state.client.get_summary(payload["dataset_id"]))


@app.command("mock")
def mock_command(
    ctx: typer.Context,
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for the generated readings."),
    count: int = typer.Option(100, "--count", min=1, help="Number of readings to generate."),
) -> None:
    """Create a reproducible demo dataset on the server."""
    state = _get_state(ctx)
    payload = state.client.create_mock(seed=seed, count=count)
    render_upload(payload)


@app.command("summary")
def summary_command(
    ctx: typer.Context,
    dataset_id: str = typer.Argument(..., help="Identifier returned from the upload command."),
) -> None:
    """Fetch overall and per-model statistics for a dataset."""
    state = _get_state(ctx)
    render_summary(state.client.get_summary(dataset_id))


@app.command("models")
def models_command(ctx: typer.Context) -> None:
    """List the calibration models active on the server."""
    state = _get_state(ctx)
    render_models(state.client.list_models())


@app.command("analyze")
def analyze_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to CSV file."),
    models_path: Optional[Path] = typer.Option(
        None,
        "--models",
        exists=True,
        dir_okay=False,
        help="JSON file with calibration models (defaults to the built-in set).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Analyze a CSV file locally without contacting the service."""
    if verbose:
        configure_logging("DEBUG", force=True)
    try:
        registry = ModelRegistry(load_models_file(models_path) if models_path else None)
        with file.open("r", encoding="utf-8-sig", newline="") as handle:
            outcome = parse_readings(handle)
        models = registry.list_models()
        results = compute(outcome.readings, models)
    except ConfigurationError as exc:
        _fail(f"Invalid model configuration: {exc}")
    except ValueError as exc:
        _fail(f"Could not read {file}: {exc}")

    aggregator = Aggregator()
    render_upload(
        {
            "dataset_id": file.name,
            "reading_count": len(outcome.readings),
            "errors": [
                RowErrorPayload(row_number=e.row_number, reason=e.reason).model_dump()
                for e in outcome.errors
            ],
        }
    )
    typer.echo()
    summary = DatasetSummaryPayload(
        dataset_id=file.name,
        reading_count=len(outcome.readings),
        overall=SummaryStatsPayload.from_domain(aggregator.aggregate(results)),
        models=[
            ModelSummaryPayload.from_domain(item)
            for item in aggregator.summarize_models(results, models)
        ],
    )
    render_summary(summary.model_dump(mode="json"))
