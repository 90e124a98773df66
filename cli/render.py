from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_upload(payload: Dict[str, Any]) -> None:
    echo_heading("Dataset")
    echo_key_values(
        [
            ("dataset_id", payload.get("dataset_id")),
            ("reading_count", payload.get("reading_count")),
        ]
    )
    errors = payload.get("errors") or []
    if errors:
        typer.echo("skipped rows:")
        for error in errors:
            typer.echo(f"  - row {error.get('row_number')}: {error.get('reason')}")


def _stats_line(stats: Dict[str, Any]) -> str:
    return (
        f"min={stats.get('min')} max={stats.get('max')} "
        f"avg={stats.get('avg')} std_dev={stats.get('std_dev')}"
    )


def render_summary(payload: Dict[str, Any]) -> None:
    echo_heading("Summary")
    echo_key_values(
        [
            ("dataset_id", payload.get("dataset_id")),
            ("reading_count", payload.get("reading_count")),
            ("overall", _stats_line(payload.get("overall") or {})),
        ]
    )

    typer.echo()
    echo_heading("Models")
    models = payload.get("models") or []
    if not models:
        typer.echo("No models configured.")
        return
    for item in models:
        anomalies = item.get("anomaly_count") or 0
        line = (
            f"  - {item.get('model_id')}: {_stats_line(item.get('stats') or {})} "
            f"ok={item.get('ok_count')} anomalies={anomalies}"
        )
        typer.secho(line, fg=typer.colors.RED if anomalies else None)


def render_models(models: List[Dict[str, Any]]) -> None:
    echo_heading("Calibration models")
    for model in models:
        params = model.get("params") or {}
        typer.echo(
            f"  - {model.get('id')} ({model.get('name')}) <- {model.get('source_channel')}: "
            f"m_cpo={params.get('m_cpo')} m_agua={params.get('m_agua')} "
            f"zero={params.get('zero')} percent_cpo={params.get('percent_cpo')} "
            f"min_threshold={params.get('min_threshold')}"
        )
