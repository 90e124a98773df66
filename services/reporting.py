"""Chart series and report tables built from computed results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from models.records import (
    CHANNELS,
    AnalysisModel,
    AnalysisResult,
    ModelSummary,
    ResultStatus,
    SensorReading,
)
from services.aggregator import Aggregator


@dataclass(frozen=True, slots=True)
class ReportSummaryRow:
    model_name: str
    source_channel: str
    summary: ModelSummary


@dataclass(frozen=True, slots=True)
class ReportDetailRow:
    time_hours: str
    model_name: str
    calculated_value: float
    status: ResultStatus


@dataclass
class Report:
    """Everything needed to render the printable analysis report."""

    generated_at: datetime
    reading_count: int
    summary: list[ReportSummaryRow] = field(default_factory=list)
    details: list[ReportDetailRow] = field(default_factory=list)
    anomalies: list[AnalysisResult] = field(default_factory=list)


def build_chart_rows(
    readings: Sequence[SensorReading],
    results: Sequence[AnalysisResult],
    models: Sequence[AnalysisModel],
) -> list[dict[str, Any]]:
    """Join readings and results on ``timestamp_sec``, one row per timestamp.

    Readings sharing a timestamp collapse onto one row; the later reading and
    result win, matching the order in which they were computed.
    """
    rows: dict[int, dict[str, Any]] = {}
    for reading in readings:
        row: dict[str, Any] = {
            "timestamp_sec": reading.timestamp_sec,
            "time_hours": reading.time_hours,
        }
        row.update({channel: getattr(reading, channel) for channel in CHANNELS})
        rows[reading.timestamp_sec] = row

    names = {model.id: model.name for model in models}
    for result in results:
        row = rows.get(result.timestamp_sec)
        name = names.get(result.model_id)
        if row is None or name is None:
            continue
        row[name] = result.calculated_value
        row[f"{name}_status"] = result.status.value

    return [rows[timestamp] for timestamp in sorted(rows)]


def build_report(
    readings: Sequence[SensorReading],
    models: Sequence[AnalysisModel],
    results: Sequence[AnalysisResult],
    aggregator: Aggregator,
    detail_limit: int = 20,
    generated_at: Optional[datetime] = None,
) -> Report:
    names = {model.id: model.name for model in models}
    summary = [
        ReportSummaryRow(
            model_name=model.name,
            source_channel=model.source_channel,
            summary=model_summary,
        )
        for model, model_summary in zip(models, aggregator.summarize_models(results, models))
    ]
    details = [
        ReportDetailRow(
            time_hours=f"{result.timestamp_sec / 3600:.2f}h",
            model_name=names.get(result.model_id, "N/A"),
            calculated_value=result.calculated_value,
            status=result.status,
        )
        for result in results[:detail_limit]
    ]
    return Report(
        generated_at=generated_at or datetime.now(timezone.utc),
        reading_count=len(readings),
        summary=summary,
        details=details,
        anomalies=[r for r in results if r.status is ResultStatus.anomaly],
    )
