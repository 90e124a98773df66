"""Coordinates ingestion, storage, model edits and recomputation."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, Optional
from uuid import uuid4

from app.schemas import DatasetRecord, RowErrorPayload, SensorReadingPayload
from datastore.dataset_store import DatasetTable, build_default_table
from models.records import (
    AnalysisModel,
    AnalysisResult,
    CalibrationParams,
    ModelSummary,
    SensorReading,
    SummaryStats,
)
from services.aggregator import Aggregator
from services.calculation import compute
from services.ingestion import parse_readings
from services.mock_data import generate_mock_readings
from services.registry import ModelRegistry, load_models_file
from services.reporting import Report, build_chart_rows, build_report
from settings import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatasetSummary:
    dataset_id: str
    reading_count: int
    overall: SummaryStats
    models: list[ModelSummary]


@dataclass(frozen=True)
class _CachedAnalysis:
    revision: int
    models: tuple[AnalysisModel, ...]
    readings: list[SensorReading]
    results: list[AnalysisResult]


class AnalysisService:
    """Owns the dataset store and model registry and recomputes on change.

    Results are cached per dataset together with the registry revision they
    were computed against; a request after a model edit recomputes, any other
    request reuses the cached list.
    """

    def __init__(
        self,
        table: DatasetTable,
        registry: ModelRegistry,
        aggregator: Aggregator,
        report_detail_limit: int = 20,
    ) -> None:
        self.table = table
        self.registry = registry
        self.aggregator = aggregator
        self.report_detail_limit = report_detail_limit
        self._cache: Dict[str, _CachedAnalysis] = {}
        self._cache_lock = Lock()

    def ingest_csv(self, filename: Optional[str], contents: bytes | str) -> DatasetRecord:
        """Parse an uploaded CSV and store the readings it contains."""
        if isinstance(contents, bytes):
            contents = contents.decode("utf-8-sig")
        if not contents.strip():
            raise ValueError("Uploaded file is empty.")

        dataset_id = str(uuid4())
        name = Path(filename or "upload.csv").name
        outcome = parse_readings(io.StringIO(contents, newline=""), dataset_id=dataset_id)
        if not outcome.readings:
            raise ValueError("CSV file contains no valid readings.")

        record = DatasetRecord(
            dataset_id=dataset_id,
            filename=name,
            uploaded_at=datetime.now(timezone.utc),
            readings=[SensorReadingPayload.from_domain(r) for r in outcome.readings],
            errors=[
                RowErrorPayload(row_number=e.row_number, reason=e.reason)
                for e in outcome.errors
            ],
        )
        self.table.put_item(record)
        logger.info(
            "Ingested dataset",
            extra={
                "dataset_id": dataset_id,
                "upload_name": name,
                "reading_count": len(outcome.readings),
                "error_count": len(outcome.errors),
            },
        )
        return record

    def create_mock_dataset(self, seed: Optional[int] = None, count: int = 100) -> DatasetRecord:
        seed = get_settings().mock_seed if seed is None else seed
        readings = generate_mock_readings(seed=seed, count=count)
        record = DatasetRecord(
            dataset_id=str(uuid4()),
            filename=f"mock-seed-{seed}.csv",
            uploaded_at=datetime.now(timezone.utc),
            readings=[SensorReadingPayload.from_domain(r) for r in readings],
        )
        self.table.put_item(record)
        logger.info(
            "Generated mock dataset",
            extra={"dataset_id": record.dataset_id, "reading_count": len(readings)},
        )
        return record

    def fetch_dataset(self, dataset_id: str) -> DatasetRecord:
        record = self.table.get_item(dataset_id)
        if record is None:
            raise KeyError(f"Dataset {dataset_id!r} not found.")
        return record

    def list_datasets(self) -> list[DatasetRecord]:
        return sorted(self.table.scan(), key=lambda item: item.uploaded_at, reverse=True)

    def results(self, dataset_id: str) -> list[AnalysisResult]:
        return list(self._analysis(dataset_id).results)

    def summary(self, dataset_id: str) -> DatasetSummary:
        analysis = self._analysis(dataset_id)
        return DatasetSummary(
            dataset_id=dataset_id,
            reading_count=len(analysis.readings),
            overall=self.aggregator.aggregate(analysis.results),
            models=self.aggregator.summarize_models(analysis.results, analysis.models),
        )

    def report(self, dataset_id: str) -> Report:
        analysis = self._analysis(dataset_id)
        return build_report(
            analysis.readings,
            analysis.models,
            analysis.results,
            self.aggregator,
            detail_limit=self.report_detail_limit,
        )

    def chart(self, dataset_id: str) -> list[dict]:
        analysis = self._analysis(dataset_id)
        return build_chart_rows(analysis.readings, analysis.results, analysis.models)

    def list_models(self) -> tuple[AnalysisModel, ...]:
        return self.registry.list_models()

    def update_model_params(self, model_id: str, params: CalibrationParams) -> AnalysisModel:
        return self.registry.update_params(model_id, params)

    def reset_models(self) -> None:
        self.registry.reset()

    def _analysis(self, dataset_id: str) -> _CachedAnalysis:
        revision, models = self.registry.snapshot()
        with self._cache_lock:
            cached = self._cache.get(dataset_id)
        if cached is not None and cached.revision == revision:
            return cached

        readings = self.fetch_dataset(dataset_id).to_readings()
        analysis = _CachedAnalysis(
            revision=revision,
            models=models,
            readings=readings,
            results=compute(readings, models),
        )
        with self._cache_lock:
            self._cache[dataset_id] = analysis
        logger.debug(
            "Recomputed dataset results",
            extra={"dataset_id": dataset_id, "revision": revision},
        )
        return analysis


@lru_cache
def build_default_service() -> AnalysisService:
    """Factory that wires the service from settings."""
    settings = get_settings()
    models = load_models_file(Path(settings.models_path)) if settings.models_path else None
    return AnalysisService(
        table=build_default_table(),
        registry=ModelRegistry(models),
        aggregator=Aggregator(),
        report_detail_limit=settings.report_detail_limit,
    )
