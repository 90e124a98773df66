"""Aggregation logic for analysis results."""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from models.records import (
    AnalysisModel,
    AnalysisResult,
    ModelSummary,
    ResultStatus,
    SummaryStats,
)
from services.calculation import round_value


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(self, results: Iterable[AnalysisResult]) -> SummaryStats:
        values = [
            result.calculated_value
            for result in results
            if result.status is ResultStatus.ok
        ]
        if not values:
            return SummaryStats()

        total = 0.0
        min_value = max_value = values[0]
        for value in values:
            total += value
            if value < min_value:
                min_value = value
            if value > max_value:
                max_value = value

        avg = total / len(values)
        variance = sum((value - avg) ** 2 for value in values) / len(values)

        return SummaryStats(
            min_value=round_value(min_value),
            max_value=round_value(max_value),
            avg_value=round_value(avg),
            std_dev=round_value(math.sqrt(variance)),
        )

    def aggregate_model(
        self, results: Iterable[AnalysisResult], model_id: str
    ) -> ModelSummary:
        """Summarize the results of one model, counting anomalies separately."""
        model_results = [result for result in results if result.model_id == model_id]
        return ModelSummary(
            model_id=model_id,
            stats=self.aggregate(model_results),
            ok_count=sum(1 for r in model_results if r.status is ResultStatus.ok),
            anomaly_count=sum(
                1 for r in model_results if r.status is ResultStatus.anomaly
            ),
        )

    def summarize_models(
        self, results: Sequence[AnalysisResult], models: Iterable[AnalysisModel]
    ) -> list[ModelSummary]:
        return [self.aggregate_model(results, model.id) for model in models]
