"""Unit tests for the aggregation logic."""

from __future__ import annotations

from models.records import (
    AnalysisModel,
    AnalysisResult,
    ResultStatus,
    SummaryStats,
)
from models.defaults import DEFAULT_MODELS
from services.aggregator import Aggregator


def _result(
    value: float,
    status: ResultStatus = ResultStatus.ok,
    model_id: str = "cb800",
    index: int = 0,
) -> AnalysisResult:
    """Helper to build deterministic analysis results."""

    return AnalysisResult(
        reading_id=f"r{index}",
        model_id=model_id,
        timestamp_sec=28800 + index * 300,
        calculated_value=value if status is ResultStatus.ok else 0,
        additional_value=value if status is ResultStatus.ok else None,
        status=status,
    )


def test_aggregate_empty_iterable_returns_zero_summary() -> None:
    aggregator = Aggregator()

    summary = aggregator.aggregate([])

    assert summary == SummaryStats(min_value=0, max_value=0, avg_value=0, std_dev=0)


def test_aggregate_only_anomalies_returns_zero_summary() -> None:
    aggregator = Aggregator()

    summary = aggregator.aggregate([_result(0, ResultStatus.anomaly, index=i) for i in range(3)])

    assert summary == SummaryStats()


def test_aggregate_computes_population_statistics() -> None:
    aggregator = Aggregator()
    results = [_result(float(v), index=v) for v in (3, 1, 5, 2, 4)]

    summary = aggregator.aggregate(results)

    assert summary.min_value == 1.0
    assert summary.max_value == 5.0
    assert summary.avg_value == 3.0
    assert summary.std_dev == 1.41


def test_aggregate_skips_anomalous_and_reserved_results() -> None:
    aggregator = Aggregator()
    results = [
        _result(10.0, index=0),
        _result(0, ResultStatus.anomaly, index=1),
        _result(20.0, index=2),
        AnalysisResult(
            reading_id="r3",
            model_id="cb800",
            timestamp_sec=0,
            calculated_value=-500.0,
            additional_value=None,
            status=ResultStatus.reserved,
        ),
    ]

    summary = aggregator.aggregate(results)

    assert summary.min_value == 10.0
    assert summary.max_value == 20.0
    assert summary.avg_value == 15.0
    assert summary.std_dev == 5.0


def test_aggregate_rounds_outputs_to_two_decimals() -> None:
    aggregator = Aggregator()

    summary = aggregator.aggregate([_result(1.0), _result(1.0, index=1), _result(2.0, index=2)])

    assert summary.avg_value == 1.33
    assert summary.std_dev == 0.47


def test_aggregate_model_counts_anomalies() -> None:
    aggregator = Aggregator()
    results = [
        _result(100.0, model_id="cb800", index=0),
        _result(0, ResultStatus.anomaly, model_id="cb800", index=1),
        _result(0, ResultStatus.anomaly, model_id="cb800", index=2),
        _result(300.0, model_id="cb850", index=0),
    ]

    summary = aggregator.aggregate_model(results, "cb800")

    assert summary.model_id == "cb800"
    assert summary.ok_count == 1
    assert summary.anomaly_count == 2
    assert summary.stats == SummaryStats(
        min_value=100.0, max_value=100.0, avg_value=100.0, std_dev=0.0
    )


def test_summarize_models_follows_model_order() -> None:
    aggregator = Aggregator()
    models: tuple[AnalysisModel, ...] = DEFAULT_MODELS[:2]
    results = [_result(5.0, model_id="cb850"), _result(7.0, model_id="cb800")]

    summaries = aggregator.summarize_models(results, models)

    assert [s.model_id for s in summaries] == ["cb800", "cb850"]
    assert summaries[0].stats.avg_value == 7.0
    assert summaries[1].stats.avg_value == 5.0
