"""Unit tests for the calibration engine."""

from __future__ import annotations

from dataclasses import replace

import pytest

from models.records import AnalysisModel, CalibrationParams, ResultStatus, SensorReading
from services.calculation import ConfigurationError, compute, round_value

_PARAMS = CalibrationParams(
    m_cpo=1.2,
    m_agua=0.05,
    m_arcilla=0.1,
    m_pasta=0.0,
    percent_cpo=98,
    percent_agua=1.5,
    percent_arcilla=0.5,
    zero=-10,
    min_threshold=50,
)
_MODEL = AnalysisModel(id="cb800", name="CB800", source_channel="channel_4_mW", params=_PARAMS)


def _reading(reading_id: str, channel_4: float, timestamp: int = 28800) -> SensorReading:
    return SensorReading(
        id=reading_id,
        timestamp_sec=timestamp,
        channel_4_mW=channel_4,
        channel_5_mW=110.0,
        channel_6_mW=90.0,
        channel_7_mW=95.0,
        channel_8_mW=105.0,
    )


def test_compute_applies_linear_calibration() -> None:
    [result] = compute([_reading("r1", 100.0)], [_MODEL])

    assert result.status is ResultStatus.ok
    assert result.calculated_value == 109.5
    assert result.additional_value == 111.73
    assert result.reading_id == "r1"
    assert result.model_id == "cb800"
    assert result.id == "r1-cb800"
    assert result.timestamp_sec == 28800


def test_reading_below_threshold_is_anomaly() -> None:
    [result] = compute([_reading("r1", 10.0)], [_MODEL])

    assert result.status is ResultStatus.anomaly
    assert result.status.value == "XXX"
    assert result.calculated_value == 0
    assert result.additional_value is None


def test_anomaly_ignores_other_parameters() -> None:
    odd_model = replace(_MODEL, params=replace(_PARAMS, m_cpo=-3.0, zero=1e6, m_agua=42.0))

    [result] = compute([_reading("r1", 49.99)], [odd_model])

    assert result.status is ResultStatus.anomaly
    assert result.calculated_value == 0
    assert result.additional_value is None


def test_value_equal_to_threshold_is_valid() -> None:
    [result] = compute([_reading("r1", 50.0)], [_MODEL])

    assert result.status is ResultStatus.ok
    assert result.calculated_value == 49.5


def test_result_count_and_order_follow_readings_then_models() -> None:
    second_model = AnalysisModel(
        id="cb850", name="CB850", source_channel="channel_5_mW", params=_PARAMS
    )
    readings = [_reading(f"r{i}", 100.0 + i, timestamp=28800 + i * 60) for i in range(3)]

    results = compute(readings, [_MODEL, second_model])

    assert len(results) == len(readings) * 2
    assert [(r.reading_id, r.model_id) for r in results] == [
        ("r0", "cb800"),
        ("r0", "cb850"),
        ("r1", "cb800"),
        ("r1", "cb850"),
        ("r2", "cb800"),
        ("r2", "cb850"),
    ]
    assert len({r.id for r in results}) == len(results)


def test_compute_is_deterministic() -> None:
    readings = [_reading(f"r{i}", 40.0 + i * 7.3) for i in range(10)]

    assert compute(readings, [_MODEL]) == compute(readings, [_MODEL])


def test_unused_coefficients_do_not_affect_output() -> None:
    tweaked = replace(
        _MODEL,
        params=replace(_PARAMS, m_arcilla=9.0, m_pasta=9.0, percent_agua=9.0, percent_arcilla=9.0),
    )
    readings = [_reading("r1", 100.0), _reading("r2", 75.25)]

    assert compute(readings, [tweaked]) == compute(readings, [_MODEL])


def test_zero_percent_cpo_raises_configuration_error() -> None:
    broken = replace(_MODEL, params=replace(_PARAMS, percent_cpo=0))

    with pytest.raises(ConfigurationError, match="percent_cpo"):
        compute([_reading("r1", 100.0)], [_MODEL, broken])


def test_zero_percent_cpo_raises_even_when_every_reading_is_anomalous() -> None:
    broken = replace(_MODEL, params=replace(_PARAMS, percent_cpo=0))

    with pytest.raises(ConfigurationError):
        compute([_reading("r1", 1.0)], [broken])


def test_unknown_channel_raises_configuration_error() -> None:
    broken = replace(_MODEL, source_channel="channel_9_mW")

    with pytest.raises(ConfigurationError, match="channel_9_mW"):
        compute([_reading("r1", 100.0)], [broken])


def test_configuration_error_is_a_value_error() -> None:
    assert issubclass(ConfigurationError, ValueError)


def test_compute_with_no_readings_returns_empty_list() -> None:
    assert compute([], [_MODEL]) == []


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0.125, 0.13),
        (-0.125, -0.13),
        (2.675, 2.67),
        (1.005, 1.0),
        (111.734693877551, 111.73),
        (3.0, 3.0),
    ],
)
def test_round_value_rounds_half_away_from_zero_on_exact_binary_value(
    value: float, expected: float
) -> None:
    assert round_value(value) == expected


def test_time_hours_is_derived_from_timestamp() -> None:
    assert _reading("r1", 100.0, timestamp=29700).time_hours == 8.25


@pytest.mark.parametrize(
    "overrides",
    [{"m_cpo": float("nan")}, {"zero": float("inf")}, {"percent_cpo": float("-inf")}],
)
def test_non_finite_coefficient_raises_configuration_error(overrides) -> None:
    broken = replace(_MODEL, params=replace(_PARAMS, **overrides))

    with pytest.raises(ConfigurationError, match="non-finite"):
        compute([_reading("r1", 100.0)], [broken])
