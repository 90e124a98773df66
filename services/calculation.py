"""Calibration and anomaly classification for sensor readings."""

from __future__ import annotations

import logging
import math
from dataclasses import fields
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from models.records import (
    CHANNELS,
    AnalysisModel,
    AnalysisResult,
    ResultStatus,
    SensorReading,
)

logger = logging.getLogger(__name__)

_WATER_CORRECTION_WEIGHT = 10
_TWO_PLACES = Decimal("0.01")


class ConfigurationError(ValueError):
    """Raised when a model cannot be applied to the readings it is given."""


def round_value(value: float) -> float:
    """Round to two decimals, halves away from zero, on the exact float value."""
    return float(Decimal(value).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def validate_model(model: AnalysisModel) -> None:
    if model.source_channel not in CHANNELS:
        raise ConfigurationError(
            f"Model {model.id!r} references unknown channel {model.source_channel!r}."
        )
    for field in fields(model.params):
        if not math.isfinite(getattr(model.params, field.name)):
            raise ConfigurationError(
                f"Model {model.id!r} has a non-finite {field.name}."
            )
    if model.params.percent_cpo == 0:
        raise ConfigurationError(
            f"Model {model.id!r} has percent_cpo=0; normalized values would be undefined."
        )


def evaluate(reading: SensorReading, model: AnalysisModel) -> AnalysisResult:
    """Classify and calibrate a single reading against a single model."""
    raw_value = reading.channel_value(model.source_channel)
    if raw_value is None:
        raise ConfigurationError(
            f"Reading {reading.id!r} has no channel {model.source_channel!r}."
        )

    params = model.params
    if raw_value < params.min_threshold:
        return AnalysisResult(
            reading_id=reading.id,
            model_id=model.id,
            timestamp_sec=reading.timestamp_sec,
            calculated_value=0,
            additional_value=None,
            status=ResultStatus.anomaly,
        )

    main = raw_value * params.m_cpo + params.zero - params.m_agua * _WATER_CORRECTION_WEIGHT
    secondary = (main / params.percent_cpo) * 100
    if not (math.isfinite(main) and math.isfinite(secondary)):
        raise ConfigurationError(
            f"Model {model.id!r} produced a non-finite value for reading {reading.id!r}."
        )

    return AnalysisResult(
        reading_id=reading.id,
        model_id=model.id,
        timestamp_sec=reading.timestamp_sec,
        calculated_value=round_value(main),
        additional_value=round_value(secondary),
        status=ResultStatus.ok,
    )


def compute(
    readings: Sequence[SensorReading], models: Sequence[AnalysisModel]
) -> list[AnalysisResult]:
    """Evaluate every reading against every model, readings outer and models inner.

    The whole model set is validated up front, so a ``ConfigurationError``
    never leaves a partially built result list behind.
    """
    for model in models:
        validate_model(model)

    results = [evaluate(reading, model) for reading in readings for model in models]

    logger.debug(
        "Computed analysis results",
        extra={
            "reading_count": len(readings),
            "result_count": len(results),
            "anomaly_count": sum(
                1 for result in results if result.status is ResultStatus.anomaly
            ),
        },
    )
    return results
