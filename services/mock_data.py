"""Reproducible demo readings for the dashboard and tests."""

from __future__ import annotations

import math
import random

from models.records import CHANNELS, SensorReading

_BASELINES = dict(zip(CHANNELS, (100.0, 110.0, 90.0, 95.0, 105.0)))
_ANOMALY_INDEX = 25
_ANOMALY_CHANNELS = ("channel_4_mW", "channel_5_mW")
_ANOMALY_VALUE = 10.0


def generate_mock_readings(
    seed: int,
    count: int = 100,
    start_sec: int = 8 * 3600,
    step_sec: int = 300,
) -> list[SensorReading]:
    """Build ``count`` readings following a slow sine trend plus seeded noise.

    Reading 25 has channels 4 and 5 forced down to 10 mW so the demo always
    contains at least one anomaly for the models bound to those channels.
    """
    rng = random.Random(seed)
    readings: list[SensorReading] = []
    for index in range(count):
        trend = math.sin(index / 10) * 20
        values = {
            channel: baseline + trend + rng.random() * 5
            for channel, baseline in _BASELINES.items()
        }
        if index == _ANOMALY_INDEX:
            values.update(dict.fromkeys(_ANOMALY_CHANNELS, _ANOMALY_VALUE))
        readings.append(
            SensorReading(
                id=f"mock-{index:03d}",
                timestamp_sec=start_sec + index * step_sec,
                **values,
            )
        )
    return readings
