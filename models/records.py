"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

CHANNELS = (
    "channel_4_mW",
    "channel_5_mW",
    "channel_6_mW",
    "channel_7_mW",
    "channel_8_mW",
)


class ResultStatus(str, Enum):
    """Classification attached to every computed result."""

    ok = "OK"
    anomaly = "XXX"
    # Part of the status domain but never produced by the engine.
    reserved = "..."


@dataclass(frozen=True, slots=True)
class SensorReading:
    """A single timestamped sample carrying the five channel values."""

    id: str
    timestamp_sec: int
    channel_4_mW: float
    channel_5_mW: float
    channel_6_mW: float
    channel_7_mW: float
    channel_8_mW: float

    @property
    def time_hours(self) -> float:
        return round(self.timestamp_sec / 3600, 4)

    def channel_value(self, channel: str) -> Optional[float]:
        if channel not in CHANNELS:
            return None
        return getattr(self, channel)


@dataclass(frozen=True, slots=True)
class CalibrationParams:
    """Coefficients for one model.

    ``m_arcilla``, ``m_pasta``, ``percent_agua`` and ``percent_arcilla`` are
    carried along with the others but not read by the current formula.
    """

    m_cpo: float
    m_agua: float
    m_arcilla: float
    m_pasta: float
    percent_cpo: float
    percent_agua: float
    percent_arcilla: float
    zero: float
    min_threshold: float


@dataclass(frozen=True, slots=True)
class AnalysisModel:
    id: str
    name: str
    source_channel: str
    params: CalibrationParams


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Outcome of evaluating one reading against one model."""

    reading_id: str
    model_id: str
    timestamp_sec: int
    calculated_value: float
    additional_value: Optional[float]
    status: ResultStatus

    @property
    def id(self) -> str:
        return f"{self.reading_id}-{self.model_id}"


@dataclass(frozen=True, slots=True)
class SummaryStats:
    min_value: float = 0.0
    max_value: float = 0.0
    avg_value: float = 0.0
    std_dev: float = 0.0


@dataclass(frozen=True, slots=True)
class ModelSummary:
    """Statistics for a single model plus raw status counts."""

    model_id: str
    stats: SummaryStats
    ok_count: int = 0
    anomaly_count: int = 0
