"""Pydantic schemas for the HTTP API layer and persisted records."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.records import (
    CHANNELS,
    AnalysisModel,
    AnalysisResult,
    CalibrationParams,
    ModelSummary,
    ResultStatus,
    SensorReading,
    SummaryStats,
)


class CalibrationParamsPayload(BaseModel):
    """Full coefficient set; edits always replace every field."""

    m_cpo: float
    m_agua: float
    m_arcilla: float = 0.0
    m_pasta: float = 0.0
    percent_cpo: float
    percent_agua: float = 0.0
    percent_arcilla: float = 0.0
    zero: float
    min_threshold: float

    @classmethod
    def from_domain(cls, params: CalibrationParams) -> "CalibrationParamsPayload":
        return cls(
            m_cpo=params.m_cpo,
            m_agua=params.m_agua,
            m_arcilla=params.m_arcilla,
            m_pasta=params.m_pasta,
            percent_cpo=params.percent_cpo,
            percent_agua=params.percent_agua,
            percent_arcilla=params.percent_arcilla,
            zero=params.zero,
            min_threshold=params.min_threshold,
        )

    def to_domain(self) -> CalibrationParams:
        return CalibrationParams(**self.model_dump())


class AnalysisModelPayload(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    source_channel: str
    params: CalibrationParamsPayload

    @field_validator("source_channel")
    @classmethod
    def _known_channel(cls, value: str) -> str:
        if value not in CHANNELS:
            raise ValueError(f"unknown channel {value!r}; expected one of {', '.join(CHANNELS)}")
        return value

    @classmethod
    def from_domain(cls, model: AnalysisModel) -> "AnalysisModelPayload":
        return cls(
            id=model.id,
            name=model.name,
            source_channel=model.source_channel,
            params=CalibrationParamsPayload.from_domain(model.params),
        )

    def to_domain(self) -> AnalysisModel:
        return AnalysisModel(
            id=self.id,
            name=self.name,
            source_channel=self.source_channel,
            params=self.params.to_domain(),
        )


class SensorReadingPayload(BaseModel):
    id: str
    timestamp_sec: int = Field(..., ge=0)
    time_hours: float
    channel_4_mW: float
    channel_5_mW: float
    channel_6_mW: float
    channel_7_mW: float
    channel_8_mW: float

    @classmethod
    def from_domain(cls, reading: SensorReading) -> "SensorReadingPayload":
        return cls(
            id=reading.id,
            timestamp_sec=reading.timestamp_sec,
            time_hours=reading.time_hours,
            channel_4_mW=reading.channel_4_mW,
            channel_5_mW=reading.channel_5_mW,
            channel_6_mW=reading.channel_6_mW,
            channel_7_mW=reading.channel_7_mW,
            channel_8_mW=reading.channel_8_mW,
        )

    def to_domain(self) -> SensorReading:
        return SensorReading(
            id=self.id,
            timestamp_sec=self.timestamp_sec,
            channel_4_mW=self.channel_4_mW,
            channel_5_mW=self.channel_5_mW,
            channel_6_mW=self.channel_6_mW,
            channel_7_mW=self.channel_7_mW,
            channel_8_mW=self.channel_8_mW,
        )


class RowErrorPayload(BaseModel):
    """Details about a row that failed validation or parsing."""

    row_number: int = Field(..., ge=1)
    reason: str


class DatasetRecord(BaseModel):
    """A stored batch of readings together with its ingestion errors."""

    dataset_id: str
    filename: str
    uploaded_at: datetime
    readings: List[SensorReadingPayload] = Field(default_factory=list)
    errors: List[RowErrorPayload] = Field(default_factory=list)

    def to_readings(self) -> list[SensorReading]:
        return [reading.to_domain() for reading in self.readings]


class DatasetUploadResponse(BaseModel):
    """Response payload after a dataset has been ingested."""

    dataset_id: str = Field(..., description="Generated identifier for the dataset.")
    reading_count: int = Field(..., ge=0)
    errors: List[RowErrorPayload] = Field(default_factory=list)


class AnalysisResultPayload(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    id: str
    reading_id: str
    model_id: str
    timestamp_sec: int
    calculated_value: float
    additional_value: Optional[float] = None
    status: ResultStatus

    @classmethod
    def from_domain(cls, result: AnalysisResult) -> "AnalysisResultPayload":
        return cls(
            id=result.id,
            reading_id=result.reading_id,
            model_id=result.model_id,
            timestamp_sec=result.timestamp_sec,
            calculated_value=result.calculated_value,
            additional_value=result.additional_value,
            status=result.status,
        )


class SummaryStatsPayload(BaseModel):
    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0
    std_dev: float = 0.0

    @classmethod
    def from_domain(cls, stats: SummaryStats) -> "SummaryStatsPayload":
        return cls(
            min=stats.min_value,
            max=stats.max_value,
            avg=stats.avg_value,
            std_dev=stats.std_dev,
        )


class ModelSummaryPayload(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    stats: SummaryStatsPayload
    ok_count: int = Field(..., ge=0)
    anomaly_count: int = Field(..., ge=0)

    @classmethod
    def from_domain(cls, summary: ModelSummary) -> "ModelSummaryPayload":
        return cls(
            model_id=summary.model_id,
            stats=SummaryStatsPayload.from_domain(summary.stats),
            ok_count=summary.ok_count,
            anomaly_count=summary.anomaly_count,
        )


class DatasetSummaryPayload(BaseModel):
    dataset_id: str
    reading_count: int = Field(..., ge=0)
    overall: SummaryStatsPayload
    models: List[ModelSummaryPayload] = Field(default_factory=list)


class ReportSummaryRowPayload(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_name: str
    source_channel: str
    summary: ModelSummaryPayload


class ReportDetailRowPayload(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    time_hours: str
    model_name: str
    calculated_value: float
    status: ResultStatus


class ReportPayload(BaseModel):
    dataset_id: str
    generated_at: datetime
    reading_count: int = Field(..., ge=0)
    summary: List[ReportSummaryRowPayload] = Field(default_factory=list)
    details: List[ReportDetailRowPayload] = Field(default_factory=list)
    anomalies: List[AnalysisResultPayload] = Field(default_factory=list)


ChartRow = Dict[str, Union[float, int, str, None]]
