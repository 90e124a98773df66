"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from app.schemas import (
    AnalysisModelPayload,
    AnalysisResultPayload,
    CalibrationParamsPayload,
    ChartRow,
    DatasetRecord,
    DatasetSummaryPayload,
    DatasetUploadResponse,
    ModelSummaryPayload,
    ReportDetailRowPayload,
    ReportPayload,
    ReportSummaryRowPayload,
    SummaryStatsPayload,
)
from services.analysis import AnalysisService, build_default_service
from services.calculation import ConfigurationError

logger = logging.getLogger(__name__)

router = APIRouter()


def get_service() -> AnalysisService:
    return build_default_service()


def _not_found(exc: KeyError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.args[0])


def _invalid_configuration(exc: ConfigurationError) -> HTTPException:
    logger.warning("Rejected model configuration: %s", exc)
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))


def _upload_response(record: DatasetRecord) -> DatasetUploadResponse:
    return DatasetUploadResponse(
        dataset_id=record.dataset_id,
        reading_count=len(record.readings),
        errors=record.errors,
    )


@router.post(
    "/datasets",
    status_code=status.HTTP_201_CREATED,
    response_model=DatasetUploadResponse,
    summary="Upload a CSV file of channel readings.",
)
async def upload_dataset(
    file: UploadFile = File(..., description="CSV file with a time column and channels 4 to 8."),
    service: AnalysisService = Depends(get_service),
) -> DatasetUploadResponse:
    try:
        contents = await file.read()
        record = service.ingest_csv(file.filename, contents)
    except (ValueError, UnicodeDecodeError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    finally:
        await file.close()
    return _upload_response(record)


@router.post(
    "/datasets/mock",
    status_code=status.HTTP_201_CREATED,
    response_model=DatasetUploadResponse,
    summary="Generate a reproducible demo dataset.",
)
async def create_mock_dataset(
    seed: Optional[int] = Query(None, description="Random seed; defaults to SENSORFLOW_MOCK_SEED."),
    count: int = Query(100, ge=1, le=10_000),
    service: AnalysisService = Depends(get_service),
) -> DatasetUploadResponse:
    return _upload_response(service.create_mock_dataset(seed=seed, count=count))


@router.get(
    "/datasets/{dataset_id}/results",
    response_model=List[AnalysisResultPayload],
    summary="Calibrated and classified results for every reading and model.",
)
async def get_results(
    dataset_id: str,
    service: AnalysisService = Depends(get_service),
) -> List[AnalysisResultPayload]:
    try:
        results = service.results(dataset_id)
    except KeyError as exc:
        raise _not_found(exc) from exc
    except ConfigurationError as exc:
        raise _invalid_configuration(exc) from exc
    return [AnalysisResultPayload.from_domain(result) for result in results]


@router.get(
    "/datasets/{dataset_id}/summary",
    response_model=DatasetSummaryPayload,
    summary="Overall and per-model statistics over valid results.",
)
async def get_summary(
    dataset_id: str,
    service: AnalysisService = Depends(get_service),
) -> DatasetSummaryPayload:
    try:
        summary = service.summary(dataset_id)
    except KeyError as exc:
        raise _not_found(exc) from exc
    except ConfigurationError as exc:
        raise _invalid_configuration(exc) from exc
    return DatasetSummaryPayload(
        dataset_id=summary.dataset_id,
        reading_count=summary.reading_count,
        overall=SummaryStatsPayload.from_domain(summary.overall),
        models=[ModelSummaryPayload.from_domain(item) for item in summary.models],
    )


@router.get(
    "/datasets/{dataset_id}/report",
    response_model=ReportPayload,
    summary="Report tables: per-model summary, detail extract and anomalies.",
)
async def get_report(
    dataset_id: str,
    service: AnalysisService = Depends(get_service),
) -> ReportPayload:
    try:
        report = service.report(dataset_id)
    except KeyError as exc:
        raise _not_found(exc) from exc
    except ConfigurationError as exc:
        raise _invalid_configuration(exc) from exc
    return ReportPayload(
        dataset_id=dataset_id,
        generated_at=report.generated_at,
        reading_count=report.reading_count,
        summary=[
            ReportSummaryRowPayload(
                model_name=row.model_name,
                source_channel=row.source_channel,
                summary=ModelSummaryPayload.from_domain(row.summary),
            )
            for row in report.summary
        ],
        details=[
            ReportDetailRowPayload(
                time_hours=row.time_hours,
                model_name=row.model_name,
                calculated_value=row.calculated_value,
                status=row.status,
            )
            for row in report.details
        ],
        anomalies=[AnalysisResultPayload.from_domain(r) for r in report.anomalies],
    )


@router.get(
    "/datasets/{dataset_id}/chart",
    response_model=List[ChartRow],
    summary="Time-aligned rows of raw channels and calculated values.",
)
async def get_chart(
    dataset_id: str,
    service: AnalysisService = Depends(get_service),
) -> List[ChartRow]:
    try:
        return service.chart(dataset_id)
    except KeyError as exc:
        raise _not_found(exc) from exc
    except ConfigurationError as exc:
        raise _invalid_configuration(exc) from exc


@router.get(
    "/models",
    response_model=List[AnalysisModelPayload],
    summary="List the active calibration models in order.",
)
async def list_models(
    service: AnalysisService = Depends(get_service),
) -> List[AnalysisModelPayload]:
    return [AnalysisModelPayload.from_domain(model) for model in service.list_models()]


@router.put(
    "/models/{model_id}/params",
    response_model=AnalysisModelPayload,
    summary="Replace a model's calibration parameters.",
)
async def update_model_params(
    model_id: str,
    params: CalibrationParamsPayload,
    service: AnalysisService = Depends(get_service),
) -> AnalysisModelPayload:
    try:
        model = service.update_model_params(model_id, params.to_domain())
    except KeyError as exc:
        raise _not_found(exc) from exc
    except ConfigurationError as exc:
        raise _invalid_configuration(exc) from exc
    return AnalysisModelPayload.from_domain(model)


@router.post(
    "/models/reset",
    response_model=List[AnalysisModelPayload],
    summary="Restore the default calibration models.",
)
async def reset_models(
    service: AnalysisService = Depends(get_service),
) -> List[AnalysisModelPayload]:
    service.reset_models()
    return [AnalysisModelPayload.from_domain(model) for model in service.list_models()]


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
