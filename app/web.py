from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from services.analysis import AnalysisService, build_default_service
from services.calculation import ConfigurationError


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def get_service() -> AnalysisService:
    return build_default_service()


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    service: AnalysisService = Depends(get_service),
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {"datasets": service.list_datasets()},
    )


@router.get("/ui/datasets/{dataset_id}", name="ui_dataset_detail", response_class=HTMLResponse)
async def ui_dataset_detail(
    request: Request,
    dataset_id: str,
    service: AnalysisService = Depends(get_service),
) -> HTMLResponse:
    try:
        dataset = service.fetch_dataset(dataset_id)
        report = service.report(dataset_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.args[0],
        ) from exc
    except ConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc

    return templates.TemplateResponse(
        request,
        "ui/detail.html",
        {
            "dataset": dataset,
            "report": report,
            "anomaly_count": len(report.anomalies),
        },
    )
