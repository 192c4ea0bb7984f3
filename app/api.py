"""HTTP route definitions for the service."""

from __future__ import annotations

from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.schemas import (
    ClassifyRequest,
    ClassifyResponse,
    ExportListing,
    ExportRequestBody,
    ExportSensor,
    NormalizeRequest,
    SensorModel,
    SystemStatusRequest,
    SystemStatusResponse,
)
from datastore.threshold_store import ThresholdStore, build_default_threshold_store
from models.errors import ExportFailedError, InvalidIdentifierError
from models.records import Trend
from services.classifier import (
    classify_sensor,
    classify_status,
    classify_trend,
    growth_prediction,
    score_parameter,
    sensor_score,
    system_status,
)
from services.exporter import (
    ExportRequest,
    ExportService,
    SensorRef,
    build_default_exporter,
    series_from_points,
)
from services.normalizer import normalize

router = APIRouter()


def get_exporter() -> ExportService:
    return build_default_exporter()


def get_threshold_store() -> ThresholdStore:
    return build_default_threshold_store()


@router.post(
    "/sensors/{sensor_key}/normalize",
    response_model=SensorModel,
    summary="Normalize an upstream payload for one sensor and classify it.",
)
async def normalize_sensor(
    sensor_key: str,
    body: NormalizeRequest,
    thresholds: ThresholdStore = Depends(get_threshold_store),
    exporter: ExportService = Depends(get_exporter),
) -> SensorModel:
    config = thresholds.config()
    previous = body.previous.to_sensor() if body.previous is not None else None
    try:
        sensor = normalize(
            body.payload,
            sensor_key,
            alt_key=body.alt_key,
            sensor=previous,
            thresholds=config,
            catalog=exporter.catalog,
            tz=exporter.tz,
        )
        band = config.for_sensor(sensor_key)
    except InvalidIdentifierError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    if band is None:
        # No configured band: keep the status, only refresh the trend.
        classified = replace(sensor, trend=classify_trend(sensor.history, sensor.trend or Trend.stable))
        return SensorModel.from_sensor(classified)

    classified = classify_sensor(sensor, band)
    score = sensor_score(classified, band)
    return SensorModel.from_sensor(classified, health_score=score)


@router.post(
    "/sensors/classify",
    response_model=ClassifyResponse,
    summary="Classify a single value against a threshold band.",
)
async def classify_value(body: ClassifyRequest) -> ClassifyResponse:
    band = body.thresholds
    score = score_parameter(body.value, band.optimal_min, band.optimal_max, band.min, band.max)
    return ClassifyResponse(
        status=classify_status(body.value, band.min, band.max, band.optimal_min, band.optimal_max),
        health_score=score,
        growth_prediction=growth_prediction(score),
    )


@router.post(
    "/system/status",
    response_model=SystemStatusResponse,
    summary="Reduce sensor statuses to an overall system status.",
)
async def reduce_system_status(body: SystemStatusRequest) -> SystemStatusResponse:
    return SystemStatusResponse(status=system_status(body.statuses))


@router.post(
    "/exports",
    summary="Export sensor series as CSV, JSON or spreadsheet-compatible CSV.",
    response_class=Response,
)
async def create_export(
    body: ExportRequestBody,
    exporter: ExportService = Depends(get_exporter),
) -> Response:
    sensors = [
        SensorRef(id=sensor.id, name=sensor.name, unit=sensor.unit)
        if isinstance(sensor, ExportSensor)
        else sensor
        for sensor in body.sensors
    ]
    request = ExportRequest(
        format=body.format,
        sensors=sensors,
        start=body.start,
        end=body.end,
        data_type=body.data_type,
    )
    try:
        series = series_from_points(
            {sensor_id: [point.model_dump() for point in points] for sensor_id, points in body.data.items()}
        )
        result = exporter.export(request, series)
    except ValueError as exc:
        # Covers unsupported formats, malformed ids and unparseable timestamps.
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except ExportFailedError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc

    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@router.get(
    "/exports",
    response_model=ExportListing,
    summary="List exports handed to the export store.",
)
async def list_exports(exporter: ExportService = Depends(get_exporter)) -> ExportListing:
    if exporter.store is None:
        return ExportListing()
    return ExportListing(exports=list(exporter.store.list_objects()))


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
