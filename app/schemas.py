"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from models.config import SensorThresholds
from models.records import (
    GrowthPrediction,
    HistoryPoint,
    NormalizedSensor,
    Status,
    SystemStatus,
    Trend,
)


class ThresholdBand(BaseModel):
    """Absolute and optimal bands for one sensor type."""

    min: float
    max: float
    optimal_min: float
    optimal_max: float

    def to_thresholds(self) -> SensorThresholds:
        return SensorThresholds(
            min=self.min,
            max=self.max,
            optimal_min=self.optimal_min,
            optimal_max=self.optimal_max,
        )


class HistoryPointModel(BaseModel):
    time: str = Field(..., description="Display label for the reading.")
    value: float
    instant: datetime

    def to_point(self) -> HistoryPoint:
        return HistoryPoint(time=self.time, value=self.value, instant=self.instant)


class SensorModel(BaseModel):
    """Canonical per-sensor record as exposed over HTTP."""

    value: float = 0
    unit: str = ""
    history: List[HistoryPointModel] = Field(default_factory=list)
    min: Optional[float] = None
    max: Optional[float] = None
    optimal_min: Optional[float] = None
    optimal_max: Optional[float] = None
    status: Optional[Status] = None
    trend: Optional[Trend] = None
    health_score: Optional[int] = Field(default=None, ge=0, le=100)

    @classmethod
    def from_sensor(cls, sensor: NormalizedSensor, health_score: Optional[int] = None) -> "SensorModel":
        return cls(
            value=sensor.value,
            unit=sensor.unit,
            history=[
                HistoryPointModel(time=point.time, value=point.value, instant=point.instant)
                for point in sensor.history
            ],
            min=sensor.min,
            max=sensor.max,
            optimal_min=sensor.optimal_min,
            optimal_max=sensor.optimal_max,
            status=sensor.status,
            trend=sensor.trend,
            health_score=health_score,
        )

    def to_sensor(self) -> NormalizedSensor:
        return NormalizedSensor(
            value=self.value,
            unit=self.unit,
            history=[point.to_point() for point in self.history],
            min=self.min,
            max=self.max,
            optimal_min=self.optimal_min,
            optimal_max=self.optimal_max,
            status=self.status,
            trend=self.trend,
        )


class NormalizeRequest(BaseModel):
    """Raw upstream payload plus the optional file-level key for the sensor."""

    payload: Dict[str, Any] = Field(default_factory=dict)
    alt_key: Optional[str] = None
    previous: Optional[SensorModel] = None


class ClassifyRequest(BaseModel):
    value: float
    thresholds: ThresholdBand


class ClassifyResponse(BaseModel):
    status: Status
    health_score: int = Field(..., ge=0, le=100)
    growth_prediction: GrowthPrediction


class SystemStatusRequest(BaseModel):
    statuses: List[Status] = Field(default_factory=list)


class SystemStatusResponse(BaseModel):
    status: SystemStatus


class ExportPoint(BaseModel):
    timestamp: str
    value: float


class ExportSensor(BaseModel):
    id: str
    name: Optional[str] = None
    unit: Optional[str] = None


class ExportRequestBody(BaseModel):
    """Export request; ``format`` is validated by the service, not the schema."""

    format: str = "csv"
    sensors: List[Union[str, ExportSensor]] = Field(default_factory=list)
    start: Optional[str] = None
    end: Optional[str] = None
    data_type: Optional[str] = None
    data: Dict[str, List[ExportPoint]] = Field(default_factory=dict)


class ExportListing(BaseModel):
    exports: List[str] = Field(default_factory=list)
