"""Export orchestration: defaults, metadata, filename, dispatch and hand-off."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone, tzinfo
from functools import lru_cache
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union
from zoneinfo import ZoneInfo

from models.config import SensorCatalog
from models.errors import ExportFailedError, TelemetryError, require_identifier
from models.records import Reading, SensorInfo
from services.aligner import (
    ExportFormat,
    SeriesBySensor,
    export_filename,
    readings_from_points,
    serialize,
)
from services.timeutils import DateRange, default_date_range
from settings import get_settings
from storage.export_store import ExportStore, build_default_store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SensorRef:
    """A sensor selected for export, optionally with display overrides."""

    id: str
    name: Optional[str] = None
    unit: Optional[str] = None


SensorSelection = Union[str, SensorRef]


@dataclass
class ExportRequest:
    format: Union[ExportFormat, str]
    sensors: List[SensorSelection]
    start: Optional[str] = None
    end: Optional[str] = None
    data_type: Optional[str] = None


@dataclass
class ExportResult:
    filename: str
    format: ExportFormat
    media_type: str
    content: bytes
    date_range: DateRange
    sensors: List[str] = field(default_factory=list)


class ExportService:
    """Drives the aligner for one export request and hands the bytes to a store."""

    def __init__(
        self,
        store: Optional[ExportStore] = None,
        catalog: Optional[SensorCatalog] = None,
        tz: Optional[tzinfo] = None,
        default_days: int = 7,
        data_type: str = "sensor",
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.store = store
        self.catalog = catalog or SensorCatalog()
        self.tz = tz or timezone.utc
        self.default_days = default_days
        self.data_type = data_type
        self.clock = clock

    def resolve_sensors(
        self,
        sensors: Sequence[SensorSelection],
        sensor_info: Optional[Mapping[str, SensorInfo]] = None,
    ) -> Tuple[List[str], Dict[str, SensorInfo]]:
        """Return the column order and display metadata for ``sensors``."""
        ids: List[str] = []
        info: Dict[str, SensorInfo] = {}
        for sensor in sensors:
            ref = sensor if isinstance(sensor, SensorRef) else SensorRef(id=sensor)
            sensor_id = require_identifier(ref.id)
            ids.append(sensor_id)
            if sensor_info is not None and sensor_id in sensor_info:
                info[sensor_id] = sensor_info[sensor_id]
                continue
            info[sensor_id] = SensorInfo(
                name=ref.name or self.catalog.label(sensor_id),
                unit=ref.unit if ref.unit is not None else self.catalog.unit(sensor_id),
            )
        return ids, info

    def resolve_date_range(self, request: ExportRequest) -> DateRange:
        today: date = self.clock().astimezone(self.tz).date()
        return default_date_range(request.start, request.end, days=self.default_days, today=today)

    def export(
        self,
        request: ExportRequest,
        series_by_sensor: SeriesBySensor,
        sensor_info: Optional[Mapping[str, SensorInfo]] = None,
    ) -> ExportResult:
        """Serialize the requested sensors and store the result.

        Unsupported formats and malformed identifiers are raised as-is before
        anything is serialized. Any other failure is logged and re-raised as
        ``ExportFailedError`` chained to its cause. The store only ever sees a
        fully serialized buffer.
        """
        try:
            export_format = ExportFormat.parse(request.format)
            sensor_ids, info = self.resolve_sensors(request.sensors, sensor_info)
        except TelemetryError as exc:
            logger.error(
                "Export rejected",
                extra={"export_format": request.format, "reason": str(exc)},
            )
            raise

        try:
            date_range = self.resolve_date_range(request)
            filename = export_filename(request.data_type or self.data_type, export_format, date_range)
            text = serialize(
                export_format,
                series_by_sensor,
                filename,
                sensor_ids,
                info,
                tz=self.tz,
                now=self.clock(),
            )
            content = text.encode("utf-8")
            if self.store is not None:
                self.store.put_object(filename, content)
        except Exception as exc:
            logger.exception(
                "Error exporting data",
                extra={"export_format": export_format.value, "sensor_count": len(sensor_ids)},
            )
            raise ExportFailedError(f"Export failed: {exc}") from exc

        logger.info(
            "Export complete",
            extra={
                "export_format": export_format.value,
                "export_filename": filename,
                "sensor_count": len(sensor_ids),
            },
        )
        return ExportResult(
            filename=filename,
            format=export_format,
            media_type=export_format.media_type,
            content=content,
            date_range=date_range,
            sensors=sensor_ids,
        )


def series_from_points(points_by_sensor: Mapping[str, Sequence[Mapping]]) -> Dict[str, List[Reading]]:
    return {sensor_id: readings_from_points(points) for sensor_id, points in points_by_sensor.items()}


@lru_cache
def build_default_exporter() -> ExportService:
    """Factory that wires the exporter with settings-driven defaults."""
    settings = get_settings()
    return ExportService(
        store=build_default_store(),
        tz=ZoneInfo(settings.display_timezone),
        default_days=settings.export_default_days,
        data_type=settings.export_data_type,
    )
