"""Union alignment of per-sensor series and the export serializers."""

from __future__ import annotations

import csv
import io
import json
import math
from datetime import datetime, timezone, tzinfo
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from models.errors import UnsupportedFormatError, require_identifier
from models.records import ExportRow, ExportTable, Reading, SensorInfo
from services.timeutils import DateRange, format_table_timestamp, parse_instant, to_iso

SeriesBySensor = Mapping[str, Sequence[Reading]]


class ExportFormat(str, Enum):
    csv = "csv"
    json = "json"
    excel = "excel"

    @classmethod
    def parse(cls, value: Any) -> "ExportFormat":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise UnsupportedFormatError(value) from exc

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]

    @property
    def media_type(self) -> str:
        return _MEDIA_TYPES[self]


_EXTENSIONS = {
    ExportFormat.csv: "csv",
    ExportFormat.json: "json",
    ExportFormat.excel: "xlsx",
}

_MEDIA_TYPES = {
    ExportFormat.csv: "text/csv;charset=utf-8",
    ExportFormat.json: "application/json;charset=utf-8",
    ExportFormat.excel: "text/csv;charset=utf-8",
}


def align(series_by_sensor: SeriesBySensor, sensor_order: Optional[Sequence[str]] = None) -> ExportTable:
    """Merge independent series into one table keyed by the union of instants.

    Instants are compared as UTC datetimes, never as display strings. A
    sensor without a reading at a given instant is absent from that row's
    values. When a series repeats an instant the later reading wins.
    """
    sensors = list(sensor_order) if sensor_order is not None else list(series_by_sensor)
    for sensor_id in sensors:
        require_identifier(sensor_id)

    cells: Dict[datetime, Dict[str, float]] = {}
    for sensor_id in sensors:
        for reading in series_by_sensor.get(sensor_id) or ():
            instant = parse_instant(reading.time)
            cells.setdefault(instant, {})[sensor_id] = reading.value

    rows = [ExportRow(time=instant, values=cells[instant]) for instant in sorted(cells)]
    return ExportTable(sensors=sensors, rows=rows)


def format_value(value: float) -> str:
    """Render a numeric cell; integral floats drop the trailing ``.0``."""
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Cannot export non-finite value {value!r}.")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def json_value(value: float) -> Union[int, float]:
    """Integral floats serialize as JSON integers (``10``, not ``10.0``)."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def column_header(sensor_id: str, sensor_info: Mapping[str, SensorInfo]) -> str:
    info = sensor_info.get(sensor_id) or SensorInfo(name=sensor_id, unit="")
    return f"{info.name} ({info.unit})"


def to_csv(
    table: ExportTable,
    sensor_info: Mapping[str, SensorInfo],
    tz: Optional[tzinfo] = None,
) -> str:
    """Render the table as CSV.

    Timestamps are labelled to the second, so instants that differ only in
    their sub-second part keep separate rows under identical labels.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["Timestamp", *(column_header(sensor_id, sensor_info) for sensor_id in table.sensors)])
    for row in table.rows:
        writer.writerow(
            [
                format_table_timestamp(row.time, tz),
                *(
                    format_value(row.values[sensor_id]) if sensor_id in row.values else ""
                    for sensor_id in table.sensors
                ),
            ]
        )
    return buffer.getvalue()


def data_type_from_filename(filename: str) -> str:
    return filename.split("_")[0]


def to_json(
    series_by_sensor: SeriesBySensor,
    filename: str,
    sensors: Sequence[str],
    sensor_info: Mapping[str, SensorInfo],
    now: Optional[datetime] = None,
) -> str:
    """Structured document with each sensor's own (unaligned) readings."""
    document: Dict[str, Any] = {
        "exportDate": to_iso(now if now is not None else datetime.now(timezone.utc)),
        "dataType": data_type_from_filename(filename),
        "sensors": {},
    }
    for sensor_id in sensors:
        readings = series_by_sensor.get(sensor_id)
        if readings is None:
            continue
        info = sensor_info.get(sensor_id)
        document["sensors"][sensor_id] = {
            "name": (info.name if info else "") or sensor_id,
            "unit": (info.unit if info else "") or "",
            "readings": [
                {"timestamp": to_iso(reading.time), "value": json_value(reading.value)}
                for reading in readings
            ],
        }
    return json.dumps(document, indent=2, ensure_ascii=False, allow_nan=False)


def export_filename(data_type: str, export_format: ExportFormat, date_range: DateRange) -> str:
    export_format = ExportFormat.parse(export_format)
    return f"{data_type}_data_{date_range.start}_to_{date_range.end}.{export_format.extension}"


def serialize(
    export_format: ExportFormat,
    series_by_sensor: SeriesBySensor,
    filename: str,
    sensors: Sequence[str],
    sensor_info: Mapping[str, SensorInfo],
    tz: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> str:
    """Dispatch to the serializer for ``export_format``; excel shares the CSV path."""
    export_format = ExportFormat.parse(export_format)
    if export_format is ExportFormat.json:
        return to_json(series_by_sensor, filename, sensors, sensor_info, now=now)
    table = align(series_by_sensor, sensors)
    return to_csv(table, sensor_info, tz=tz)


def parse_csv(text: str) -> tuple[List[str], List[List[str]]]:
    """Split a CSV export back into its header and data rows."""
    rows = list(csv.reader(io.StringIO(text)))
    if not rows:
        return [], []
    return rows[0], rows[1:]


def readings_from_points(points: Iterable[Mapping[str, Any]]) -> List[Reading]:
    """Build readings from ``{"timestamp"|"time": ..., "value": ...}`` mappings."""
    readings = []
    for point in points:
        raw_time = point.get("timestamp", point.get("time"))
        value = float(point["value"])
        if not math.isfinite(value):
            raise ValueError(f"Reading value must be finite, got {point['value']!r}.")
        readings.append(Reading(time=parse_instant(raw_time), value=value))
    return readings
