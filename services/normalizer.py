"""Reconcile variably-shaped upstream payloads into ``NormalizedSensor`` records."""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import tzinfo
from enum import Enum
from numbers import Real
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from models.config import SensorCatalog, ThresholdConfig
from models.errors import require_identifier
from models.records import HistoryPoint, NormalizedSensor, RawSeries, Status, Trend
from services.timeutils import format_display, parse_instant

logger = logging.getLogger(__name__)


class AddressingScheme(str, Enum):
    """Ways an upstream payload can key a sensor's series, highest priority first."""

    nested_file_key = "nested_file_key"
    direct_key = "direct_key"


def resolve_series(
    raw: Optional[Mapping[str, Any]],
    sensor_key: str,
    alt_key: Optional[str] = None,
) -> Optional[Tuple[AddressingScheme, RawSeries]]:
    """Pick the series for a sensor, preferring the file-level key when present.

    The first key present in the payload decides: if its entry is null the
    sensor has no series, even when the other key carries one.
    """
    require_identifier(sensor_key, "sensor key")
    if alt_key is not None:
        require_identifier(alt_key, "alternate key")
    if not raw:
        return None

    candidates = (
        (AddressingScheme.nested_file_key, alt_key),
        (AddressingScheme.direct_key, sensor_key),
    )
    for scheme, key in candidates:
        if key is None or key not in raw:
            continue
        entry = raw[key]
        if entry is None:
            return None
        return scheme, _coerce_series(entry)
    return None


def _coerce_series(entry: Any) -> RawSeries:
    if isinstance(entry, RawSeries):
        return entry
    if isinstance(entry, Mapping):
        unit = entry.get("unit")
        history = entry.get("history")
        return RawSeries(
            unit=unit if isinstance(unit, str) and unit else None,
            history=list(history) if isinstance(history, Iterable) else None,
        )
    return RawSeries()


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def build_history(
    entries: Iterable[Any],
    tz: Optional[tzinfo] = None,
    sensor_id: Optional[str] = None,
) -> List[HistoryPoint]:
    """Parse upstream history entries and return them sorted by instant.

    Entries whose time cannot be parsed or whose value is not numeric are
    skipped with a warning. The sort is stable so equal instants keep their
    upstream order.
    """
    points: List[HistoryPoint] = []
    for index, entry in enumerate(entries):
        if isinstance(entry, Mapping):
            raw_time, raw_value = entry.get("time"), entry.get("value")
        else:
            raw_time, raw_value = getattr(entry, "time", None), getattr(entry, "value", None)

        if not _is_number(raw_value):
            logger.warning(
                "Skipping history entry %s",
                index,
                extra={"sensor_id": sensor_id, "reason": "invalid value", "invalid_value": raw_value},
            )
            continue
        try:
            instant = parse_instant(raw_time)
        except ValueError:
            logger.warning(
                "Skipping history entry %s",
                index,
                extra={"sensor_id": sensor_id, "reason": "invalid time", "invalid_value": raw_time},
            )
            continue

        points.append(
            HistoryPoint(time=format_display(instant, tz), value=float(raw_value), instant=instant)
        )

    points.sort(key=lambda point: point.instant)
    return points


def normalize(
    raw: Optional[Mapping[str, Any]],
    sensor_key: str,
    alt_key: Optional[str] = None,
    sensor: Optional[NormalizedSensor] = None,
    thresholds: Optional[ThresholdConfig] = None,
    catalog: Optional[SensorCatalog] = None,
    tz: Optional[tzinfo] = None,
) -> NormalizedSensor:
    """Merge the upstream series for ``sensor_key`` into ``sensor``.

    When the payload carries neither key the previous record is returned
    as-is. Threshold fields come from ``thresholds`` (or stay as they were),
    never from the payload.
    """
    resolved = resolve_series(raw, sensor_key, alt_key)
    if resolved is None:
        logger.debug(
            "No series in payload",
            extra={"sensor_id": sensor_key, "reason": "missing series"},
        )
        if sensor is not None:
            return sensor
        return _defaults(_fresh(sensor_key, catalog), sensor_key, thresholds)

    scheme, series = resolved
    updated = replace(sensor) if sensor is not None else _fresh(sensor_key, catalog)

    updated.history = build_history(series.history or [], tz=tz, sensor_id=sensor_key)
    updated.value = updated.history[-1].value if updated.history else 0
    if series.unit:
        updated.unit = series.unit

    logger.debug(
        "Normalized series",
        extra={
            "sensor_id": sensor_key,
            "source_key": alt_key if scheme is AddressingScheme.nested_file_key else sensor_key,
            "row_count": len(updated.history),
        },
    )
    return _defaults(updated, sensor_key, thresholds)


def _fresh(sensor_key: str, catalog: Optional[SensorCatalog]) -> NormalizedSensor:
    return NormalizedSensor(unit=(catalog or SensorCatalog()).unit(sensor_key))


def _defaults(
    sensor: NormalizedSensor,
    sensor_key: str,
    thresholds: Optional[ThresholdConfig],
) -> NormalizedSensor:
    band = thresholds.for_sensor(sensor_key) if thresholds is not None else None
    if band is not None:
        sensor.min = band.min
        sensor.max = band.max
        sensor.optimal_min = band.optimal_min
        sensor.optimal_max = band.optimal_max

    sensor.min = sensor.min if sensor.min is not None else 0
    sensor.max = sensor.max if sensor.max is not None else 0
    sensor.optimal_min = sensor.optimal_min if sensor.optimal_min is not None else 0
    sensor.optimal_max = sensor.optimal_max if sensor.optimal_max is not None else 0
    sensor.status = sensor.status if sensor.status is not None else Status.unknown
    sensor.trend = sensor.trend if sensor.trend is not None else Trend.stable
    return sensor
