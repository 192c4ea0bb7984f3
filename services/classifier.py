"""Status, trend and health classification for sensor values.

Every function here is total: thresholds are applied literally, even when
they violate ``min <= optimal_min <= optimal_max <= max``.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Iterable, Mapping, Optional, Sequence, Tuple

from models.config import SensorThresholds, ThresholdConfig
from models.records import (
    GrowthPrediction,
    HistoryPoint,
    NormalizedSensor,
    Reading,
    Status,
    SystemStatus,
    Trend,
)

_RAMP_CEILING = 80

_GROWTH_BANDS = (
    (90, GrowthPrediction.excellent),
    (75, GrowthPrediction.good),
    (60, GrowthPrediction.fair),
    (40, GrowthPrediction.poor),
)


def classify_status(
    value: float,
    min: float,
    max: float,
    optimal_min: float,
    optimal_max: float,
) -> Status:
    if value < min or value > max:
        return Status.critical
    if optimal_min <= value <= optimal_max:
        return Status.optimal
    return Status.warning


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _ramp(distance: float, span: float) -> int:
    if span == 0:
        return 0
    return max(0, _round_half_up(distance / span * _RAMP_CEILING))


def score_parameter(
    value: float,
    optimal_min: float,
    optimal_max: float,
    abs_min: float,
    abs_max: float,
) -> int:
    """Score 0-100: 100 inside the optimal band, a linear ramp capped at 80 outside it."""
    if optimal_min <= value <= optimal_max:
        return 100
    if value < optimal_min:
        return _ramp(value - abs_min, optimal_min - abs_min)
    return _ramp(abs_max - value, abs_max - optimal_max)


def classify_trend(
    history: Sequence[HistoryPoint | Reading],
    previous: Trend = Trend.stable,
) -> Trend:
    """Compare the last two values; fewer than two points keeps ``previous``."""
    if len(history) < 2:
        return previous
    current, before = history[-1].value, history[-2].value
    if current > before:
        return Trend.increasing
    if current < before:
        return Trend.decreasing
    return Trend.stable


def system_status(statuses: Iterable[Status]) -> SystemStatus:
    seen = set(statuses)
    if Status.critical in seen:
        return SystemStatus.critical
    if Status.warning in seen:
        return SystemStatus.warning
    return SystemStatus.normal


def growth_prediction(score: float) -> GrowthPrediction:
    for floor, prediction in _GROWTH_BANDS:
        if score >= floor:
            return prediction
    return GrowthPrediction.critical


def history_bounds(history: Sequence[HistoryPoint | Reading]) -> Tuple[float, float]:
    if not history:
        return 0, 0
    values = [point.value for point in history]
    return min(values), max(values)


def classify_sensor(
    sensor: NormalizedSensor,
    thresholds: Optional[SensorThresholds] = None,
) -> NormalizedSensor:
    """Return a copy of ``sensor`` with status and trend recomputed.

    ``thresholds`` replaces the record's bands when given; otherwise the bands
    already on the record are used. A record with no bands at all keeps its
    status.
    """
    classified = replace(sensor)
    if thresholds is not None:
        classified.min = thresholds.min
        classified.max = thresholds.max
        classified.optimal_min = thresholds.optimal_min
        classified.optimal_max = thresholds.optimal_max

    bands = (classified.min, classified.max, classified.optimal_min, classified.optimal_max)
    if all(band is not None for band in bands):
        classified.status = classify_status(classified.value, *bands)
    elif classified.status is None:
        classified.status = Status.unknown

    classified.trend = classify_trend(classified.history, classified.trend or Trend.stable)
    return classified


def sensor_score(sensor: NormalizedSensor, thresholds: SensorThresholds) -> int:
    return score_parameter(
        sensor.value,
        thresholds.optimal_min,
        thresholds.optimal_max,
        thresholds.min,
        thresholds.max,
    )


def overall_health(
    sensors: Mapping[str, NormalizedSensor],
    config: Optional[ThresholdConfig] = None,
) -> int:
    """Average score across sensors that have a configured band; 0 when none do."""
    config = config or ThresholdConfig()
    scores = []
    for sensor_id, sensor in sensors.items():
        band = config.for_sensor(sensor_id)
        if band is None:
            continue
        scores.append(sensor_score(sensor, band))
    if not scores:
        return 0
    return _round_half_up(sum(scores) / len(scores))
