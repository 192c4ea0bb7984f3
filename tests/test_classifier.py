"""Unit tests for status, trend and health classification."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

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
from services.classifier import (
    classify_sensor,
    classify_status,
    classify_trend,
    growth_prediction,
    history_bounds,
    overall_health,
    score_parameter,
    system_status,
)

T0 = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _history(*values: float) -> list[HistoryPoint]:
    return [
        HistoryPoint(time=f"t{index}", value=value, instant=T0 + timedelta(hours=index))
        for index, value in enumerate(values)
    ]


def test_classify_status_scenario() -> None:
    assert classify_status(5, 0, 10, 4, 6) is Status.optimal
    assert classify_status(11, 0, 10, 4, 6) is Status.critical
    assert classify_status(3, 0, 10, 4, 6) is Status.warning


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (-0.001, Status.critical),
        (0, Status.warning),
        (3.999, Status.warning),
        (4, Status.optimal),
        (6, Status.optimal),
        (6.001, Status.warning),
        (10, Status.warning),
        (10.001, Status.critical),
    ],
)
def test_classify_status_boundaries(value: float, expected: Status) -> None:
    assert classify_status(value, 0, 10, 4, 6) is expected


def test_classify_status_applies_inverted_thresholds_literally() -> None:
    # optimal band above the absolute max: the range breach still wins.
    assert classify_status(12, 0, 10, 11, 13) is Status.critical
    assert classify_status(5, 0, 10, 6, 4) is Status.warning


@pytest.mark.parametrize("value", [4, 4.5, 5, 6])
def test_score_is_full_inside_optimal_band(value: float) -> None:
    assert score_parameter(value, 4, 6, 0, 10) == 100


def test_score_ramps_below_and_above_band() -> None:
    assert score_parameter(2, 4, 6, 0, 10) == 40
    assert score_parameter(3, 4, 6, 0, 10) == 60
    assert score_parameter(8, 4, 6, 0, 10) == 40
    assert score_parameter(9, 4, 6, 0, 10) == 20
    assert score_parameter(0.5, 4, 6, 0, 10) == 10


def test_score_reaches_zero_at_and_beyond_absolute_bounds() -> None:
    assert score_parameter(0, 4, 6, 0, 10) == 0
    assert score_parameter(-5, 4, 6, 0, 10) == 0
    assert score_parameter(10, 4, 6, 0, 10) == 0
    assert score_parameter(25, 4, 6, 0, 10) == 0


def test_score_is_monotonic_away_from_band() -> None:
    below = [score_parameter(4 - step * 0.25, 4, 6, 0, 10) for step in range(1, 24)]
    above = [score_parameter(6 + step * 0.25, 4, 6, 0, 10) for step in range(1, 24)]

    assert all(later <= earlier for earlier, later in zip(below, below[1:]))
    assert all(later <= earlier for earlier, later in zip(above, above[1:]))
    assert below[0] <= 80 and above[0] <= 80


def test_score_rounds_half_up() -> None:
    # 0.1 / 16 * 80 == 0.5
    assert score_parameter(0.1, 16, 20, 0, 30) == 1


def test_score_zero_width_ramp_scores_zero() -> None:
    assert score_parameter(-1, 0, 5, 0, 10) == 0


def test_classify_trend() -> None:
    assert classify_trend(_history(10, 15)) is Trend.increasing
    assert classify_trend(_history(15, 10)) is Trend.decreasing
    assert classify_trend(_history(3, 10, 10)) is Trend.stable


def test_classify_trend_keeps_previous_with_single_point() -> None:
    assert classify_trend(_history(10), previous=Trend.decreasing) is Trend.decreasing
    assert classify_trend([], previous=Trend.increasing) is Trend.increasing


def test_classify_trend_accepts_readings() -> None:
    readings = [Reading(time=T0, value=1), Reading(time=T0 + timedelta(hours=1), value=0.5)]

    assert classify_trend(readings) is Trend.decreasing


def test_system_status_is_worst_of() -> None:
    assert system_status([Status.optimal, Status.critical, Status.warning]) is SystemStatus.critical
    assert system_status([Status.warning, Status.optimal]) is SystemStatus.warning
    assert system_status([Status.optimal, Status.unknown]) is SystemStatus.normal
    assert system_status([]) is SystemStatus.normal


@pytest.mark.parametrize(
    ("score", "expected"),
    [
        (100, GrowthPrediction.excellent),
        (90, GrowthPrediction.excellent),
        (89, GrowthPrediction.good),
        (75, GrowthPrediction.good),
        (60, GrowthPrediction.fair),
        (40, GrowthPrediction.poor),
        (39, GrowthPrediction.critical),
        (0, GrowthPrediction.critical),
    ],
)
def test_growth_prediction_bands(score: int, expected: GrowthPrediction) -> None:
    assert growth_prediction(score) is expected


def test_history_bounds() -> None:
    assert history_bounds([]) == (0, 0)
    assert history_bounds(_history(3, -1, 7)) == (-1, 7)


def test_classify_sensor_applies_thresholds_and_trend() -> None:
    sensor = NormalizedSensor(value=15, history=_history(10, 15))
    band = SensorThresholds(min=0, max=40, optimal_min=18, optimal_max=26)

    classified = classify_sensor(sensor, band)

    assert classified.status is Status.warning
    assert classified.trend is Trend.increasing
    assert (classified.min, classified.optimal_max) == (0, 26)
    assert sensor.status is None


def test_classify_sensor_without_bands_keeps_unknown() -> None:
    sensor = NormalizedSensor(value=15, history=_history(15))

    classified = classify_sensor(sensor)

    assert classified.status is Status.unknown
    assert classified.trend is Trend.stable


def test_overall_health_averages_configured_sensors() -> None:
    config = ThresholdConfig(
        {
            "soil_ph": SensorThresholds(min=0, max=10, optimal_min=4, optimal_max=6),
            "air_humidity": SensorThresholds(min=0, max=10, optimal_min=4, optimal_max=6),
        }
    )
    sensors = {
        "soilPH": NormalizedSensor(value=5),
        "air_humidity": NormalizedSensor(value=2),
        "unconfigured": NormalizedSensor(value=1),
    }

    assert overall_health(sensors, config) == 70
    assert overall_health({}, config) == 0
