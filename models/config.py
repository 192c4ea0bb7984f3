"""Threshold and sensor metadata configuration passed into the core."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from models.errors import require_identifier
from models.records import SensorInfo

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def canonical_sensor_id(sensor_id: str) -> str:
    """Fold ``soilPH`` / ``soil_ph`` style identifiers onto one key."""
    require_identifier(sensor_id)
    return _CAMEL_BOUNDARY.sub("_", sensor_id.strip()).lower()


@dataclass(frozen=True, slots=True)
class SensorThresholds:
    min: float
    max: float
    optimal_min: float
    optimal_max: float


# Illustrative per-sensor-type defaults, used only when no configuration is supplied.
DEFAULT_THRESHOLDS: Mapping[str, SensorThresholds] = MappingProxyType(
    {
        "soil_temperature": SensorThresholds(min=10, max=35, optimal_min=18, optimal_max=26),
        "soil_moisture": SensorThresholds(min=20, max=80, optimal_min=40, optimal_max=60),
        "soil_ph": SensorThresholds(min=4.5, max=8.5, optimal_min=6.0, optimal_max=7.0),
        "air_temperature": SensorThresholds(min=5, max=40, optimal_min=18, optimal_max=28),
        "air_humidity": SensorThresholds(min=20, max=95, optimal_min=50, optimal_max=70),
        "light_intensity": SensorThresholds(
            min=0, max=100000, optimal_min=10000, optimal_max=50000
        ),
    }
)

DEFAULT_UNITS: Mapping[str, str] = MappingProxyType(
    {
        "soil_temperature": "°C",
        "soil_moisture": "%",
        "soil_ph": "pH",
        "air_temperature": "°C",
        "air_humidity": "%",
        "light_intensity": "lux",
    }
)

DEFAULT_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "soil_temperature": "Soil Temperature",
        "soil_moisture": "Soil Moisture",
        "soil_ph": "Soil pH",
        "soil_conductivity": "Soil Conductivity",
        "air_temperature": "Air Temperature",
        "air_humidity": "Air Humidity",
        "air_co2": "Air CO2",
        "air_tvoc": "Air TVOC",
        "light_intensity": "Light Intensity",
    }
)


@dataclass(frozen=True)
class ThresholdConfig:
    """Per-sensor threshold bands, keyed by canonical sensor id."""

    thresholds: Mapping[str, SensorThresholds] = field(default_factory=lambda: DEFAULT_THRESHOLDS)

    def for_sensor(self, sensor_id: str) -> Optional[SensorThresholds]:
        return self.thresholds.get(canonical_sensor_id(sensor_id))

    def with_overrides(self, overrides: Mapping[str, SensorThresholds]) -> "ThresholdConfig":
        merged = dict(self.thresholds)
        for sensor_id, thresholds in overrides.items():
            merged[canonical_sensor_id(sensor_id)] = thresholds
        return ThresholdConfig(thresholds=MappingProxyType(merged))


@dataclass(frozen=True)
class SensorCatalog:
    """Display names and default units for known sensor types."""

    labels: Mapping[str, str] = field(default_factory=lambda: DEFAULT_LABELS)
    units: Mapping[str, str] = field(default_factory=lambda: DEFAULT_UNITS)

    def label(self, sensor_id: str) -> str:
        return self.labels.get(canonical_sensor_id(sensor_id), sensor_id)

    def unit(self, sensor_id: str) -> str:
        return self.units.get(canonical_sensor_id(sensor_id), "")

    def info(self, sensor_id: str) -> SensorInfo:
        return SensorInfo(name=self.label(sensor_id), unit=self.unit(sensor_id))
