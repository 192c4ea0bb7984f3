"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


class Status(str, Enum):
    """Operational classification of a sensor value."""

    optimal = "optimal"
    warning = "warning"
    critical = "critical"
    unknown = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> Optional["Status"]:
        # Upstream sources report idle sensors as "inactive".
        if value == "inactive":
            return cls.unknown
        return None


class Trend(str, Enum):
    """Direction of change between the two most recent readings."""

    increasing = "increasing"
    decreasing = "decreasing"
    stable = "stable"


class SystemStatus(str, Enum):
    critical = "critical"
    warning = "warning"
    normal = "normal"


class GrowthPrediction(str, Enum):
    excellent = "Excellent"
    good = "Good"
    fair = "Fair"
    poor = "Poor"
    critical = "Critical"


@dataclass(frozen=True, slots=True)
class Reading:
    """A single (instant, value) observation from a sensor."""

    time: datetime
    value: float


@dataclass(frozen=True, slots=True)
class HistoryPoint:
    """A normalized history entry carrying its display label."""

    time: str
    value: float
    instant: datetime


@dataclass(slots=True)
class RawSeries:
    """A series as delivered by an upstream source, before normalization."""

    unit: Optional[str] = None
    history: Optional[List[dict]] = None


@dataclass(slots=True)
class NormalizedSensor:
    """Canonical per-sensor record produced by the normalizer."""

    value: float = 0
    unit: str = ""
    history: List[HistoryPoint] = field(default_factory=list)
    min: Optional[float] = None
    max: Optional[float] = None
    optimal_min: Optional[float] = None
    optimal_max: Optional[float] = None
    status: Optional[Status] = None
    trend: Optional[Trend] = None

    def readings(self) -> List[Reading]:
        return [Reading(time=point.instant, value=point.value) for point in self.history]


@dataclass(frozen=True, slots=True)
class SensorInfo:
    """Display metadata for one export column."""

    name: str
    unit: str


@dataclass(slots=True)
class ExportRow:
    """One union timestamp; sensors without a reading are absent from ``values``."""

    time: datetime
    values: Dict[str, float] = field(default_factory=dict)

    def get(self, sensor_id: str) -> Optional[float]:
        return self.values.get(sensor_id)

    def has(self, sensor_id: str) -> bool:
        return sensor_id in self.values


@dataclass(slots=True)
class ExportTable:
    """Rows with strictly ascending, unique timestamps plus the column order."""

    sensors: List[str]
    rows: List[ExportRow] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)
