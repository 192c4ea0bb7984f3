from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


_LOG_LEVEL_ENV = "LOG_LEVEL"
_EXPORT_PATH_ENV = "EXPORT_OUTPUT_PATH"
_THRESHOLDS_PATH_ENV = "SENSOR_THRESHOLDS_PATH"
_TIMEZONE_ENV = "DISPLAY_TIMEZONE"
_EXPORT_DAYS_ENV = "EXPORT_DEFAULT_DAYS"
_DATA_TYPE_ENV = "EXPORT_DATA_TYPE"


@dataclass(frozen=True)
class Settings:
    log_level: str
    export_output_path: Optional[str]
    thresholds_path: Optional[str]
    display_timezone: str
    export_default_days: int
    export_data_type: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


def _read_timezone(default: str) -> str:
    candidate = _read_str_env(_TIMEZONE_ENV, default)
    try:
        ZoneInfo(candidate)
    except (ZoneInfoNotFoundError, ValueError):
        return default
    return candidate


@lru_cache
def get_settings() -> Settings:
    return Settings(
        log_level=_read_log_level("INFO"),
        export_output_path=_read_optional_env(_EXPORT_PATH_ENV, "./tmp/exports"),
        thresholds_path=_read_optional_env(_THRESHOLDS_PATH_ENV, None),
        display_timezone=_read_timezone("UTC"),
        export_default_days=_read_positive_int(_EXPORT_DAYS_ENV, 7),
        export_data_type=_read_str_env(_DATA_TYPE_ENV, "sensor"),
    )
