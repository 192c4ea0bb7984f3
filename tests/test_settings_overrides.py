from __future__ import annotations

import json
from typing import Iterable
from zoneinfo import ZoneInfo

from datastore.threshold_store import build_default_threshold_store
from services.exporter import build_default_exporter
from settings import get_settings
from storage.export_store import build_default_store


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


CACHES = (
    get_settings,
    build_default_store,
    build_default_threshold_store,
    build_default_exporter,
)


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    export_root = tmp_path / "exports"
    thresholds_path = tmp_path / "thresholds.json"
    thresholds_path.write_text(
        json.dumps({"soilPH": {"min": 5, "max": 8, "optimal_min": 6, "optimal_max": 7}})
    )

    monkeypatch.setenv("EXPORT_OUTPUT_PATH", str(export_root))
    monkeypatch.setenv("SENSOR_THRESHOLDS_PATH", str(thresholds_path))
    monkeypatch.setenv("DISPLAY_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("EXPORT_DEFAULT_DAYS", "30")
    monkeypatch.setenv("EXPORT_DATA_TYPE", "soil")
    monkeypatch.setenv("LOG_LEVEL", " debug ")
    _clear_caches(CACHES)

    try:
        settings = get_settings()
        exporter = build_default_exporter()
        thresholds = build_default_threshold_store().config()

        assert settings.log_level == "DEBUG"
        assert exporter.store is not None
        assert exporter.store.root_path == export_root
        assert exporter.tz == ZoneInfo("Europe/Berlin")
        assert exporter.default_days == 30
        assert exporter.data_type == "soil"
        band = thresholds.for_sensor("soil_ph")
        assert band is not None and (band.min, band.optimal_max) == (5, 7)
    finally:
        _clear_caches(CACHES)


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("DISPLAY_TIMEZONE", "Mars/Olympus_Mons")
    monkeypatch.setenv("EXPORT_DEFAULT_DAYS", "-3")
    monkeypatch.setenv("EXPORT_OUTPUT_PATH", "  ")
    monkeypatch.setenv("EXPORT_DATA_TYPE", "")
    _clear_caches(CACHES)

    try:
        settings = get_settings()

        assert settings.display_timezone == "UTC"
        assert settings.export_default_days == 7
        assert settings.export_output_path is None
        assert settings.export_data_type == "sensor"
        assert build_default_store().root_path is None
    finally:
        _clear_caches(CACHES)
