from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, Optional

from pydantic import ValidationError

from app.schemas import ThresholdBand
from models.config import SensorThresholds, ThresholdConfig
from settings import get_settings

logger = logging.getLogger(__name__)


class ThresholdStore:
    """Read-only view of per-sensor threshold overrides kept in a JSON file."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path
        self._overrides: Dict[str, SensorThresholds] = {}
        self._lock = Lock()
        self.reload()

    def reload(self) -> None:
        overrides = self._load_from_disk()
        with self._lock:
            self._overrides = overrides

    def overrides(self) -> Dict[str, SensorThresholds]:
        with self._lock:
            return dict(self._overrides)

    def config(self, base: Optional[ThresholdConfig] = None) -> ThresholdConfig:
        """Built-in defaults (or ``base``) with the file's overrides applied."""
        return (base or ThresholdConfig()).with_overrides(self.overrides())

    def _load_from_disk(self) -> Dict[str, SensorThresholds]:
        if not self.path or not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text() or "{}")
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(
                "Ignoring unreadable threshold file",
                extra={"object_key": str(self.path), "reason": str(exc)},
            )
            return {}
        if not isinstance(data, dict):
            return {}

        overrides: Dict[str, SensorThresholds] = {}
        for sensor_id, payload in data.items():
            if not sensor_id.strip():
                continue
            try:
                band = ThresholdBand.model_validate(payload)
            except ValidationError as exc:
                logger.warning(
                    "Ignoring invalid threshold entry",
                    extra={"sensor_id": sensor_id, "reason": exc.errors()[0]["msg"]},
                )
                continue
            overrides[sensor_id] = band.to_thresholds()
        return overrides


@lru_cache
def build_default_threshold_store(path: Optional[str] = None) -> ThresholdStore:
    settings = get_settings()
    store_path = settings.thresholds_path if path is None else path
    return ThresholdStore(path=Path(store_path) if store_path else None)
