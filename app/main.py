from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from datastore.threshold_store import build_default_threshold_store
from logging_config import configure_logging
from services.exporter import build_default_exporter


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    try:
        yield
    finally:
        build_default_exporter.cache_clear()
        build_default_threshold_store.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Sensor Telemetry Export",
        description="Normalizes sensor telemetry, classifies it against thresholds and exports aligned series.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
