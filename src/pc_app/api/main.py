# src/pc_app/api/main.py
from __future__ import annotations

from fastapi import FastAPI

from pc_app.core.config import Settings, get_settings
from pc_app.core.logging import configure_logging
from pc_app.core.registry import load_module_routers
from pc_app.modules.scan.service import ScanPipeline
from pc_app.version import get_version


def create_app(
    settings: Settings | None = None, pipeline: ScanPipeline | None = None
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Photo Cleaner", version=get_version(), debug=settings.DEBUG)
    configure_logging(settings.LOG_LEVEL, json=settings.LOG_JSON)

    app.state.pipeline = pipeline or ScanPipeline(settings)

    for r in load_module_routers():
        app.include_router(r, prefix="/api")

    @app.get("/health")
    def health():
        return {"status": "ok", "scanning": app.state.pipeline.busy}

    return app


app = create_app()
