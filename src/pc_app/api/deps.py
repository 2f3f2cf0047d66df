# src/pc_app/api/deps.py
from typing import Annotated

from fastapi import Depends, Request

from pc_app.core.config import Settings, get_settings
from pc_app.modules.scan.service import ScanPipeline

SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_pipeline(request: Request) -> ScanPipeline:
    """The pipeline instance owned by the running app (see create_app)."""
    return request.app.state.pipeline


PipelineDep = Annotated[ScanPipeline, Depends(get_pipeline)]
