# src/pc_app/modules/preview/router.py
from pathlib import Path

from fastapi import APIRouter

from pc_app.core.errors import to_http

from .schemas import ExtractPreviewRequest, ExtractPreviewResponse
from .service import PreviewService

router = APIRouter(prefix="/preview", tags=["preview"])


@router.post(
    "/extract",
    response_model=ExtractPreviewResponse,
    summary="Locate the embedded JPEG preview of a RAW file",
    description=(
        "Scans the file for FFD8..FFD9 spans and reports the largest one above "
        "`min_size`. When `save_to` is given and the span decodes, it is written there."
    ),
)
def extract(req: ExtractPreviewRequest) -> ExtractPreviewResponse:
    try:
        svc = PreviewService(min_size=req.min_size)
        return svc.inspect(
            Path(req.path), Path(req.save_to) if req.save_to else None
        )
    except Exception as err:
        raise to_http(err) from err
