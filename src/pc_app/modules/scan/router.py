# src/pc_app/modules/scan/router.py
from fastapi import APIRouter

from pc_app.api.deps import PipelineDep
from pc_app.core.errors import to_http

from .schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    ScanProgress,
    ScanRequest,
    ScanResponse,
)

router = APIRouter(prefix="/scan", tags=["scan"])


@router.post(
    path="",
    response_model=ScanResponse,
    summary="Enumerate supported photos under a project folder",
    description=(
        "Walks `root` recursively (hidden folders, `.trash` and the thumbnails "
        "cache are skipped) and pairs RAW/JPEG files sharing a base name. "
        "Returns 409 while another scan is running."
    ),
)
def scan(req: ScanRequest, pipeline: PipelineDep) -> ScanResponse:
    try:
        photos = pipeline.scan(req.root)
        return ScanResponse(root=str(req.root), photos_found=len(photos), photos=photos)
    except Exception as err:
        raise to_http(err) from err


@router.get(
    path="/progress",
    response_model=ScanProgress,
    summary="Progress of the running (or last) scan",
)
def progress(pipeline: PipelineDep) -> ScanProgress:
    return pipeline.progress()


@router.post(
    path="/analyze",
    response_model=AnalyzeResponse,
    summary="Scan, fingerprint, score and cluster a project folder",
    description=(
        "Runs the full pipeline: per-file fingerprint, sharpness and thumbnail "
        "in parallel, then one clustering pass over the complete fingerprint set. "
        "Undecodable files fall back to a content checksum and are still grouped "
        "with byte-identical copies."
    ),
)
def analyze(req: AnalyzeRequest, pipeline: PipelineDep) -> AnalyzeResponse:
    try:
        outcome = pipeline.run(req.root, threshold=req.threshold)
    except Exception as err:
        raise to_http(err) from err
    result = outcome.result
    return AnalyzeResponse(
        root=str(outcome.session.root),
        photos=outcome.records,
        result=result,
        blurry_count=sum(1 for a in result.analyses if a.is_blurry),
        duplicates_count=sum(len(g.photo_ids) - 1 for g in result.groups),
    )
