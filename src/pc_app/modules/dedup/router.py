# src/pc_app/modules/dedup/router.py
from fastapi import APIRouter, Query

from pc_app.core.errors import to_http

from .schemas import ClusterRequest, ClusterResponse, HEX64_PATTERN, SimilarityResponse
from .service import DedupService

router = APIRouter(prefix="/dedup", tags=["dedup"])


@router.post(
    path="/cluster",
    response_model=ClusterResponse,
    summary="Group fingerprints into duplicate sets",
    description=(
        "Greedy, order-dependent clustering: each unassigned photo seeds a group "
        "and collects every later unassigned photo whose similarity to the seed "
        "is at least `threshold` percent. Groups are recomputed from scratch."
    ),
)
def cluster(req: ClusterRequest) -> ClusterResponse:
    svc = DedupService()
    try:
        groups = svc.cluster(req.fingerprints, req.threshold)
        return svc.summarize(groups, req.threshold)
    except Exception as err:
        raise to_http(err) from err


@router.get(
    path="/similarity",
    response_model=SimilarityResponse,
    summary="Hamming distance and similarity of two fingerprints",
)
def similarity(
    a: str = Query(..., pattern=HEX64_PATTERN),
    b: str = Query(..., pattern=HEX64_PATTERN),
) -> SimilarityResponse:
    try:
        return DedupService.compare(a.lower(), b.lower())
    except Exception as err:
        raise to_http(err) from err
