# src/pc_app/modules/quality/router.py
from pathlib import Path

from fastapi import APIRouter

from pc_app.api.deps import SettingsDep
from pc_app.core.errors import to_http

from .schemas import ScoreRequest, ScoreResponse
from .service import QualityService
from .sharpness import SharpnessScorer

router = APIRouter(prefix="/quality", tags=["quality"])


@router.post(
    "/score",
    response_model=ScoreResponse,
    summary="Blur score (and optional eye signal) for one photo",
    description=(
        "RMS luminance gradient over a sparse sample of the image bounded to "
        "`PC_BLUR_MAX_SIDE`. Scores below `settings.blur_threshold` are blurry. "
        "RAW files are scored on their embedded preview."
    ),
)
def score(req: ScoreRequest, settings: SettingsDep) -> ScoreResponse:
    try:
        svc = QualityService(
            scorer=SharpnessScorer(
                stride=settings.BLUR_STRIDE, max_side=settings.BLUR_MAX_SIDE
            ),
            closed_eye_threshold=settings.CLOSED_EYE_THRESHOLD,
        )
        return svc.score_file(Path(req.path), req.settings)
    except Exception as err:
        raise to_http(err) from err
