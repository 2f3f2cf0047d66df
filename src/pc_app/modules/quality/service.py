# src/pc_app/modules/quality/service.py
from __future__ import annotations

from pathlib import Path

from pc_app.core.imaging import ImageDecoder, PillowDecoder, PixelGrid
from pc_app.core.media_types import is_raw
from pc_app.modules.preview.service import PreviewService

from .eyes import EyeStateEstimator, FaceLandmarkDetector
from .schemas import QualityResult, QualitySettings, ScoreResponse
from .sharpness import SharpnessScorer


def overall_quality(blur_score: float | None, closed_eyes: bool) -> int:
    quality = min(100.0, blur_score or 0.0)
    if closed_eyes:
        quality *= 0.5
    return round(quality)


def should_auto_select(result: QualityResult, settings: QualitySettings) -> bool:
    if settings.auto_select_blurry and result.is_blurry:
        return True
    if settings.auto_select_closed_eyes and result.has_closed_eyes:
        return True
    return False


class QualityService:
    """Blur score (always) plus the optional eye signal (when a detector is wired)."""

    def __init__(
        self,
        scorer: SharpnessScorer | None = None,
        detector: FaceLandmarkDetector | None = None,
        closed_eye_threshold: float = 8.0,
    ) -> None:
        self.scorer = scorer or SharpnessScorer()
        self.eyes = EyeStateEstimator(detector, threshold=closed_eye_threshold)

    def analyze(self, grid: PixelGrid, settings: QualitySettings) -> QualityResult:
        blur_score: float | None = None
        is_blurry = False
        if settings.enable_blur_detection:
            blur_score = self.scorer.score_grid(grid)
            is_blurry = blur_score < settings.blur_threshold

        report = None
        if settings.enable_closed_eye_detection:
            report = self.eyes.estimate(grid)

        eyes = report.state if report else "unavailable"
        return QualityResult(
            blur_score=blur_score,
            is_blurry=is_blurry,
            eyes=eyes,
            face_count=report.face_count if report else 0,
            quality_score=overall_quality(blur_score, eyes == "closed"),
        )

    def score_file(
        self,
        path: Path,
        settings: QualitySettings,
        decoder: ImageDecoder | None = None,
    ) -> ScoreResponse:
        path = Path(path)
        decoder = decoder or PillowDecoder()
        if is_raw(path):
            grid = PreviewService(decoder).load(path)
        else:
            grid = decoder.decode(path.read_bytes())
        result = self.analyze(grid, settings)
        return ScoreResponse(
            path=str(path),
            width=grid.width,
            height=grid.height,
            result=result,
            auto_select=should_auto_select(result, settings),
        )
